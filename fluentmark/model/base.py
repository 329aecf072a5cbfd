import datetime
import typing as t

import pydantic as p


class BaseModel(p.BaseModel):
    """Project-wide model base: fields may be populated by name or alias, and dumps use aliases.

    Dumping by alias matters for settings handed to the stdlib, e.g. the
    ``"()"`` and ``"class"`` keys that :func:`logging.config.dictConfig` expects.
    """

    model_config = p.ConfigDict(populate_by_name=True)

    def model_dump(self, **kwargs: t.Any) -> dict[str, t.Any]:
        kwargs.setdefault("by_alias", True)
        return super().model_dump(**kwargs)


class WithCtime(BaseModel):
    create_time: datetime.datetime


class WithTimestamps(WithCtime):
    update_time: datetime.datetime
