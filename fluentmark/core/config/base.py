import typing as t

from pydantic_settings import BaseSettings as PydanticBaseSettings

from fluentmark.model import BaseModel


# NOTE: BaseModel comes second in the bases so that its by_alias=True
#       model_dump wins over pydantic's; dictConfig depends on aliases like "()"
class BaseSettings(PydanticBaseSettings, BaseModel):  # pyright: ignore [reportIncompatibleVariableOverride]
    def __init__(self, cf: dict[str, t.Any] | None = None, **kwargs: t.Any):
        # specifically allow initialization with a dict
        if cf is not None:
            kwargs = {**cf, **kwargs}
        super().__init__(**kwargs)


class BaseSecrets(BaseSettings): ...
