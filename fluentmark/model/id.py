from __future__ import annotations

import typing as t

import annotated_types as ant
import pydantic as p
import pydantic_core.core_schema as core_schema
import shortuuid

KEY_LENGTH = 22


class ShortUUIDKey(str):
    """A shortuuid tagged with an entity prefix, e.g. ``subm$T3kW...``.

    Each entity declares its own subclass with a four-letter prefix, so a
    submission key can never be passed where an evaluation key is expected.
    Only the 22-character shortuuid is stored in the database (see
    :class:`fluentmark.storage.type.ShortUUIDKeyType`).
    """

    prefix: t.ClassVar[str]
    separator: t.ClassVar[str]

    @p.validate_call
    def __init_subclass__(cls, prefix: t.Annotated[str, ant.Len(4, 4)], separator: t.Annotated[str, ant.Len(1, 1)] = "$"):
        super().__init_subclass__()
        cls.prefix = prefix
        cls.separator = separator

    def __new__(cls, s: str | None = None, /, *, key: str | None = None) -> t.Self:
        """Parse a prefixed key ``s``, wrap a bare shortuuid ``key``, or mint a fresh key.

        ``key`` is trusted as-is; it is the path taken when reading rows back.
        """
        if key is None:
            if s is None:
                key = shortuuid.uuid()
            else:
                key = cls._split(s)
        return super().__new__(cls, f"{cls.prefix}{cls.separator}{key}")

    @classmethod
    def _split(cls, s: str) -> str:
        head = cls.prefix + cls.separator
        if not s.startswith(head):
            raise ValueError(f"invalid {cls.__name__}: key must begin with {head}")

        key = s[len(head) :]
        if len(key) != KEY_LENGTH:
            raise ValueError(f"invalid {cls.__name__}: key must have length {KEY_LENGTH}")
        alphabet = shortuuid.get_alphabet()
        if not set(key) <= set(alphabet):
            raise ValueError(f"invalid {cls.__name__}: key must comprise only {alphabet}")
        return key

    @property
    def key(self) -> str:
        return self[len(self.prefix) + len(self.separator) :]

    @classmethod
    def _coerce(cls, v: str) -> ShortUUIDKey:
        return v if isinstance(v, cls) else cls(v)

    @classmethod
    def __get_pydantic_core_schema__(cls, src: t.Any, handler: p.GetCoreSchemaHandler) -> core_schema.CoreSchema:
        # strings are validated through the constructor; instances pass straight through
        parse = core_schema.no_info_after_validator_function(cls._coerce, core_schema.str_schema())
        return core_schema.json_or_python_schema(
            json_schema=parse,
            python_schema=core_schema.union_schema([core_schema.is_instance_schema(cls), parse]),
            serialization=core_schema.plain_serializer_function_ser_schema(str),
        )

    @classmethod
    def __get_pydantic_json_schema__(cls, src: t.Any, handler: p.GetJsonSchemaHandler) -> p.json_schema.JsonSchemaValue:
        return {"type": "string", "pattern": f"^{cls.prefix}\\{cls.separator}[0-9A-Za-z]{{{KEY_LENGTH}}}$"}

    def __hash__(self) -> int:
        return str.__hash__(self)

    def __str__(self) -> str:
        return str.__str__(self)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.key}>"


# fmt: off
class StudentID(ShortUUIDKey, prefix="stud"): ...
class TeacherID(ShortUUIDKey, prefix="tchr"): ...
class ActivityID(ShortUUIDKey, prefix="actv"): ...
class QuestionID(ShortUUIDKey, prefix="qstn"): ...
class SubmissionID(ShortUUIDKey, prefix="subm"): ...
class EvaluationID(ShortUUIDKey, prefix="eval"): ...
class MistakeID(ShortUUIDKey, prefix="mstk"): ...
class FeedbackID(ShortUUIDKey, prefix="fdbk"): ...
class NotificationID(ShortUUIDKey, prefix="ntfy"): ...
# fmt: on
