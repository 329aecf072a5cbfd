import typing as t

import pydantic as p

from .base import WithCtime
from .enum import ErrorCategory, Severity
from .id import EvaluationID, MistakeID


class Mistake(WithCtime):
    mistake_id: MistakeID
    evaluation_id: EvaluationID

    category: ErrorCategory
    severity: Severity
    description: t.Annotated[str, p.Field(max_length=500)]
    suggestion: t.Annotated[str, p.Field(max_length=500)] | None = None

    # [start, end) into the evaluated text
    position_start: t.Annotated[int, p.Field(ge=0)] | None = None
    position_end: t.Annotated[int, p.Field(ge=0)] | None = None
    original_text: str | None = None
    corrected_text: str | None = None

    possible_error: bool = False

    @p.model_validator(mode="after")
    def check_span(self) -> t.Self:
        if self.position_start is not None and self.position_end is not None:
            if self.position_start > self.position_end:
                raise ValueError("position_start must not exceed position_end")
        return self
