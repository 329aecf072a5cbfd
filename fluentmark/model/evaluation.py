import datetime
import typing as t

import pydantic as p

from .base import WithTimestamps
from .id import EvaluationID, SubmissionID, TeacherID

Score = t.Annotated[int, p.Field(ge=0, le=100)]


class Evaluation(WithTimestamps):
    evaluation_id: EvaluationID
    submission_id: SubmissionID

    overall_score: Score
    grammar_score: Score | None = None
    vocabulary_score: Score | None = None
    pronunciation_score: Score | None = None
    logic_score: Score | None = None

    ai_confidence: t.Annotated[float, p.Field(ge=0, le=1)]
    score_breakdown: dict[str, float] = {}
    evaluated_at: datetime.datetime

    reviewed_by_teacher: bool = False
    teacher_id: TeacherID | None = None
    teacher_notes: t.Annotated[str, p.Field(max_length=1000)] | None = None
    reviewed_at: datetime.datetime | None = None
