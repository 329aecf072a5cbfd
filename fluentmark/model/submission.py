from __future__ import annotations

import datetime
import typing as t

import pydantic as p

from .base import BaseModel, WithTimestamps
from .enum import ContentType, SubmissionStatus
from .id import ActivityID, StudentID, SubmissionID


class SpeakingContent(BaseModel):
    content_type: t.Literal["speaking"] = "speaking"

    audio_url: str
    duration: t.Annotated[float, p.Field(ge=0)]  # seconds
    transcript: str | None = None


class WritingContent(BaseModel):
    content_type: t.Literal["writing"] = "writing"

    text: str
    word_count: t.Annotated[int, p.Field(ge=0)]
    char_count: t.Annotated[int, p.Field(ge=0)]

    @p.model_validator(mode="before")
    @classmethod
    def derive_counts(cls, data: t.Any) -> t.Any:
        if isinstance(data, dict) and "text" in data:
            text = t.cast(str, data["text"])
            data = {**data}
            data.setdefault("word_count", len(text.split()))
            data.setdefault("char_count", len(text))
        return data


class QuizAnswer(BaseModel):
    question_index: t.Annotated[int, p.Field(ge=0)]
    answer: str


class QuizContent(BaseModel):
    content_type: t.Literal["quiz"] = "quiz"

    answers: list[QuizAnswer] = []


SubmissionContent = t.Annotated[
    SpeakingContent | WritingContent | QuizContent,
    p.Field(discriminator="content_type"),
]


class Submission(WithTimestamps):
    submission_id: SubmissionID
    student_id: StudentID
    activity_id: ActivityID

    status: SubmissionStatus = SubmissionStatus.Pending
    content: SubmissionContent
    submitted_at: datetime.datetime

    @property
    def content_type(self) -> ContentType:
        return ContentType(self.content.content_type)
