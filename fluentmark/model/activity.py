import typing as t

import pydantic as p

from .base import BaseModel, WithTimestamps
from .enum import ContentType, QuestionType
from .id import ActivityID, QuestionID


class Activity(WithTimestamps):
    activity_id: ActivityID
    title: str
    content_type: ContentType


class QuizQuestion(BaseModel):
    question_id: QuestionID
    activity_id: ActivityID

    position: int  # matches QuizAnswer.question_index
    question_text: str
    question_type: QuestionType
    correct_answer: str
    points: t.Annotated[float, p.Field(gt=0)] = 1
