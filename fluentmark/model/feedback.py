import datetime
import typing as t

import pydantic as p

from .base import WithTimestamps
from .enum import Tone
from .id import EvaluationID, FeedbackID

MAX_FEEDBACK_TEXT = 5000
MAX_FEEDBACK_ITEMS = 5

FeedbackItems = t.Annotated[list[str], p.Field(max_length=MAX_FEEDBACK_ITEMS)]


class Feedback(WithTimestamps):
    feedback_id: FeedbackID
    evaluation_id: EvaluationID

    text: t.Annotated[str, p.Field(max_length=MAX_FEEDBACK_TEXT)]
    strengths: FeedbackItems = []
    improvements: FeedbackItems = []
    recommendations: FeedbackItems = []

    tone: Tone = Tone.Neutral
    summarized: bool = False
    generated_at: datetime.datetime
