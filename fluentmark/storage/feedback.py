from __future__ import annotations

import datetime
import typing as t

import sqlalchemy as sqla

from fluentmark.core import di
from fluentmark.model import EvaluationID, Feedback, FeedbackID, Tone

from . import Session
from .table import feedback


@t.overload
def get(
    feedback_id: FeedbackID,
    *,
    session: Session = ...,
) -> Feedback | None: ...


@t.overload
def get(
    feedback_id: None = None,
    *,
    evaluation_id: EvaluationID,
    session: Session = ...,
) -> Feedback | None: ...


def get(
    feedback_id: FeedbackID | None = None,
    *,
    evaluation_id: EvaluationID | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> Feedback | None:
    """Get feedback by ID or by the evaluation it belongs to."""
    if feedback_id is not None:
        stmt = sqla.select(feedback.__table__).where(feedback.feedback_id == feedback_id)
    elif evaluation_id is not None:
        stmt = sqla.select(feedback.__table__).where(feedback.evaluation_id == evaluation_id)
    else:
        raise ValueError("exactly one of feedback_id or evaluation_id must be provided")

    row = session.execute(stmt).mappings().one_or_none()
    return Feedback(**row) if row else None


def create(params: FeedbackCreateParams, session: Session = di.Provide["storage.persistent.session"]) -> Feedback:
    row = feedback(
        feedback_id=FeedbackID(),
        evaluation_id=params["evaluation_id"],
        text=params["text"],
        generated_at=params.get("generated_at") or datetime.datetime.now(datetime.UTC),
        strengths=list(params.get("strengths", [])),
        improvements=list(params.get("improvements", [])),
        recommendations=list(params.get("recommendations", [])),
        tone=params.get("tone", Tone.Neutral).value,
        summarized=params.get("summarized", False),
    )
    session.add(row)
    session.flush()
    return get(row.feedback_id, session=session)  # type: ignore


def update(
    key: FeedbackID,
    params: FeedbackUpdateParams,
    session: Session = di.Provide["storage.persistent.session"],
) -> Feedback | None:
    stmt = sqla.select(feedback).where(feedback.feedback_id == key)
    row = session.execute(stmt).scalar_one_or_none()
    if row is None:
        return None
    for field, value in params.items():
        setattr(row, field, value.value if isinstance(value, Tone) else value)
    session.flush()
    return get(key, session=session)


def delete_for_evaluation(
    evaluation_id: EvaluationID, session: Session = di.Provide["storage.persistent.session"]
) -> int:
    stmt = sqla.delete(feedback.__table__).where(feedback.evaluation_id == evaluation_id)
    result = session.execute(stmt)
    return result.rowcount  # type: ignore[attr-defined]


class FeedbackCreateParams(t.TypedDict, total=False):
    evaluation_id: t.Required[EvaluationID]
    text: t.Required[str]
    strengths: list[str]
    improvements: list[str]
    recommendations: list[str]
    tone: Tone
    summarized: bool
    generated_at: datetime.datetime


class FeedbackUpdateParams(t.TypedDict, total=False):
    text: str
    strengths: list[str]
    improvements: list[str]
    recommendations: list[str]
    tone: Tone
    summarized: bool
