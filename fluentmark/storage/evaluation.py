from __future__ import annotations

import datetime
import typing as t

import sqlalchemy as sqla

from fluentmark.core import di
from fluentmark.evaluation.errors import AlreadyReviewed, EvaluationNotFound
from fluentmark.model import Evaluation, EvaluationID, SubmissionID, TeacherID

from . import Session
from .table import evaluations


@t.overload
def get(
    evaluation_id: EvaluationID,
    *,
    session: Session = ...,
) -> Evaluation | None: ...


@t.overload
def get(
    evaluation_id: None = None,
    *,
    submission_id: SubmissionID,
    session: Session = ...,
) -> Evaluation | None: ...


def get(
    evaluation_id: EvaluationID | None = None,
    *,
    submission_id: SubmissionID | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> Evaluation | None:
    """Get an evaluation by ID or submission_id.

    Exactly one lookup key must be provided.
    """
    if evaluation_id is not None:
        stmt = sqla.select(evaluations.__table__).where(evaluations.evaluation_id == evaluation_id)
    elif submission_id is not None:
        stmt = sqla.select(evaluations.__table__).where(evaluations.submission_id == submission_id)
    else:
        raise ValueError("exactly one of evaluation_id or submission_id must be provided")

    row = session.execute(stmt).mappings().one_or_none()
    return Evaluation(**row) if row else None


def create(params: EvaluationCreateParams, session: Session = di.Provide["storage.persistent.session"]) -> Evaluation:
    """Create the evaluation of a submission.

    The submission_id column is unique; a second evaluation of the same
    submission fails with IntegrityError.
    """
    evaluation_id = EvaluationID()
    stmt = sqla.insert(evaluations).values(evaluation_id=evaluation_id, **params)
    session.execute(stmt)
    session.flush()
    result = get(evaluation_id, session=session)
    assert result is not None
    return result


def update(
    key: EvaluationID,
    params: EvaluationUpdateParams,
    session: Session = di.Provide["storage.persistent.session"],
) -> Evaluation | None:
    if params:
        stmt = sqla.update(evaluations).where(evaluations.evaluation_id == key).values(**params)
        session.execute(stmt)
        session.flush()
    return get(key, session=session)


def review(
    key: EvaluationID,
    *,
    teacher_id: TeacherID,
    notes: str | None = None,
    scores: ReviewScores | None = None,
    reviewed_at: datetime.datetime | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> Evaluation:
    """Record a teacher's review of an evaluation.

    A review is final: the evaluation can be reviewed once.

    Args:
        key: The evaluation to review
        teacher_id: The reviewing teacher
        notes: Optional notes for the student, at most 1000 characters
        scores: Optional score overrides
        reviewed_at: Review time, defaults to now
        session: Database session

    Raises:
        EvaluationNotFound: no such evaluation
        AlreadyReviewed: the evaluation was reviewed before
    """
    if notes is not None and len(notes) > 1000:
        raise ValueError("teacher notes are limited to 1000 characters")
    for name, score in (scores or {}).items():
        if not 0 <= score <= 100:
            raise ValueError(f"{name} must lie in [0, 100]: {score}")

    stmt = (
        sqla
        .update(evaluations)
        .where(evaluations.evaluation_id == key)
        .where(evaluations.reviewed_by_teacher.is_(False))
        .values(
            reviewed_by_teacher=True,
            teacher_id=teacher_id,
            teacher_notes=notes,
            reviewed_at=reviewed_at or datetime.datetime.now(datetime.UTC),
            **(scores or {}),
        )
    )
    result = session.execute(stmt)
    if result.rowcount != 1:  # type: ignore[attr-defined]
        if get(key, session=session) is None:
            raise EvaluationNotFound(f"no evaluation {key}")
        raise AlreadyReviewed(f"evaluation {key} has already been reviewed")
    session.flush()
    return get(key, session=session)  # type: ignore


class EvaluationCreateParams(t.TypedDict, total=False):
    submission_id: t.Required[SubmissionID]
    overall_score: t.Required[int]
    ai_confidence: t.Required[float]
    evaluated_at: t.Required[datetime.datetime]
    grammar_score: int | None
    vocabulary_score: int | None
    pronunciation_score: int | None
    logic_score: int | None
    score_breakdown: dict[str, float]


class EvaluationUpdateParams(t.TypedDict, total=False):
    overall_score: int
    grammar_score: int | None
    vocabulary_score: int | None
    pronunciation_score: int | None
    logic_score: int | None
    ai_confidence: float
    score_breakdown: dict[str, float]
    evaluated_at: datetime.datetime


class ReviewScores(t.TypedDict, total=False):
    overall_score: int
    grammar_score: int
    vocabulary_score: int
    pronunciation_score: int
    logic_score: int
