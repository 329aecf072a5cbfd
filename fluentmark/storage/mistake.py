from __future__ import annotations

import typing as t

import sqlalchemy as sqla

from fluentmark.core import di
from fluentmark.model import ErrorCategory, EvaluationID, Mistake, MistakeID, Severity, StudentID

from . import Session
from .table import evaluations, mistakes, submissions


class RecentMistakes(t.NamedTuple):
    """Mistakes from a student's most recent submissions, and how many submissions were looked at."""

    submissions: int
    mistakes: tuple[Mistake, ...]


def _columns() -> tuple[sqla.ColumnElement[t.Any], ...]:
    return tuple(c for c in mistakes.__table__.columns if c.name != "ordinal")


def get(key: MistakeID, session: Session = di.Provide["storage.persistent.session"]) -> Mistake | None:
    stmt = sqla.select(*_columns()).where(mistakes.mistake_id == key)
    row = session.execute(stmt).mappings().one_or_none()
    return Mistake(**row) if row else None


def find(
    evaluation_id: EvaluationID,
    *,
    category: ErrorCategory | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[Mistake, ...]:
    """Mistakes of an evaluation in detection order."""
    stmt = sqla.select(*_columns()).where(mistakes.evaluation_id == evaluation_id)
    if category is not None:
        stmt = stmt.where(mistakes.category == category.value)
    rows = session.execute(stmt.order_by(mistakes.ordinal)).mappings().all()
    return tuple(Mistake(**row) for row in rows)


def create_many(
    evaluation_id: EvaluationID,
    params: t.Sequence[MistakeCreateParams],
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[Mistake, ...]:
    if not params:
        return ()
    values = [
        {
            "mistake_id": MistakeID(),
            "evaluation_id": evaluation_id,
            "ordinal": i,
            "category": p["category"].value,
            "severity": p["severity"].value,
            "description": p["description"],
            "suggestion": p.get("suggestion"),
            "position_start": p.get("position_start"),
            "position_end": p.get("position_end"),
            "original_text": p.get("original_text"),
            "corrected_text": p.get("corrected_text"),
            "possible_error": p.get("possible_error", False),
        }
        for i, p in enumerate(params)
    ]
    session.execute(sqla.insert(mistakes.__table__), values)
    session.flush()
    return find(evaluation_id, session=session)


def delete_for_evaluation(
    evaluation_id: EvaluationID, session: Session = di.Provide["storage.persistent.session"]
) -> int:
    stmt = sqla.delete(mistakes.__table__).where(mistakes.evaluation_id == evaluation_id)
    result = session.execute(stmt)
    return result.rowcount  # type: ignore[attr-defined]


def find_recent_for_student(
    student_id: StudentID,
    *,
    limit: int = 10,
    session: Session = di.Provide["storage.persistent.session"],
) -> RecentMistakes:
    """Mistakes from the evaluations of a student's ``limit`` latest submissions."""
    recent = (
        sqla
        .select(submissions.submission_id)
        .where(submissions.student_id == student_id)
        .order_by(submissions.submitted_at.desc(), submissions.create_time.desc())
        .limit(limit)
        .subquery()
    )
    count = session.execute(sqla.select(sqla.func.count()).select_from(recent)).scalar_one()

    stmt = (
        sqla
        .select(*_columns())
        .join(evaluations, mistakes.evaluation_id == evaluations.evaluation_id)
        .where(evaluations.submission_id.in_(sqla.select(recent.c.submission_id)))
        .order_by(mistakes.evaluation_id, mistakes.ordinal)
    )
    rows = session.execute(stmt).mappings().all()
    return RecentMistakes(count, tuple(Mistake(**row) for row in rows))


class MistakeCreateParams(t.TypedDict, total=False):
    category: t.Required[ErrorCategory]
    severity: t.Required[Severity]
    description: t.Required[str]
    suggestion: str | None
    position_start: int | None
    position_end: int | None
    original_text: str | None
    corrected_text: str | None
    possible_error: bool
