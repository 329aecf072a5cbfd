from __future__ import annotations

import datetime
import typing as t

import sqlalchemy as sqla

from fluentmark.core import di
from fluentmark.evaluation.errors import UnsupportedContentType
from fluentmark.model import ActivityID, ContentType, StudentID, Submission, SubmissionContent, SubmissionID, \
    SubmissionStatus

from . import Session
from .table import submissions

# statuses a submission may move to, keyed by target; anything else is a
# non-monotonic transition
TRANSITIONS_TO: dict[SubmissionStatus, tuple[SubmissionStatus, ...]] = {
    SubmissionStatus.Pending: (),
    SubmissionStatus.Evaluating: (SubmissionStatus.Pending, SubmissionStatus.Failed),
    SubmissionStatus.Completed: (SubmissionStatus.Evaluating,),
    SubmissionStatus.Failed: (SubmissionStatus.Evaluating,),
}

_content_types = frozenset(c.value for c in ContentType)


def _load(row: t.Mapping[str, t.Any]) -> Submission:
    content_type = row["content_type"]
    if content_type not in _content_types:
        raise UnsupportedContentType(content_type)
    data = dict(row)
    data["content"] = {**row["content"], "content_type": content_type}
    return Submission(**data)


def get(key: SubmissionID, session: Session = di.Provide["storage.persistent.session"]) -> Submission | None:
    """Load a submission.

    Raises UnsupportedContentType when the stored payload is not one this
    version knows how to read.
    """
    stmt = sqla.select(submissions.__table__).where(submissions.submission_id == key)
    row = session.execute(stmt).mappings().one_or_none()
    return _load(row) if row else None


def find(
    *,
    student_id: StudentID | None = None,
    activity_id: ActivityID | None = None,
    status: SubmissionStatus | None = None,
    limit: int | None = None,
    newest_first: bool = False,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[Submission, ...]:
    stmt = sqla.select(submissions.__table__)
    if student_id is not None:
        stmt = stmt.where(submissions.student_id == student_id)
    if activity_id is not None:
        stmt = stmt.where(submissions.activity_id == activity_id)
    if status is not None:
        stmt = stmt.where(submissions.status == status.value)
    if newest_first:
        stmt = stmt.order_by(submissions.submitted_at.desc(), submissions.create_time.desc())
    else:
        stmt = stmt.order_by(submissions.submitted_at, submissions.create_time)
    if limit is not None:
        stmt = stmt.limit(limit)
    rows = session.execute(stmt).mappings().all()
    return tuple(_load(row) for row in rows)


def find_pending(limit: int, session: Session = di.Provide["storage.persistent.session"]) -> tuple[Submission, ...]:
    """Pending submissions in submission-time order."""
    return find(status=SubmissionStatus.Pending, limit=limit, session=session)


def pending_ids(limit: int, session: Session = di.Provide["storage.persistent.session"]) -> tuple[SubmissionID, ...]:
    """IDs of pending submissions in submission-time order, without loading their payloads."""
    stmt = (
        sqla
        .select(submissions.submission_id)
        .where(submissions.status == SubmissionStatus.Pending.value)
        .order_by(submissions.submitted_at, submissions.create_time)
        .limit(limit)
    )
    return tuple(session.execute(stmt).scalars().all())


def create(params: SubmissionCreateParams, session: Session = di.Provide["storage.persistent.session"]) -> Submission:
    content = params["content"].model_dump(mode="json", exclude={"content_type"})
    submission = submissions(
        submission_id=SubmissionID(),
        student_id=params["student_id"],
        activity_id=params["activity_id"],
        content_type=params["content"].content_type,
        content=content,
        status=params.get("status", SubmissionStatus.Pending).value,
        submitted_at=params.get("submitted_at"),  # type: ignore[arg-type]
    )
    session.add(submission)
    session.flush()
    return get(submission.submission_id, session=session)  # type: ignore


def status_of(
    key: SubmissionID, session: Session = di.Provide["storage.persistent.session"]
) -> SubmissionStatus | None:
    stmt = sqla.select(submissions.status).where(submissions.submission_id == key)
    status = session.execute(stmt).scalar_one_or_none()
    return SubmissionStatus(status) if status is not None else None


def update_status(
    key: SubmissionID,
    status: SubmissionStatus,
    *,
    expected: t.Collection[SubmissionStatus] | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> bool:
    """Move a submission to ``status`` if its current status allows it.

    The check and the write are a single UPDATE, so of two concurrent callers
    moving a submission out of the same status only one succeeds.

    Args:
        key: The submission
        status: The target status
        expected: Acceptable current statuses; defaults to every status that may
            precede ``status``
        session: Database session

    Returns:
        True if the status was written
    """
    allowed = TRANSITIONS_TO[status]
    sources = [s for s in (expected if expected is not None else allowed) if s in allowed]
    if not sources:
        return False

    stmt = (
        sqla
        .update(submissions)
        .where(submissions.submission_id == key)
        .where(submissions.status.in_([s.value for s in sources]))
        .values(status=status.value)
    )
    result = session.execute(stmt)
    return result.rowcount == 1  # type: ignore[attr-defined]


class SubmissionCreateParams(t.TypedDict, total=False):
    student_id: t.Required[StudentID]
    activity_id: t.Required[ActivityID]
    content: t.Required[SubmissionContent]
    status: SubmissionStatus
    submitted_at: datetime.datetime
