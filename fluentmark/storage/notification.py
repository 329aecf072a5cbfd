from __future__ import annotations

import typing as t

import sqlalchemy as sqla

from fluentmark.core import di
from fluentmark.model import Notification, NotificationID, NotificationType, StudentID

from . import Session
from .table import notifications


def get(key: NotificationID, session: Session = di.Provide["storage.persistent.session"]) -> Notification | None:
    stmt = sqla.select(notifications.__table__).where(notifications.notification_id == key)
    row = session.execute(stmt).mappings().one_or_none()
    return Notification(**row) if row else None


def find(
    student_id: StudentID,
    *,
    unread: bool | None = None,
    type: NotificationType | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[Notification, ...]:
    stmt = sqla.select(notifications.__table__).where(notifications.student_id == student_id)
    if unread is not None:
        stmt = stmt.where(notifications.read.is_(not unread))
    if type is not None:
        stmt = stmt.where(notifications.type == type.value)
    rows = session.execute(stmt.order_by(notifications.create_time)).mappings().all()
    return tuple(Notification(**row) for row in rows)


def create(
    params: NotificationCreateParams, session: Session = di.Provide["storage.persistent.session"]
) -> Notification:
    row = notifications(
        notification_id=NotificationID(),
        student_id=params["student_id"],
        type=params["type"].value,
        title=params["title"],
        message=params["message"],
        entity_id=params.get("entity_id"),
    )
    session.add(row)
    session.flush()
    return get(row.notification_id, session=session)  # type: ignore


def mark_read(key: NotificationID, session: Session = di.Provide["storage.persistent.session"]) -> bool:
    stmt = sqla.update(notifications.__table__).where(notifications.notification_id == key).values(read=True)
    result = session.execute(stmt)
    return result.rowcount == 1  # type: ignore[attr-defined]


class NotificationCreateParams(t.TypedDict, total=False):
    student_id: t.Required[StudentID]
    type: t.Required[NotificationType]
    title: t.Required[str]
    message: t.Required[str]
    entity_id: str | None
