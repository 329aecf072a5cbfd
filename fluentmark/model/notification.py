from .base import WithCtime
from .enum import NotificationType
from .id import NotificationID, StudentID


class Notification(WithCtime):
    """A message addressed to a student, written when their work is evaluated or reviewed."""

    notification_id: NotificationID
    student_id: StudentID

    type: NotificationType
    title: str
    message: str
    entity_id: str | None = None  # evaluation or feedback the message refers to
    read: bool = False
