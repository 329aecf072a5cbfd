"""Tests for fluentmark.storage.notification module."""

from __future__ import annotations

from sqlalchemy.orm import Session

from fluentmark.model import NotificationID, NotificationType, StudentID
from fluentmark.storage import notification as notification_storage


class TestNotifications(object):
    def test_create_and_find(self, db_session: Session) -> None:
        student_id = StudentID()
        with db_session.begin():
            created = notification_storage.create(
                {
                    "student_id": student_id,
                    "type": NotificationType.EvaluationCompleted,
                    "title": "Evaluation completed",
                    "message": "Your submission has been evaluated.",
                    "entity_id": "eval$abc",
                },
                session=db_session,
            )
            notification_storage.create(
                {
                    "student_id": StudentID(),
                    "type": NotificationType.FeedbackReady,
                    "title": "Feedback ready",
                    "message": "Someone else's feedback.",
                },
                session=db_session,
            )

        with db_session.begin():
            found = notification_storage.find(student_id, session=db_session)

        assert found == (created,)
        assert created.read is False
        assert created.type is NotificationType.EvaluationCompleted

    def test_filters(self, db_session: Session) -> None:
        student_id = StudentID()
        with db_session.begin():
            first = notification_storage.create(
                {
                    "student_id": student_id,
                    "type": NotificationType.EvaluationCompleted,
                    "title": "Evaluation completed",
                    "message": "Your submission has been evaluated.",
                },
                session=db_session,
            )
            second = notification_storage.create(
                {
                    "student_id": student_id,
                    "type": NotificationType.TeacherReview,
                    "title": "Teacher review",
                    "message": "Your teacher has reviewed your evaluation.",
                },
                session=db_session,
            )

        with db_session.begin():
            assert notification_storage.mark_read(first.notification_id, session=db_session) is True
            unread = notification_storage.find(student_id, unread=True, session=db_session)
            reviews = notification_storage.find(student_id, type=NotificationType.TeacherReview, session=db_session)

        assert [n.notification_id for n in unread] == [second.notification_id]
        assert [n.notification_id for n in reviews] == [second.notification_id]

    def test_mark_read_nonexistent(self, db_session: Session) -> None:
        with db_session.begin():
            assert notification_storage.mark_read(NotificationID(), session=db_session) is False
