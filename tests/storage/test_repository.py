"""Tests for fluentmark.storage.repository."""

from __future__ import annotations

import typing as t

import pytest
from sqlalchemy.orm import Session

from fluentmark.evaluation.errors import EvaluationNotFound, FeedbackNotFound, NotificationFailure, StorageFailure, \
    SubmissionNotEvaluable, SubmissionNotFound
from fluentmark.model import EvaluationID, FeedbackID, NotificationType, StudentID, Submission, SubmissionID, \
    SubmissionStatus, WritingContent
from fluentmark.storage import notification as notification_storage
from fluentmark.storage.repository import EvaluationRepository, FeedbackRepository, StoredNotifier, \
    SubmissionRepository
from fluentmark.storage.table import notifications, submissions


class TestSubmissionRepository(object):
    def test_find_by_id_missing(self, db_session: Session) -> None:
        with pytest.raises(SubmissionNotFound):
            SubmissionRepository(db_session).find_by_id(SubmissionID())

    def test_status_of_missing(self, db_session: Session) -> None:
        with pytest.raises(SubmissionNotFound):
            SubmissionRepository(db_session).status_of(SubmissionID())

    def test_update_status_reports_conflict(
        self,
        db_session: Session,
        submission_factory: t.Callable[..., Submission],
    ) -> None:
        submission = submission_factory(WritingContent(text="hello"), status=SubmissionStatus.Completed)
        repository = SubmissionRepository(db_session)

        with pytest.raises(SubmissionNotEvaluable, match="from completed to evaluating"):
            repository.update_status(submission.submission_id, SubmissionStatus.Evaluating)

    def test_update_status_missing(self, db_session: Session) -> None:
        with pytest.raises(SubmissionNotFound):
            SubmissionRepository(db_session).update_status(SubmissionID(), SubmissionStatus.Evaluating)

    def test_database_errors_become_storage_failures(self, db_session: Session) -> None:
        """Anything SQLAlchemy raises reaches the pipeline as StorageFailure."""
        with db_session.begin():
            submissions.__table__.drop(db_session.connection())

        with pytest.raises(StorageFailure):
            SubmissionRepository(db_session).find_pending(10)


class TestEvaluationRepository(object):
    def test_update_missing(self, db_session: Session) -> None:
        with pytest.raises(EvaluationNotFound):
            EvaluationRepository(db_session).update(EvaluationID(), {"overall_score": 50})


class TestFeedbackRepository(object):
    def test_update_missing(self, db_session: Session) -> None:
        with pytest.raises(FeedbackNotFound):
            FeedbackRepository(db_session).update(FeedbackID(), {"summarized": True})


class TestStoredNotifier(object):
    def test_writes_to_inbox(self, db_session: Session) -> None:
        student_id = StudentID()
        evaluation_id = EvaluationID()

        StoredNotifier(db_session).notify_teacher_review(student_id, evaluation_id)

        with db_session.begin():
            (notice,) = notification_storage.find(student_id, session=db_session)
        assert notice.type is NotificationType.TeacherReview
        assert notice.title == "Teacher review"
        assert notice.entity_id == str(evaluation_id)

    def test_storage_errors_become_notification_failures(self, db_session: Session) -> None:
        with db_session.begin():
            notifications.__table__.drop(db_session.connection())

        with pytest.raises(NotificationFailure):
            StoredNotifier(db_session).notify_evaluation_completed(StudentID(), EvaluationID())
