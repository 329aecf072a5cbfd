"""Session-bound stores backing the evaluation pipeline.

Each method runs in a transaction of its own. SQLAlchemy errors surface as
:class:`~fluentmark.evaluation.errors.StorageFailure`, so the pipeline only
ever sees evaluation errors.
"""

from __future__ import annotations

import contextlib
import datetime
import logging
import typing as t

from sqlalchemy.exc import SQLAlchemyError

from fluentmark.evaluation.errors import EvaluationNotFound, FeedbackNotFound, NotificationFailure, StorageFailure, \
    SubmissionNotEvaluable, SubmissionNotFound
from fluentmark.evaluation.feedback import ComposedFeedback
from fluentmark.evaluation.mistakes import DetectedMistake
from fluentmark.evaluation.pipeline import evaluation_patch
from fluentmark.evaluation.ports import EvaluationPatch, FeedbackPatch
from fluentmark.evaluation.scoring import ScoreResult
from fluentmark.model import ActivityID, Evaluation, EvaluationID, Feedback, FeedbackID, Mistake, \
    NotificationType, QuizQuestion, StudentID, Submission, SubmissionID, SubmissionStatus

from . import activity as activity_store
from . import evaluation as evaluation_store
from . import feedback as feedback_store
from . import mistake as mistake_store
from . import notification as notification_store
from . import Session
from . import submission as submission_store

logger = logging.getLogger(__name__)


class SessionRepository(object):
    def __init__(self, session: Session):
        self.session = session

    @contextlib.contextmanager
    def transaction(self) -> t.Generator[Session]:
        try:
            with self.session.begin():
                yield self.session
        except SQLAlchemyError as e:
            logger.error(f"{self.__class__.__name__}: storage error: {e}")
            raise StorageFailure(str(e)) from e


class SubmissionRepository(SessionRepository):
    def find_by_id(self, submission_id: SubmissionID) -> Submission:
        with self.transaction() as session:
            submission = submission_store.get(submission_id, session=session)
        if submission is None:
            raise SubmissionNotFound(f"no submission {submission_id}")
        return submission

    def find_pending(self, limit: int) -> t.Sequence[Submission]:
        with self.transaction() as session:
            return submission_store.find_pending(limit, session=session)

    def pending_ids(self, limit: int) -> t.Sequence[SubmissionID]:
        with self.transaction() as session:
            return submission_store.pending_ids(limit, session=session)

    def status_of(self, submission_id: SubmissionID) -> SubmissionStatus:
        with self.transaction() as session:
            status = submission_store.status_of(submission_id, session=session)
        if status is None:
            raise SubmissionNotFound(f"no submission {submission_id}")
        return status

    def update_status(
        self,
        submission_id: SubmissionID,
        status: SubmissionStatus,
        *,
        expected: t.Collection[SubmissionStatus] | None = None,
    ) -> None:
        with self.transaction() as session:
            updated = submission_store.update_status(submission_id, status, expected=expected, session=session)
            current = None if updated else submission_store.status_of(submission_id, session=session)

        if updated:
            logger.debug(f"submission {submission_id} is {status.value}")
            return
        if current is None:
            raise SubmissionNotFound(f"no submission {submission_id}")
        raise SubmissionNotEvaluable(
            f"submission {submission_id} cannot move from {current.value} to {status.value}"
        )


class ActivityRepository(SessionRepository):
    def questions(self, activity_id: ActivityID) -> t.Sequence[QuizQuestion]:
        with self.transaction() as session:
            return activity_store.questions(activity_id, session=session)


class EvaluationRepository(SessionRepository):
    def create(self, submission_id: SubmissionID, score: ScoreResult, evaluated_at: datetime.datetime) -> Evaluation:
        params: evaluation_store.EvaluationCreateParams = {
            "submission_id": submission_id,
            **evaluation_patch(score, evaluated_at),  # type: ignore[typeddict-item]
        }
        with self.transaction() as session:
            return evaluation_store.create(params, session=session)

    def update(self, evaluation_id: EvaluationID, patch: EvaluationPatch) -> Evaluation:
        with self.transaction() as session:
            evaluation = evaluation_store.update(evaluation_id, patch, session=session)
        if evaluation is None:
            raise EvaluationNotFound(f"no evaluation {evaluation_id}")
        return evaluation

    def get_by_submission(self, submission_id: SubmissionID) -> Evaluation | None:
        with self.transaction() as session:
            return evaluation_store.get(submission_id=submission_id, session=session)


class MistakeRepository(SessionRepository):
    def create_many(self, evaluation_id: EvaluationID, mistakes: t.Sequence[DetectedMistake]) -> list[Mistake]:
        with self.transaction() as session:
            return list(mistake_store.create_many(evaluation_id, mistakes, session=session))

    def find(self, evaluation_id: EvaluationID) -> t.Sequence[Mistake]:
        with self.transaction() as session:
            return mistake_store.find(evaluation_id, session=session)

    def delete_for_evaluation(self, evaluation_id: EvaluationID) -> int:
        with self.transaction() as session:
            return mistake_store.delete_for_evaluation(evaluation_id, session=session)


class FeedbackRepository(SessionRepository):
    def create(self, evaluation_id: EvaluationID, feedback: ComposedFeedback) -> Feedback:
        params: feedback_store.FeedbackCreateParams = {"evaluation_id": evaluation_id, **feedback}
        with self.transaction() as session:
            return feedback_store.create(params, session=session)

    def get(self, feedback_id: FeedbackID) -> Feedback | None:
        with self.transaction() as session:
            return feedback_store.get(feedback_id, session=session)

    def get_by_evaluation(self, evaluation_id: EvaluationID) -> Feedback | None:
        with self.transaction() as session:
            return feedback_store.get(evaluation_id=evaluation_id, session=session)

    def update(self, feedback_id: FeedbackID, patch: FeedbackPatch) -> Feedback:
        with self.transaction() as session:
            feedback = feedback_store.update(feedback_id, patch, session=session)
        if feedback is None:
            raise FeedbackNotFound(f"no feedback {feedback_id}")
        return feedback

    def delete_for_evaluation(self, evaluation_id: EvaluationID) -> int:
        with self.transaction() as session:
            return feedback_store.delete_for_evaluation(evaluation_id, session=session)


class StoredNotifier(SessionRepository):
    """Delivers notifications by writing them to the student's inbox table."""

    def notify_evaluation_completed(self, student_id: StudentID, evaluation_id: EvaluationID) -> None:
        self._send(
            student_id,
            NotificationType.EvaluationCompleted,
            "Evaluation completed",
            "Your submission has been evaluated.",
            str(evaluation_id),
        )

    def notify_feedback_ready(self, student_id: StudentID, feedback_id: FeedbackID) -> None:
        self._send(
            student_id,
            NotificationType.FeedbackReady,
            "Feedback ready",
            "Feedback on your submission is ready to read.",
            str(feedback_id),
        )

    def notify_teacher_review(self, student_id: StudentID, evaluation_id: EvaluationID) -> None:
        self._send(
            student_id,
            NotificationType.TeacherReview,
            "Teacher review",
            "Your teacher has reviewed your evaluation.",
            str(evaluation_id),
        )

    def _send(self, student_id: StudentID, type: NotificationType, title: str, message: str, entity_id: str) -> None:
        try:
            with self.transaction() as session:
                notification_store.create(
                    {
                        "student_id": student_id,
                        "type": type,
                        "title": title,
                        "message": message,
                        "entity_id": entity_id,
                    },
                    session=session,
                )
        except StorageFailure as e:
            raise NotificationFailure(f"could not notify student {student_id}: {e}") from e
