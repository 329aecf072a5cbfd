"""Collaborator contracts consumed by the evaluation pipeline.

:mod:`fluentmark.storage.repository` implements these over SQLAlchemy; tests
substitute mocks.
"""

from __future__ import annotations

import datetime
import typing as t
from abc import abstractmethod

from fluentmark.model import ActivityID, Evaluation, EvaluationID, Feedback, FeedbackID, Mistake, QuizQuestion, \
    StudentID, Submission, SubmissionID, SubmissionStatus, Tone

from .feedback import ComposedFeedback
from .mistakes import DetectedMistake
from .scoring import ScoreResult


class EvaluationPatch(t.TypedDict, total=False):
    overall_score: int
    grammar_score: int | None
    vocabulary_score: int | None
    pronunciation_score: int | None
    logic_score: int | None
    ai_confidence: float
    score_breakdown: dict[str, float]
    evaluated_at: datetime.datetime


class FeedbackPatch(t.TypedDict, total=False):
    text: str
    strengths: list[str]
    improvements: list[str]
    recommendations: list[str]
    tone: Tone
    summarized: bool


class SubmissionStore(t.Protocol):
    @abstractmethod
    def find_by_id(self, submission_id: SubmissionID) -> Submission:
        """Raises SubmissionNotFound, or UnsupportedContentType for an unreadable payload."""
        ...

    @abstractmethod
    def find_pending(self, limit: int) -> t.Sequence[Submission]:
        """Pending submissions, oldest first."""
        ...

    @abstractmethod
    def pending_ids(self, limit: int) -> t.Sequence[SubmissionID]:
        """Like find_pending, but unreadable payloads do not prevent listing."""
        ...

    @abstractmethod
    def status_of(self, submission_id: SubmissionID) -> SubmissionStatus: ...

    @abstractmethod
    def update_status(
        self,
        submission_id: SubmissionID,
        status: SubmissionStatus,
        *,
        expected: t.Collection[SubmissionStatus] | None = None,
    ) -> None:
        """Write a status; with ``expected``, only if the current status is one of them.

        The conditional write is atomic and is what keeps two evaluations of the
        same submission from running at once. Raises SubmissionNotEvaluable when
        the current status is not expected.
        """
        ...


class ActivityStore(t.Protocol):
    @abstractmethod
    def questions(self, activity_id: ActivityID) -> t.Sequence[QuizQuestion]: ...


class EvaluationStore(t.Protocol):
    @abstractmethod
    def create(
        self, submission_id: SubmissionID, score: ScoreResult, evaluated_at: datetime.datetime
    ) -> Evaluation: ...

    @abstractmethod
    def update(self, evaluation_id: EvaluationID, patch: EvaluationPatch) -> Evaluation: ...

    @abstractmethod
    def get_by_submission(self, submission_id: SubmissionID) -> Evaluation | None: ...


class MistakeStore(t.Protocol):
    @abstractmethod
    def create_many(self, evaluation_id: EvaluationID, mistakes: t.Sequence[DetectedMistake]) -> list[Mistake]: ...

    @abstractmethod
    def find(self, evaluation_id: EvaluationID) -> t.Sequence[Mistake]: ...

    @abstractmethod
    def delete_for_evaluation(self, evaluation_id: EvaluationID) -> int: ...


class FeedbackStore(t.Protocol):
    @abstractmethod
    def create(self, evaluation_id: EvaluationID, feedback: ComposedFeedback) -> Feedback: ...

    @abstractmethod
    def get(self, feedback_id: FeedbackID) -> Feedback | None: ...

    @abstractmethod
    def get_by_evaluation(self, evaluation_id: EvaluationID) -> Feedback | None: ...

    @abstractmethod
    def update(self, feedback_id: FeedbackID, patch: FeedbackPatch) -> Feedback: ...

    @abstractmethod
    def delete_for_evaluation(self, evaluation_id: EvaluationID) -> int: ...


class Notifier(t.Protocol):
    """Fire-and-forget student notifications. Failures raise NotificationFailure."""

    @abstractmethod
    def notify_evaluation_completed(self, student_id: StudentID, evaluation_id: EvaluationID) -> None: ...

    @abstractmethod
    def notify_feedback_ready(self, student_id: StudentID, feedback_id: FeedbackID) -> None: ...

    @abstractmethod
    def notify_teacher_review(self, student_id: StudentID, evaluation_id: EvaluationID) -> None: ...
