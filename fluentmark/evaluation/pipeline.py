"""Evaluation pipeline orchestrator."""

from __future__ import annotations

import concurrent.futures
import datetime
import logging
import random
import typing as t

import jinja2

from fluentmark.model import Evaluation, Feedback, FeedbackID, Mistake, QuizContent, QuizQuestion, Submission, \
    SubmissionID, SubmissionStatus

from .errors import EvaluationError, EvaluationNotFound, FeedbackNotFound, SubmissionNotEvaluable
from .feedback import compose_feedback, summarize
from .mistakes import detect_mistakes
from .ports import ActivityStore, EvaluationPatch, EvaluationStore, FeedbackStore, MistakeStore, Notifier, \
    SubmissionStore
from .randomness import RandomSourceFactory
from .scoring import score_submission, ScoreResult

logger = logging.getLogger(__name__)

EVALUABLE = (SubmissionStatus.Pending, SubmissionStatus.Failed)


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.UTC)


class EvaluationOutcome(t.NamedTuple):
    """Everything the pipeline produced for one submission."""

    submission: Submission
    evaluation: Evaluation
    mistakes: list[Mistake]
    feedback: Feedback


def evaluation_patch(score: ScoreResult, evaluated_at: datetime.datetime) -> EvaluationPatch:
    sub = score["sub_scores"]
    return {
        "overall_score": score["overall_score"],
        "grammar_score": sub.get("grammar"),
        "vocabulary_score": sub.get("vocabulary"),
        "pronunciation_score": sub.get("pronunciation"),
        "logic_score": sub.get("logic"),
        "ai_confidence": score["ai_confidence"],
        "score_breakdown": score["score_breakdown"],
        "evaluated_at": evaluated_at,
    }


class EvaluationPipeline:
    """Runs one submission through scoring, mistake detection and feedback.

    The submission's status is the lock: ``evaluate`` atomically moves it from
    pending (or failed) to evaluating before doing any work, and leaves it
    completed or failed. Stage failures mark the submission failed and
    re-raise. Re-running a failed submission replaces its partial results
    rather than adding to them.
    """

    def __init__(
        self,
        submissions: SubmissionStore,
        activities: ActivityStore,
        evaluations: EvaluationStore,
        mistakes: MistakeStore,
        feedback: FeedbackStore,
        notifier: Notifier,
        *,
        env: jinja2.Environment,
        rng_factory: RandomSourceFactory = random.Random,
        clock: t.Callable[[], datetime.datetime] = utcnow,
    ) -> None:
        """Initialize the pipeline.

        Args:
            submissions: Submission lookup and status writes
            activities: Quiz question lookup
            evaluations: Evaluation persistence
            mistakes: Mistake persistence
            feedback: Feedback persistence
            notifier: Student notifications, best-effort
            env: Jinja2 environment holding the feedback templates
            rng_factory: Produces one randomness source per evaluation
            clock: Timestamp provider for ``evaluated_at``
        """
        self._submissions = submissions
        self._activities = activities
        self._evaluations = evaluations
        self._mistakes = mistakes
        self._feedback = feedback
        self._notifier = notifier
        self._env = env
        self._rng_factory = rng_factory
        self._clock = clock

    def evaluate(self, submission_id: SubmissionID) -> EvaluationOutcome:
        """Evaluate a pending or failed submission.

        Raises:
            SubmissionNotEvaluable: the submission is evaluating or completed
            EvaluationError: any stage failed; the submission is now failed
        """
        self._submissions.update_status(submission_id, SubmissionStatus.Evaluating, expected=EVALUABLE)
        logger.info("evaluating submission", extra={"submission_id": str(submission_id)})

        try:
            outcome = self._run(submission_id)
        except Exception as e:
            logger.error(
                "evaluation failed",
                extra={"submission_id": str(submission_id), "error": repr(e)},
            )
            self._mark_failed(submission_id)
            raise

        logger.info(
            "evaluation completed",
            extra={
                "submission_id": str(submission_id),
                "evaluation_id": str(outcome.evaluation.evaluation_id),
                "overall_score": outcome.evaluation.overall_score,
                "mistakes": len(outcome.mistakes),
            },
        )
        self._notify(outcome)
        return outcome

    def retry(self, submission_id: SubmissionID) -> EvaluationOutcome:
        """Evaluate again if the last attempt failed.

        A completed submission is not re-evaluated; its stored outcome is
        returned as is.
        """
        match self._submissions.status_of(submission_id):
            case SubmissionStatus.Completed:
                logger.info("submission already evaluated", extra={"submission_id": str(submission_id)})
                return self.outcome(submission_id)
            case SubmissionStatus.Evaluating:
                raise SubmissionNotEvaluable(f"submission {submission_id} is being evaluated")
            case _:
                return self.evaluate(submission_id)

    def outcome(self, submission_id: SubmissionID) -> EvaluationOutcome:
        """Load the stored results of an evaluated submission."""
        submission = self._submissions.find_by_id(submission_id)
        evaluation = self._evaluations.get_by_submission(submission_id)
        if evaluation is None:
            raise EvaluationNotFound(f"no evaluation for submission {submission_id}")
        feedback = self._feedback.get_by_evaluation(evaluation.evaluation_id)
        if feedback is None:
            raise FeedbackNotFound(f"no feedback for evaluation {evaluation.evaluation_id}")
        mistakes = list(self._mistakes.find(evaluation.evaluation_id))
        return EvaluationOutcome(submission, evaluation, mistakes, feedback)

    def summarize_feedback(self, feedback_id: FeedbackID) -> Feedback:
        feedback = self._feedback.get(feedback_id)
        if feedback is None:
            raise FeedbackNotFound(f"no feedback {feedback_id}")
        if feedback.summarized:
            return feedback
        summary = summarize(feedback)
        return self._feedback.update(feedback_id, {"text": summary.text, "summarized": True})

    def _run(self, submission_id: SubmissionID) -> EvaluationOutcome:
        submission = self._submissions.find_by_id(submission_id)

        questions: t.Sequence[QuizQuestion] = ()
        if isinstance(submission.content, QuizContent):
            questions = self._activities.questions(submission.activity_id)

        score = score_submission(submission, rng=self._rng_factory(), questions=questions)
        evaluation = self._store_evaluation(submission_id, score)

        detected = detect_mistakes(submission, evaluation, questions=questions)
        mistakes = self._mistakes.create_many(evaluation.evaluation_id, detected)

        composed = compose_feedback(evaluation, mistakes, submission, env=self._env)
        feedback = self._feedback.create(evaluation.evaluation_id, composed)

        self._submissions.update_status(submission_id, SubmissionStatus.Completed)
        return EvaluationOutcome(submission, evaluation, mistakes, feedback)

    def _store_evaluation(self, submission_id: SubmissionID, score: ScoreResult) -> Evaluation:
        evaluated_at = self._clock()
        existing = self._evaluations.get_by_submission(submission_id)
        if existing is None:
            return self._evaluations.create(submission_id, score, evaluated_at)

        # left over from a failed attempt; replace everything it owns
        logger.debug("replacing partial evaluation", extra={"evaluation_id": str(existing.evaluation_id)})
        self._feedback.delete_for_evaluation(existing.evaluation_id)
        self._mistakes.delete_for_evaluation(existing.evaluation_id)
        return self._evaluations.update(existing.evaluation_id, evaluation_patch(score, evaluated_at))

    def _mark_failed(self, submission_id: SubmissionID) -> None:
        try:
            self._submissions.update_status(submission_id, SubmissionStatus.Failed)
        except EvaluationError as e:
            # the original failure is what the caller needs to see
            logger.error(
                "could not mark submission failed",
                extra={"submission_id": str(submission_id), "error": repr(e)},
            )

    def _notify(self, outcome: EvaluationOutcome) -> None:
        student_id = outcome.submission.student_id
        notices = (
            (self._notifier.notify_evaluation_completed, outcome.evaluation.evaluation_id),
            (self._notifier.notify_feedback_ready, outcome.feedback.feedback_id),
        )
        for send, entity_id in notices:
            # best-effort; the submission is already completed
            try:
                send(student_id, entity_id)
            except Exception as e:
                logger.warning(
                    "notification failed",
                    extra={"submission_id": str(outcome.submission.submission_id), "error": repr(e)},
                )


class BatchResult(t.NamedTuple):
    submission_id: SubmissionID
    outcome: EvaluationOutcome | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class BatchEvaluator:
    """Evaluates pending submissions, oldest first.

    Submissions are independent, so with ``max_workers`` above one they run on
    a thread pool. Every submission gets a pipeline of its own from
    ``pipeline_factory`` so that workers never share a session.
    """

    def __init__(
        self,
        submissions: SubmissionStore,
        pipeline_factory: t.Callable[[], EvaluationPipeline],
        *,
        max_workers: int = 1,
    ) -> None:
        if max_workers < 1:
            raise ValueError(f"max_workers must be positive: {max_workers}")
        self._submissions = submissions
        self._pipeline_factory = pipeline_factory
        self.max_workers = max_workers

    def run(self, limit: int) -> list[BatchResult]:
        pending = list(self._submissions.pending_ids(limit))
        logger.info("starting batch evaluation", extra={"pending": len(pending), "workers": self.max_workers})

        if self.max_workers == 1:
            pipeline = self._pipeline_factory()
            results = [self._evaluate(pipeline, submission_id) for submission_id in pending]
        else:
            with concurrent.futures.ThreadPoolExecutor(self.max_workers, thread_name_prefix="fluentmark") as pool:
                results = list(pool.map(self._evaluate_isolated, pending))

        failed = sum(1 for r in results if not r.ok)
        logger.info("batch evaluation finished", extra={"evaluated": len(results) - failed, "failed": failed})
        return results

    def _evaluate_isolated(self, submission_id: SubmissionID) -> BatchResult:
        return self._evaluate(self._pipeline_factory(), submission_id)

    @staticmethod
    def _evaluate(pipeline: EvaluationPipeline, submission_id: SubmissionID) -> BatchResult:
        try:
            return BatchResult(submission_id, outcome=pipeline.evaluate(submission_id))
        except Exception as e:
            logger.warning(f"submission {submission_id} not evaluated: {e}")
            return BatchResult(submission_id, error=e)
