"""Builders for evaluation tests that never touch the database."""

from __future__ import annotations

import datetime
import typing as t

import pytest

from fluentmark.model import ActivityID, ErrorCategory, Evaluation, EvaluationID, Feedback, FeedbackID, Mistake, \
    MistakeID, QuestionID, QuestionType, QuizQuestion, Severity, StudentID, Submission, SubmissionContent, \
    SubmissionID, SubmissionStatus

NOW = datetime.datetime(2026, 3, 14, 9, 26, 53, tzinfo=datetime.UTC)


@pytest.fixture
def make_submission() -> t.Callable[..., Submission]:
    def build(content: SubmissionContent, *, status: SubmissionStatus = SubmissionStatus.Pending) -> Submission:
        return Submission(
            submission_id=SubmissionID(),
            student_id=StudentID(),
            activity_id=ActivityID(),
            status=status,
            content=content,
            submitted_at=NOW,
            create_time=NOW,
            update_time=NOW,
        )

    return build


@pytest.fixture
def make_question() -> t.Callable[..., QuizQuestion]:
    def build(
        position: int,
        correct_answer: str,
        *,
        question_type: QuestionType = QuestionType.MultipleChoice,
        points: float = 1.0,
    ) -> QuizQuestion:
        return QuizQuestion(
            question_id=QuestionID(),
            activity_id=ActivityID(),
            position=position,
            question_text=f"Question {position + 1}",
            question_type=question_type,
            correct_answer=correct_answer,
            points=points,
        )

    return build


@pytest.fixture
def make_evaluation() -> t.Callable[..., Evaluation]:
    def build(
        submission_id: SubmissionID | None = None,
        *,
        overall_score: int = 80,
        ai_confidence: float = 0.9,
        **fields: t.Any,
    ) -> Evaluation:
        return Evaluation(
            evaluation_id=EvaluationID(),
            submission_id=submission_id or SubmissionID(),
            overall_score=overall_score,
            ai_confidence=ai_confidence,
            evaluated_at=NOW,
            create_time=NOW,
            update_time=NOW,
            **fields,
        )

    return build


@pytest.fixture
def make_mistake() -> t.Callable[..., Mistake]:
    def build(
        category: ErrorCategory,
        description: str = "Something went wrong",
        *,
        evaluation_id: EvaluationID | None = None,
        severity: Severity = Severity.Minor,
    ) -> Mistake:
        return Mistake(
            mistake_id=MistakeID(),
            evaluation_id=evaluation_id or EvaluationID(),
            category=category,
            severity=severity,
            description=description,
            create_time=NOW,
        )

    return build


@pytest.fixture
def make_feedback() -> t.Callable[..., Feedback]:
    def build(text: str = "Good work overall.", **fields: t.Any) -> Feedback:
        return Feedback(
            feedback_id=FeedbackID(),
            evaluation_id=fields.pop("evaluation_id", None) or EvaluationID(),
            text=text,
            generated_at=NOW,
            create_time=NOW,
            update_time=NOW,
            **fields,
        )

    return build
