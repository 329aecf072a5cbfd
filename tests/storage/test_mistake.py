"""Tests for fluentmark.storage.mistake module."""

from __future__ import annotations

import datetime
import typing as t

import pytest
from sqlalchemy.orm import Session

from fluentmark.evaluation.mistakes import DetectedMistake, mistake
from fluentmark.model import ErrorCategory, Evaluation, EvaluationID, Severity, StudentID, Submission, WritingContent
from fluentmark.storage import mistake as mistake_storage

T0 = datetime.datetime(2026, 3, 1, 12, 0, tzinfo=datetime.UTC)


@pytest.fixture
def evaluation(
    submission_factory: t.Callable[..., Submission],
    evaluation_factory: t.Callable[..., Evaluation],
) -> Evaluation:
    submission = submission_factory(WritingContent(text="He are happy. Its sunny.a dog runs."))
    return evaluation_factory(submission.submission_id, overall_score=86)


def detected() -> list[DetectedMistake]:
    return [
        mistake(
            ErrorCategory.Grammar,
            Severity.Critical,
            "Grammar error: subject-verb agreement",
            "Use 'is' with third-person singular (he/she/it)",
            span=(0, 6),
            original_text="He are",
            corrected_text="He is",
        ),
        mistake(
            ErrorCategory.Punctuation,
            Severity.Minor,
            "Punctuation error: punctuation spacing",
            "Add space after period",
            span=(22, 25),
            original_text="y.a",
            corrected_text="y. a",
        ),
        mistake(
            ErrorCategory.Vocabulary,
            Severity.Minor,
            'Word "happy" is overused (6 times)',
            "Use synonyms for variety",
            possible_error=True,
        ),
    ]


class TestCreateMany(object):
    """Tests for mistake_storage.create_many()."""

    def test_detection_order_is_kept(self, db_session: Session, evaluation: Evaluation) -> None:
        with db_session.begin():
            created = mistake_storage.create_many(evaluation.evaluation_id, detected(), session=db_session)

        assert [m.category for m in created] == [
            ErrorCategory.Grammar,
            ErrorCategory.Punctuation,
            ErrorCategory.Vocabulary,
        ]
        grammar = created[0]
        assert (grammar.position_start, grammar.position_end) == (0, 6)
        assert grammar.corrected_text == "He is"
        assert grammar.severity is Severity.Critical
        assert created[2].possible_error is True
        assert created[2].position_start is None

    def test_nothing_to_create(self, db_session: Session, evaluation: Evaluation) -> None:
        with db_session.begin():
            assert mistake_storage.create_many(evaluation.evaluation_id, [], session=db_session) == ()


class TestFind(object):
    def test_find_by_category(self, db_session: Session, evaluation: Evaluation) -> None:
        with db_session.begin():
            mistake_storage.create_many(evaluation.evaluation_id, detected(), session=db_session)

        with db_session.begin():
            found = mistake_storage.find(
                evaluation.evaluation_id, category=ErrorCategory.Punctuation, session=db_session
            )

        (punctuation,) = found
        assert punctuation.original_text == "y.a"
        with db_session.begin():
            assert mistake_storage.get(punctuation.mistake_id, session=db_session) == punctuation

    def test_find_unknown_evaluation(self, db_session: Session) -> None:
        with db_session.begin():
            assert mistake_storage.find(EvaluationID(), session=db_session) == ()


class TestDeleteForEvaluation(object):
    def test_delete(self, db_session: Session, evaluation: Evaluation) -> None:
        with db_session.begin():
            mistake_storage.create_many(evaluation.evaluation_id, detected(), session=db_session)

        with db_session.begin():
            deleted = mistake_storage.delete_for_evaluation(evaluation.evaluation_id, session=db_session)
            remaining = mistake_storage.find(evaluation.evaluation_id, session=db_session)

        assert deleted == 3
        assert remaining == ()


class TestFindRecentForStudent(object):
    """Tests for mistake_storage.find_recent_for_student()."""

    def test_window_covers_latest_submissions(
        self,
        db_session: Session,
        submission_factory: t.Callable[..., Submission],
        evaluation_factory: t.Callable[..., Evaluation],
    ) -> None:
        student_id = StudentID()
        evaluations = []
        for day in range(3):
            submission = submission_factory(
                WritingContent(text=f"Day {day}."),
                student_id=student_id,
                submitted_at=T0 + datetime.timedelta(days=day),
            )
            evaluations.append(evaluation_factory(submission.submission_id))
        # an unevaluated submission still counts toward the window
        submission_factory(
            WritingContent(text="Not evaluated yet."),
            student_id=student_id,
            submitted_at=T0 + datetime.timedelta(days=3),
        )

        with db_session.begin():
            for e in evaluations:
                mistake_storage.create_many(e.evaluation_id, detected()[:1], session=db_session)

        with db_session.begin():
            recent = mistake_storage.find_recent_for_student(student_id, limit=3, session=db_session)

        assert recent.submissions == 3
        # days 1 and 2 are the only evaluated submissions within the window
        assert len(recent.mistakes) == 2
        assert {m.evaluation_id for m in recent.mistakes} == {e.evaluation_id for e in evaluations[1:]}

    def test_student_without_submissions(self, db_session: Session) -> None:
        with db_session.begin():
            recent = mistake_storage.find_recent_for_student(StudentID(), session=db_session)

        assert recent.submissions == 0
        assert recent.mistakes == ()
