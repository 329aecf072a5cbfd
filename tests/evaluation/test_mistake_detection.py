"""Tests for fluentmark.evaluation.mistakes."""

from __future__ import annotations

import typing as t

import pytest

from fluentmark.evaluation.errors import UnsupportedContentType
from fluentmark.evaluation.mistakes import detect_mistakes
from fluentmark.model import ErrorCategory, Evaluation, QuestionType, QuizAnswer, QuizContent, QuizQuestion, \
    Severity, SpeakingContent, Submission, WritingContent


class TestWritingMistakes(object):
    def test_rule_matches_become_mistakes(
        self,
        make_submission: t.Callable[..., Submission],
        make_evaluation: t.Callable[..., Evaluation],
    ) -> None:
        """Each grammar rule match yields one mistake carrying span and correction."""
        submission = make_submission(WritingContent(text="He are happy. Its sunny.a dog runs."))

        grammar, punctuation = detect_mistakes(submission, make_evaluation(submission.submission_id))

        assert grammar["category"] is ErrorCategory.Grammar
        assert grammar["severity"] is Severity.Critical
        assert grammar["description"] == "Grammar error: subject-verb agreement"
        assert (grammar["position_start"], grammar["position_end"]) == (0, 6)
        assert grammar["original_text"] == "He are"
        assert grammar["corrected_text"] == "He is"
        assert grammar["possible_error"] is False

        assert punctuation["category"] is ErrorCategory.Punctuation
        assert punctuation["severity"] is Severity.Minor
        assert punctuation["description"] == "Punctuation error: punctuation spacing"
        assert (punctuation["position_start"], punctuation["position_end"]) == (22, 25)
        assert punctuation["original_text"] == "y.a"
        assert punctuation["corrected_text"] == "y. a"

    def test_spelling(
        self,
        make_submission: t.Callable[..., Submission],
        make_evaluation: t.Callable[..., Evaluation],
    ) -> None:
        submission = make_submission(WritingContent(text="I will recieve it tomorrow."))

        (found,) = detect_mistakes(submission, make_evaluation(submission.submission_id))

        assert found["category"] is ErrorCategory.Spelling
        assert found["description"] == "Spelling error"
        assert found["corrected_text"] == "receive"
        assert found["suggestion"] == 'Correct spelling: "receive"'

    def test_grammar_reported_before_spelling(
        self,
        make_submission: t.Callable[..., Submission],
        make_evaluation: t.Callable[..., Evaluation],
    ) -> None:
        submission = make_submission(WritingContent(text="I recieve it and she are glad."))

        found = detect_mistakes(submission, make_evaluation(submission.submission_id))

        assert [m["category"] for m in found] == [ErrorCategory.Grammar, ErrorCategory.Spelling]

    def test_overused_word(
        self,
        make_submission: t.Callable[..., Submission],
        make_evaluation: t.Callable[..., Evaluation],
    ) -> None:
        words = ["practice"] * 6 + [f"w{i}" for i in range(50)]
        submission = make_submission(WritingContent(text=" ".join(words)))

        (found,) = detect_mistakes(submission, make_evaluation(submission.submission_id))

        assert found["category"] is ErrorCategory.Vocabulary
        assert found["description"] == 'Word "practice" is overused (6 times)'
        assert found["possible_error"] is True
        assert found["position_start"] is None

    def test_repetition_needs_more_than_five_uses(
        self,
        make_submission: t.Callable[..., Submission],
        make_evaluation: t.Callable[..., Evaluation],
    ) -> None:
        words = ["practice"] * 5 + [f"w{i}" for i in range(50)]
        submission = make_submission(WritingContent(text=" ".join(words)))

        assert detect_mistakes(submission, make_evaluation(submission.submission_id)) == []

    def test_repetition_ignored_in_short_texts(
        self,
        make_submission: t.Callable[..., Submission],
        make_evaluation: t.Callable[..., Evaluation],
    ) -> None:
        words = ["practice"] * 10 + [f"w{i}" for i in range(20)]
        submission = make_submission(WritingContent(text=" ".join(words)))

        assert detect_mistakes(submission, make_evaluation(submission.submission_id)) == []

    def test_clean_text(
        self,
        make_submission: t.Callable[..., Submission],
        make_evaluation: t.Callable[..., Evaluation],
    ) -> None:
        submission = make_submission(WritingContent(text="The weather is lovely today."))
        assert detect_mistakes(submission, make_evaluation(submission.submission_id)) == []


class TestQuizMistakes(object):
    @pytest.fixture
    def questions(self, make_question: t.Callable[..., QuizQuestion]) -> list[QuizQuestion]:
        return [
            make_question(0, "A"),
            make_question(1, "B"),
            make_question(2, "Paris", question_type=QuestionType.ShortAnswer),
            make_question(3, "D"),
        ]

    def test_incorrect_and_missing_answers(
        self,
        make_submission: t.Callable[..., Submission],
        make_evaluation: t.Callable[..., Evaluation],
        questions: list[QuizQuestion],
    ) -> None:
        content = QuizContent(
            answers=[
                QuizAnswer(question_index=0, answer="a"),
                QuizAnswer(question_index=1, answer="C"),
                QuizAnswer(question_index=2, answer="Pari"),
            ]
        )
        submission = make_submission(content)

        found = detect_mistakes(submission, make_evaluation(submission.submission_id), questions=questions)

        assert [m["description"] for m in found] == [
            "Incorrect answer to question 2",
            "Incorrect answer to question 3",
            "No answer to question 4",
        ]
        assert all(m["category"] is ErrorCategory.Logic for m in found)
        assert all(m["severity"] is Severity.Major for m in found)

        wrong, partial, missing = found
        assert wrong["original_text"] == "C"
        assert wrong["corrected_text"] == "B"
        assert wrong["suggestion"] == "Correct answer: B"
        # partially credited answers are still reported
        assert partial["original_text"] == "Pari"
        assert missing["original_text"] is None
        assert missing["corrected_text"] == "D"

    def test_all_correct(
        self,
        make_submission: t.Callable[..., Submission],
        make_evaluation: t.Callable[..., Evaluation],
        questions: list[QuizQuestion],
    ) -> None:
        content = QuizContent(
            answers=[QuizAnswer(question_index=i, answer=a) for i, a in enumerate(["A", "B", "paris", "D"])]
        )
        submission = make_submission(content)

        assert detect_mistakes(submission, make_evaluation(submission.submission_id), questions=questions) == []


class TestSpeakingMistakes(object):
    def test_low_pronunciation_and_short_response(
        self,
        make_submission: t.Callable[..., Submission],
        make_evaluation: t.Callable[..., Evaluation],
    ) -> None:
        submission = make_submission(SpeakingContent(audio_url="s3://audio/1.webm", duration=30))
        evaluation = make_evaluation(submission.submission_id, pronunciation_score=65)

        clarity, brevity = detect_mistakes(submission, evaluation)

        assert clarity["severity"] is Severity.Major
        assert clarity["description"] == "Pronunciation clarity needs improvement"
        assert clarity["possible_error"] is True
        assert brevity["severity"] is Severity.Minor
        assert brevity["description"] == "Response too short for comprehensive evaluation"
        assert brevity["possible_error"] is False

    def test_thresholds_are_strict(
        self,
        make_submission: t.Callable[..., Submission],
        make_evaluation: t.Callable[..., Evaluation],
    ) -> None:
        submission = make_submission(SpeakingContent(audio_url="s3://audio/2.webm", duration=60))
        evaluation = make_evaluation(submission.submission_id, pronunciation_score=70)

        assert detect_mistakes(submission, evaluation) == []

    def test_recurring_sound_pattern(
        self,
        make_submission: t.Callable[..., Submission],
        make_evaluation: t.Callable[..., Evaluation],
    ) -> None:
        transcript = "the cat and the dog and the bird saw the fish"
        submission = make_submission(
            SpeakingContent(audio_url="s3://audio/3.webm", duration=90, transcript=transcript)
        )
        evaluation = make_evaluation(submission.submission_id, pronunciation_score=70)

        (found,) = detect_mistakes(submission, evaluation)

        assert found["category"] is ErrorCategory.Pronunciation
        assert found["description"] == "Possible issue with TH sound pronunciation"
        assert found["possible_error"] is True

    @pytest.mark.parametrize(
        "transcript, score",
        [
            ("the cat and the dog and the bird", 70),
            ("the cat and the dog and the bird saw the fish", 75),
        ],
    )
    def test_sound_pattern_needs_recurrence_and_low_score(
        self,
        make_submission: t.Callable[..., Submission],
        make_evaluation: t.Callable[..., Evaluation],
        transcript: str,
        score: int,
    ) -> None:
        submission = make_submission(
            SpeakingContent(audio_url="s3://audio/4.webm", duration=90, transcript=transcript)
        )
        evaluation = make_evaluation(submission.submission_id, pronunciation_score=score)

        assert detect_mistakes(submission, evaluation) == []


class TestUnsupportedContent(object):
    def test_unknown_payload_is_rejected(
        self,
        make_submission: t.Callable[..., Submission],
        make_evaluation: t.Callable[..., Evaluation],
    ) -> None:
        submission = make_submission(WritingContent(text="hello")).model_copy(update={"content": object()})

        with pytest.raises(UnsupportedContentType):
            detect_mistakes(submission, make_evaluation(submission.submission_id))
