"""Mistake detection for evaluated submissions."""

from __future__ import annotations

import collections
import logging
import typing as t

from fluentmark.model import ErrorCategory, Evaluation, QuizContent, QuizQuestion, Severity, SpeakingContent, \
    Submission, WritingContent

from .errors import UnsupportedContentType
from .rules import apply_rules, count_by_rule, GRAMMAR_RULES, PRONUNCIATION_RULES, RuleMatch, SPELLING_RULES
from .scoring import answers_by_question, WORD_RE
from .similarity import normalize

logger = logging.getLogger(__name__)

# speaking without a transcript
LOW_PRONUNCIATION_SCORE = 70
SHORT_RESPONSE_SECONDS = 60

# speaking with a transcript: a sound family must recur more than this many
# times while pronunciation is below the ceiling
PATTERN_RECURRENCE = 3
PATTERN_SCORE_CEILING = 75

# vocabulary repetition
REPEATED_WORD_MIN_LENGTH = 5
REPEATED_WORD_THRESHOLD = 5
REPEATED_WORD_MIN_TOKENS = 50


class DetectedMistake(t.TypedDict):
    """A mistake not yet tied to a stored evaluation."""

    category: ErrorCategory
    severity: Severity
    description: str
    suggestion: str | None
    position_start: int | None
    position_end: int | None
    original_text: str | None
    corrected_text: str | None
    possible_error: bool


def mistake(
    category: ErrorCategory,
    severity: Severity,
    description: str,
    suggestion: str | None = None,
    *,
    span: tuple[int, int] | None = None,
    original_text: str | None = None,
    corrected_text: str | None = None,
    possible_error: bool = False,
) -> DetectedMistake:
    return {
        "category": category,
        "severity": severity,
        "description": description,
        "suggestion": suggestion,
        "position_start": span[0] if span else None,
        "position_end": span[1] if span else None,
        "original_text": original_text,
        "corrected_text": corrected_text,
        "possible_error": possible_error,
    }


def detect_mistakes(
    submission: Submission,
    evaluation: Evaluation,
    *,
    questions: t.Sequence[QuizQuestion] = (),
) -> list[DetectedMistake]:
    """Detect concrete mistakes in a scored submission.

    Args:
        submission: The evaluated submission
        evaluation: Its evaluation; scores gate some of the detectors
        questions: The activity's quiz questions; required for quiz submissions

    Returns:
        Mistakes in detection order
    """
    match submission.content:
        case SpeakingContent() as content:
            found = detect_speaking(content, evaluation)
        case WritingContent() as content:
            found = detect_writing(content)
        case QuizContent() as content:
            found = detect_quiz(content, questions)
        case other:
            raise UnsupportedContentType(getattr(other, "content_type", type(other).__name__))

    logger.debug(f"detected {len(found)} mistakes for submission {submission.submission_id}")
    return found


def detect_speaking(content: SpeakingContent, evaluation: Evaluation) -> list[DetectedMistake]:
    found: list[DetectedMistake] = []
    pronunciation = evaluation.pronunciation_score if evaluation.pronunciation_score is not None else 100

    if not content.transcript:
        if pronunciation < LOW_PRONUNCIATION_SCORE:
            found.append(
                mistake(
                    ErrorCategory.Pronunciation,
                    Severity.Major,
                    "Pronunciation clarity needs improvement",
                    "Focus on clear articulation of consonants and vowels",
                    possible_error=True,
                )
            )
        if content.duration < SHORT_RESPONSE_SECONDS:
            found.append(
                mistake(
                    ErrorCategory.Pronunciation,
                    Severity.Minor,
                    "Response too short for comprehensive evaluation",
                    "Aim for at least 1-2 minutes of speaking time",
                )
            )
        return found

    if pronunciation >= PATTERN_SCORE_CEILING:
        return found

    counts = count_by_rule(apply_rules(content.transcript, PRONUNCIATION_RULES))
    for rule in PRONUNCIATION_RULES:
        if counts.get(rule.name, 0) > PATTERN_RECURRENCE:
            found.append(
                mistake(
                    rule.category,
                    rule.severity,
                    f"Possible issue with {rule.label}",
                    rule.suggestion,
                    possible_error=True,
                )
            )
    return found


def _from_match(m: RuleMatch, description: str) -> DetectedMistake:
    return mistake(
        m.category,
        m.severity,
        description,
        m.suggestion,
        span=m.span,
        original_text=m.matched_text,
        corrected_text=m.correction if m.correction is not None else m.matched_text,
    )


def detect_writing(content: WritingContent) -> list[DetectedMistake]:
    text = content.text
    found: list[DetectedMistake] = []

    for m in apply_rules(text, GRAMMAR_RULES):
        found.append(_from_match(m, f"{m.category.value.capitalize()} error: {m.label}"))

    for m in apply_rules(text, SPELLING_RULES):
        found.append(_from_match(m, "Spelling error"))

    words = WORD_RE.findall(text.lower())
    if len(words) > REPEATED_WORD_MIN_TOKENS:
        frequency = collections.Counter(w for w in words if len(w) >= REPEATED_WORD_MIN_LENGTH)
        for word, count in frequency.items():
            if count > REPEATED_WORD_THRESHOLD:
                found.append(
                    mistake(
                        ErrorCategory.Vocabulary,
                        Severity.Minor,
                        f'Word "{word}" is overused ({count} times)',
                        "Use synonyms for variety",
                        possible_error=True,
                    )
                )
    return found


def detect_quiz(content: QuizContent, questions: t.Sequence[QuizQuestion]) -> list[DetectedMistake]:
    """One logic mistake per question not answered exactly; no fuzzy credit here."""
    answers = answers_by_question(content, questions)
    found: list[DetectedMistake] = []
    for question in sorted(questions, key=lambda q: q.position):
        number = question.position + 1
        answer = answers.get(question.position)
        if answer is None:
            description = f"No answer to question {number}"
        elif normalize(answer) != normalize(question.correct_answer):
            description = f"Incorrect answer to question {number}"
        else:
            continue
        found.append(
            mistake(
                ErrorCategory.Logic,
                Severity.Major,
                description,
                f"Correct answer: {question.correct_answer}",
                original_text=answer,
                corrected_text=question.correct_answer,
            )
        )
    return found
