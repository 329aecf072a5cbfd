"""Weighted multi-criterion scoring for speaking, writing and quiz submissions."""

from __future__ import annotations

import logging
import math
import re
import typing as t

from fluentmark.model import QuestionType, QuizContent, QuizQuestion, SpeakingContent, Submission, WritingContent

from .errors import UnsupportedContentType
from .randomness import RandomSource, uniform
from .rules import apply_rules, GRAMMAR_RULES, total_weight
from .similarity import normalize, similarity

logger = logging.getLogger(__name__)

WORD_RE = re.compile(r"\b\w+\b")
PARAGRAPH_RE = re.compile(r"\n\s*\n+")
SENTENCE_RE = re.compile(r"[.!?]+")

SPEAKING_WEIGHTS = {"pronunciation": 0.4, "vocabulary": 0.3, "grammar": 0.3}
WRITING_WEIGHTS = {"grammar": 0.4, "vocabulary": 0.35, "structure": 0.25}

QUIZ_CONFIDENCE = 0.95

# (minimum similarity, credit) for short answers, checked in order
SHORT_ANSWER_CREDIT: tuple[tuple[float, float], ...] = (
    (0.9, 1.0),
    (0.7, 0.75),
    (0.5, 0.5),
)


class SubScores(t.TypedDict, total=False):
    grammar: int
    vocabulary: int
    pronunciation: int
    logic: int


class ScoreResult(t.TypedDict):
    """Scores for one submission, before persistence."""

    overall_score: int
    sub_scores: SubScores
    ai_confidence: float
    score_breakdown: dict[str, float]


def round_half_up(x: float) -> int:
    return math.floor(x + 0.5)


def weighted(scores: t.Mapping[str, float], weights: t.Mapping[str, float]) -> int:
    return round_half_up(sum(scores[k] * w for k, w in weights.items()))


def score_submission(
    submission: Submission,
    *,
    rng: RandomSource,
    questions: t.Sequence[QuizQuestion] = (),
) -> ScoreResult:
    """Score a submission according to its content type.

    Args:
        submission: The submission to score
        rng: Randomness source for the heuristics that vary by design
        questions: The activity's quiz questions; required for quiz submissions

    Returns:
        ScoreResult with overall score, applicable sub-scores, confidence and breakdown

    Raises:
        UnsupportedContentType: content is not a speaking, writing or quiz payload
    """
    match submission.content:
        case SpeakingContent() as content:
            return score_speaking(content, rng=rng)
        case WritingContent() as content:
            return score_writing(content, rng=rng)
        case QuizContent() as content:
            return score_quiz(content, questions)
        case other:
            raise UnsupportedContentType(getattr(other, "content_type", type(other).__name__))


def grammar_score(text: str) -> int:
    """100 less two points per weighted rule match, deduction capped at 40."""
    error_weight = total_weight(apply_rules(text, GRAMMAR_RULES))
    deduction = min(40, error_weight * 2)
    return max(60, 100 - deduction)


def pronunciation_proxy(duration: float) -> float:
    """Monotonically increasing in duration, saturating at 100."""
    return min(100.0, duration / 120 * 50 + 30)


def score_speaking(content: SpeakingContent, *, rng: RandomSource) -> ScoreResult:
    pronunciation = round_half_up(pronunciation_proxy(content.duration) * uniform(rng, 0.8, 1.0))
    vocabulary = round_half_up(uniform(rng, 60, 95))
    if content.transcript:
        grammar = grammar_score(content.transcript)
    else:
        # without a transcript grammar is unmeasured; assume baseline quality
        grammar = round_half_up(uniform(rng, 65, 95))

    overall = weighted(
        {"pronunciation": pronunciation, "vocabulary": vocabulary, "grammar": grammar}, SPEAKING_WEIGHTS
    )
    confidence = uniform(rng, 0.75, 0.95)
    breakdown: dict[str, float] = {
        "fluency": round_half_up(uniform(rng, 70, 95)),
        "clarity": pronunciation,
        "pace": round_half_up(uniform(rng, 65, 95)),
        "duration": content.duration,
    }
    return {
        "overall_score": overall,
        "sub_scores": {"pronunciation": pronunciation, "vocabulary": vocabulary, "grammar": grammar},
        "ai_confidence": confidence,
        "score_breakdown": breakdown,
    }


def lexical_metrics(text: str) -> tuple[float, float]:
    """Return (lexical diversity, advanced-word ratio) of a text, both over its word tokens."""
    words = WORD_RE.findall(text.lower())
    if not words:
        return 0.0, 0.0
    diversity = len(set(words)) / len(words)
    advanced = sum(1 for w in words if len(w) > 7) / len(words)
    return diversity, advanced


def vocabulary_score(text: str) -> int:
    diversity, advanced = lexical_metrics(text)
    return round_half_up(min(95.0, 60 + diversity * 50 + advanced * 100))


def structure_score(text: str, word_count: int) -> int:
    paragraphs = [s for s in PARAGRAPH_RE.split(text) if s.strip()]
    sentences = [s for s in SENTENCE_RE.split(text) if s.strip()]

    score = 60
    if 100 <= word_count <= 500:
        score += 15
    elif 50 <= word_count < 100:
        score += 10

    if 2 <= len(paragraphs) <= 5:
        score += 15
    elif len(paragraphs) >= 1:
        score += 8

    if sentences:
        average = word_count / len(sentences)
        if 10 <= average <= 25:
            score += 10

    return min(95, score)


def score_writing(content: WritingContent, *, rng: RandomSource) -> ScoreResult:
    text = content.text
    grammar = grammar_score(text)
    vocabulary = vocabulary_score(text)
    structure = structure_score(text, content.word_count)
    diversity, advanced = lexical_metrics(text)

    overall = weighted({"grammar": grammar, "vocabulary": vocabulary, "structure": structure}, WRITING_WEIGHTS)
    confidence = uniform(rng, 0.85, 0.97)
    breakdown: dict[str, float] = {
        "structure": structure,
        "coherence": round_half_up(uniform(rng, 70, 95)),
        "mechanics": grammar,
        "creativity": round_half_up(uniform(rng, 65, 95)),
        "lexical_diversity": round(diversity, 4),
        "advanced_word_ratio": round(advanced, 4),
        "word_count": content.word_count,
    }
    return {
        "overall_score": overall,
        "sub_scores": {"grammar": grammar, "vocabulary": vocabulary},
        "ai_confidence": confidence,
        "score_breakdown": breakdown,
    }


def answer_credit(answer: str, question: QuizQuestion) -> float:
    """Credit fraction in [0, 1] earned by an answer to a question."""
    submitted, expected = normalize(answer), normalize(question.correct_answer)
    match question.question_type:
        case QuestionType.MultipleChoice | QuestionType.TrueFalse:
            return 1.0 if submitted == expected else 0.0
        case QuestionType.ShortAnswer:
            sim = similarity(submitted, expected)
            for threshold, credit in SHORT_ANSWER_CREDIT:
                if sim >= threshold:
                    return credit
            return 0.0


def answers_by_question(content: QuizContent, questions: t.Sequence[QuizQuestion]) -> dict[int, str]:
    """Index submitted answers by question position; later duplicates are ignored."""
    positions = {q.position for q in questions}
    answers: dict[int, str] = {}
    for a in content.answers:
        if a.question_index not in positions:
            logger.warning(f"ignoring answer to unknown question {a.question_index}")
            continue
        answers.setdefault(a.question_index, a.answer)
    return answers


def score_quiz(content: QuizContent, questions: t.Sequence[QuizQuestion]) -> ScoreResult:
    answers = answers_by_question(content, questions)

    correct = partial = 0
    earned = total = 0.0
    for question in questions:
        total += question.points
        if question.position not in answers:
            continue
        credit = answer_credit(answers[question.position], question)
        if credit == 1.0:
            correct += 1
        elif credit > 0:
            partial += 1
        earned += credit * question.points

    logic = round_half_up(earned / total * 100) if total > 0 else 0
    accuracy = round_half_up(correct / len(questions) * 100) if questions else 0
    return {
        "overall_score": logic,
        "sub_scores": {"logic": logic},
        "ai_confidence": QUIZ_CONFIDENCE,
        "score_breakdown": {
            "correct_answers": correct,
            "partial_credit": partial,
            "total_questions": len(questions),
            "accuracy": accuracy,
            "earned_points": earned,
            "total_points": total,
        },
    }
