"""Structured and narrative feedback composition.

Everything here is table-driven: criterion thresholds, mistake categories
worth calling out, recommendations by focus area and by score band, and the
opening/closing sentences. The narrative itself is rendered from the
``feedback/narrative.j2`` template.
"""

from __future__ import annotations

import logging
import typing as t

import jinja2

from fluentmark.model import ContentType, ErrorCategory, Evaluation, Feedback, Mistake, QuizContent, \
    SpeakingContent, Submission, Tone, WritingContent
from fluentmark.model.feedback import MAX_FEEDBACK_ITEMS, MAX_FEEDBACK_TEXT

from .errors import UnsupportedContentType

logger = logging.getLogger(__name__)

TEMPLATE_NAME = "feedback/narrative.j2"

STRENGTH_THRESHOLD = 80
IMPROVEMENT_THRESHOLD = 70
ENCOURAGING_THRESHOLD = 80
MISTAKES_PER_CATEGORY = 2

T = t.TypeVar("T")


class Criterion(t.NamedTuple):
    name: str  # sub-score field or score_breakdown key
    label: str
    strength: str
    improvement: str


class Section(t.TypedDict):
    title: str
    lines: list[str]


class ComposedFeedback(t.TypedDict):
    """Feedback content not yet tied to a stored evaluation."""

    text: str
    strengths: list[str]
    improvements: list[str]
    recommendations: list[str]
    tone: Tone
    summarized: bool


# fmt: off
CRITERIA: dict[ContentType, tuple[Criterion, ...]] = {
    ContentType.Speaking: (
        Criterion("pronunciation", "Pronunciation",
                  "Clear and accurate pronunciation", "Pronunciation clarity needs attention"),
        Criterion("vocabulary", "Vocabulary",
                  "Rich and varied vocabulary usage", "Vocabulary range could be expanded"),
        Criterion("grammar", "Grammar",
                  "Strong grammatical accuracy", "Grammar accuracy requires improvement"),
    ),
    ContentType.Writing: (
        Criterion("grammar", "Grammar",
                  "Excellent grammar and sentence structure", "Grammar accuracy requires improvement"),
        Criterion("vocabulary", "Vocabulary",
                  "Sophisticated vocabulary choices", "Vocabulary variety could be enhanced"),
        Criterion("structure", "Structure",
                  "Well-organized and coherent writing", "Organization and paragraphing need work"),
    ),
    ContentType.Quiz: (
        Criterion("logic", "Logic",
                  "Strong understanding of concepts", "Several concepts need another review"),
    ),
}

# mistake categories whose descriptions are worth repeating back, per content type
CALLOUT_CATEGORIES: dict[ContentType, tuple[ErrorCategory, ...]] = {
    ContentType.Speaking: (ErrorCategory.Pronunciation,),
    ContentType.Writing: (
        ErrorCategory.Grammar, ErrorCategory.Spelling, ErrorCategory.Punctuation, ErrorCategory.Vocabulary,
    ),
    ContentType.Quiz: (ErrorCategory.Logic,),
}

FOCUS_RECOMMENDATIONS: dict[str, str] = {
    "pronunciation": "Practice pronunciation with native speaker recordings",
    "vocabulary": "Learn and use more advanced vocabulary words",
    "grammar": "Review fundamental grammar rules and practice",
    "structure": "Organize ideas into clear paragraphs with topic sentences",
    "spelling": "Use spell-check and practice common spelling patterns",
    "punctuation": "Study punctuation rules and apply them consistently",
    "logic": "Review incorrect answers to avoid similar mistakes",
    "length": "Develop ideas more fully with examples and explanations",
}

# (minimum overall score, value); first match wins
BAND_RECOMMENDATIONS: tuple[tuple[int, tuple[str, ...]], ...] = (
    (85, ("Challenge yourself with more advanced activities",)),
    (75, ("Polish the details to move from good to excellent",)),
    (60, ("Focus on the areas where mistakes occurred", "Set aside short, regular practice sessions")),
    (0, ("Review fundamental concepts thoroughly", "Practice with similar exercises before your next attempt")),
)

OPENINGS: tuple[tuple[int, str], ...] = (
    (90, "Outstanding work!"),
    (80, "Excellent effort!"),
    (70, "Good work overall."),
    (60, "Fair performance with room for growth."),
    (0, "Thank you for your submission."),
)

CLOSINGS: tuple[tuple[int, str], ...] = (
    (80, "Keep up the great work!"),
    (60, "Keep practicing and you will continue to improve!"),
    (0, "Review the material once more and try again; every attempt builds your skills."),
)
# fmt: on


def by_band(score: float, table: t.Sequence[tuple[int, T]]) -> T:
    for minimum, value in table:
        if score >= minimum:
            return value
    return table[-1][1]


def distinct(items: t.Iterable[str], limit: int | None = None) -> list[str]:
    seen: dict[str, None] = {}
    for item in items:
        seen.setdefault(item, None)
        if limit is not None and len(seen) >= limit:
            break
    return list(seen)


def criterion_score(evaluation: Evaluation, name: str) -> float | None:
    score = getattr(evaluation, f"{name}_score", None)
    if score is None:
        score = evaluation.score_breakdown.get(name)
    return score


def compose_feedback(
    evaluation: Evaluation,
    mistakes: t.Sequence[Mistake],
    submission: Submission,
    *,
    env: jinja2.Environment,
) -> ComposedFeedback:
    """Compose feedback for an evaluated submission.

    Deterministic in its inputs.

    Args:
        evaluation: The stored evaluation
        mistakes: Mistakes detected for the evaluation
        submission: The evaluated submission
        env: Jinja2 environment holding the narrative template

    Returns:
        ComposedFeedback ready to be persisted
    """
    content_type = submission.content_type
    if content_type not in CRITERIA:
        raise UnsupportedContentType(content_type.value)

    strengths: list[str] = []
    improvements: list[str] = []
    focus: list[str] = []

    for criterion in CRITERIA[content_type]:
        score = criterion_score(evaluation, criterion.name)
        if score is None:
            continue
        if score >= STRENGTH_THRESHOLD:
            strengths.append(criterion.strength)
        elif score < IMPROVEMENT_THRESHOLD:
            improvements.append(criterion.improvement)
            focus.append(criterion.name)

    extra_strengths, extra_improvements, extra_focus = content_observations(submission, evaluation)
    strengths.extend(extra_strengths)
    improvements.extend(extra_improvements)
    focus.extend(extra_focus)

    for category in CALLOUT_CATEGORIES[content_type]:
        described = [m.description for m in mistakes if m.category is category]
        if described:
            improvements.extend(distinct(described, MISTAKES_PER_CATEGORY))
            focus.append(category.value)

    strengths = distinct(strengths, MAX_FEEDBACK_ITEMS)
    improvements = distinct(improvements, MAX_FEEDBACK_ITEMS)
    recommendations = distinct(
        [FOCUS_RECOMMENDATIONS[f] for f in focus if f in FOCUS_RECOMMENDATIONS]
        + list(by_band(evaluation.overall_score, BAND_RECOMMENDATIONS)),
        MAX_FEEDBACK_ITEMS,
    )

    text = env.get_template(TEMPLATE_NAME).render(
        opening=by_band(evaluation.overall_score, OPENINGS),
        overall_score=evaluation.overall_score,
        strengths=strengths,
        improvements=improvements,
        sections=breakdown_sections(submission, evaluation, mistakes),
        closing=by_band(evaluation.overall_score, CLOSINGS),
    )
    text = text.strip()
    if len(text) > MAX_FEEDBACK_TEXT:
        logger.warning(f"feedback for evaluation {evaluation.evaluation_id} clipped from {len(text)} characters")
        text = text[: MAX_FEEDBACK_TEXT - 1].rstrip() + "…"

    return {
        "text": text,
        "strengths": strengths,
        "improvements": improvements,
        "recommendations": recommendations,
        "tone": Tone.Encouraging if evaluation.overall_score >= ENCOURAGING_THRESHOLD else Tone.Constructive,
        "summarized": False,
    }


def content_observations(submission: Submission, evaluation: Evaluation) -> tuple[list[str], list[str], list[str]]:
    """Strengths, improvements and focus areas that depend on the payload itself."""
    strengths: list[str] = []
    improvements: list[str] = []
    focus: list[str] = []

    match submission.content:
        case SpeakingContent(duration=duration):
            if duration >= 120:
                strengths.append("Good response length and detail")
        case WritingContent(word_count=word_count):
            if word_count >= 200:
                strengths.append("Comprehensive response with good detail")
            elif word_count < 100:
                improvements.append("Response is too brief")
                focus.append("length")
        case QuizContent():
            correct = int(evaluation.score_breakdown.get("correct_answers", 0))
            total = int(evaluation.score_breakdown.get("total_questions", 0))
            if correct > 0:
                strengths.append(f"Correctly answered {correct} out of {total} questions")
            if (incorrect := total - correct) > 0:
                improvements.append(f"{incorrect} incorrect {'answer' if incorrect == 1 else 'answers'}")

    return strengths, improvements, focus


def breakdown_sections(
    submission: Submission, evaluation: Evaluation, mistakes: t.Sequence[Mistake]
) -> list[Section]:
    if submission.content_type is ContentType.Quiz:
        b = evaluation.score_breakdown
        return [
            {
                "title": "Results",
                "lines": [
                    f"Correct answers: {int(b.get('correct_answers', 0))} of {int(b.get('total_questions', 0))}",
                    f"Partial credit: {int(b.get('partial_credit', 0))}",
                    f"Accuracy: {int(b.get('accuracy', 0))}%",
                ],
            }
        ]

    lines: list[str] = []
    for criterion in CRITERIA[submission.content_type]:
        score = criterion_score(evaluation, criterion.name)
        if score is not None:
            lines.append(f"{criterion.label}: {int(score)}/100")
    sections: list[Section] = [{"title": "Score Breakdown", "lines": lines}]

    if submission.content_type is ContentType.Writing:
        counts = {c: sum(1 for m in mistakes if m.category is c) for c in CALLOUT_CATEGORIES[ContentType.Writing]}
        sections.append(
            {
                "title": "Error Analysis",
                "lines": [f"{c.value.capitalize()} errors: {n}" for c, n in counts.items()],
            }
        )
    return sections


def summarize(feedback: Feedback) -> Feedback:
    """Replace narrative text with a two-clause digest.

    Idempotent: an already summarized feedback is returned unchanged.
    """
    if feedback.summarized:
        return feedback

    clauses: list[str] = []
    if feedback.strengths:
        clauses.append(f"Strengths: {', '.join(feedback.strengths[:2])}.")
    if feedback.improvements:
        clauses.append(f"Focus on: {', '.join(feedback.improvements[:2])}.")

    return feedback.model_copy(update={"text": " ".join(clauses) or feedback.text, "summarized": True})
