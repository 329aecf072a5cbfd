"""Recurring challenge detection across a student's recent evaluations."""

from __future__ import annotations

import collections
import logging
import typing as t

from fluentmark.model import ErrorCategory, Mistake

from .scoring import round_half_up

logger = logging.getLogger(__name__)

# a category recurring in this share of the window is a challenge
CHALLENGE_RATIO = 0.3

RECOMMENDATIONS: dict[ErrorCategory, str] = {
    ErrorCategory.Grammar: "Review grammar rules and practice with exercises",
    ErrorCategory.Vocabulary: "Expand vocabulary through reading and word lists",
    ErrorCategory.Pronunciation: "Practice pronunciation with audio resources",
    ErrorCategory.Spelling: "Use spell-check tools and memorize common patterns",
    ErrorCategory.Punctuation: "Study punctuation rules and apply consistently",
    ErrorCategory.Logic: "Improve analytical thinking and problem-solving skills",
}


class Challenge(t.TypedDict):
    category: ErrorCategory
    frequency: int
    percentage: int
    severity: t.Literal["high", "medium"]
    recommendation: str


def detect_challenges(mistakes: t.Iterable[Mistake], *, window: int) -> list[Challenge]:
    """Find error categories that recur across the last ``window`` submissions.

    Args:
        mistakes: Mistakes of the evaluations within the window
        window: Number of submissions the mistakes were drawn from

    Returns:
        Challenges, most frequent first
    """
    if window <= 0:
        return []

    counts = collections.Counter(m.category for m in mistakes)
    challenges: list[Challenge] = [
        {
            "category": category,
            "frequency": count,
            "percentage": round_half_up(count / window * 100),
            "severity": "high" if count / window >= CHALLENGE_RATIO * 2 else "medium",
            "recommendation": RECOMMENDATIONS[category],
        }
        for category, count in counts.most_common()
        if count / window >= CHALLENGE_RATIO
    ]
    logger.debug(f"found {len(challenges)} recurring challenges over {window} submissions")
    return challenges
