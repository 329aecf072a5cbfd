"""Declarative text-pattern rules and the matcher that applies them.

A rule table is an ordered tuple of :class:`Rule`. Every rule is evaluated
against the full text in declaration order, and every non-overlapping match of
a rule yields one :class:`RuleMatch`. Matches of different rules may overlap;
all of them are reported.
"""

from __future__ import annotations

import re
import typing as t
from dataclasses import dataclass

from fluentmark.model import ErrorCategory, Severity

from .errors import RuleEvaluationError

# either an ``re.Match.expand`` template or a function of the match
Correction = str | t.Callable[[re.Match[str]], str]


@dataclass(frozen=True)
class Rule:
    name: str
    pattern: re.Pattern[str]
    category: ErrorCategory
    severity: Severity
    label: str
    suggestion: str
    weight: int = 1
    correction: Correction | None = None

    def correct(self, match: re.Match[str]) -> str | None:
        if self.correction is None:
            return None
        if isinstance(self.correction, str):
            return match.expand(self.correction)
        return self.correction(match)


class RuleMatch(t.NamedTuple):
    rule: Rule
    start: int
    end: int
    matched_text: str
    correction: str | None

    @property
    def category(self) -> ErrorCategory:
        return self.rule.category

    @property
    def severity(self) -> Severity:
        return self.rule.severity

    @property
    def label(self) -> str:
        return self.rule.label

    @property
    def suggestion(self) -> str:
        return self.rule.suggestion

    @property
    def weight(self) -> int:
        return self.rule.weight

    @property
    def span(self) -> tuple[int, int]:
        return self.start, self.end


def apply_rules(text: str, rules: t.Iterable[Rule]) -> list[RuleMatch]:
    matches: list[RuleMatch] = []
    for rule in rules:
        for m in rule.pattern.finditer(text):
            try:
                correction = rule.correct(m)
            except (re.error, IndexError, ValueError, TypeError) as e:
                raise RuleEvaluationError(rule.name, e) from e
            matches.append(RuleMatch(rule, m.start(), m.end(), m.group(0), correction))
    return matches


def total_weight(matches: t.Iterable[RuleMatch]) -> int:
    return sum(m.weight for m in matches)


def count_by_rule(matches: t.Iterable[RuleMatch]) -> dict[str, int]:
    counts: dict[str, int] = {}
    for m in matches:
        counts[m.rule.name] = counts.get(m.rule.name, 0) + 1
    return counts


def _match_case(template: str, word: str) -> str:
    return word.capitalize() if template[:1].isupper() else word


def _third_person(m: re.Match[str]) -> str:
    return f"{m.group(1)} is"


def _plural_subject(m: re.Match[str]) -> str:
    subject = m.group(1)
    return f"{subject} {'am' if subject.lower() == 'i' else 'are'}"


def _an_article(m: re.Match[str]) -> str:
    return f"{_match_case(m.group(1), 'an')} {m.group(2)}"


def _a_article(m: re.Match[str]) -> str:
    return f"{_match_case(m.group(1), 'a')} {m.group(2)}"


def _rule(
    name: str,
    pattern: str,
    category: ErrorCategory,
    severity: Severity,
    label: str,
    suggestion: str,
    *,
    weight: int = 1,
    correction: Correction | None = None,
    flags: re.RegexFlag = re.IGNORECASE,
) -> Rule:
    return Rule(
        name=name,
        pattern=re.compile(pattern, flags),
        category=category,
        severity=severity,
        label=label,
        suggestion=suggestion,
        weight=weight,
        correction=correction,
    )


# fmt: off
GRAMMAR_RULES: tuple[Rule, ...] = (
    _rule(
        "subject_verb_third_person", r"\b(he|she|it)\s+(am|are)\b",
        ErrorCategory.Grammar, Severity.Critical, "subject-verb agreement",
        "Use 'is' with third-person singular (he/she/it)",
        weight=3, correction=_third_person,
    ),
    _rule(
        "subject_verb_plural", r"\b(I|you|we|they)\s+is\b",
        ErrorCategory.Grammar, Severity.Critical, "subject-verb agreement",
        "Use 'am' with I, 'are' with you/we/they",
        weight=3, correction=_plural_subject,
    ),
    _rule(
        "article_before_vowel", r"\b(a)\s+([aeiou]\w*)",
        ErrorCategory.Grammar, Severity.Major, "article usage",
        "Use 'an' before vowel sounds",
        weight=2, correction=_an_article,
    ),
    _rule(
        "article_before_consonant", r"\b(an)\s+([^\Waeiou]\w*)",
        ErrorCategory.Grammar, Severity.Major, "article usage",
        "Use 'a' before consonant sounds",
        weight=2, correction=_a_article,
    ),
    _rule(
        "existential_agreement", r"\b(there)\s+is\s+(\w+)\s+(are|were)\b",
        ErrorCategory.Grammar, Severity.Major, "existential agreement",
        "Match 'there is/are' to the number of the noun that follows",
        weight=2, correction=r"\1 are \2",
    ),
    _rule(
        "verb_form_after_negative", r"\b(don't|doesn't|didn't|won't)\s+(\w+?)ed\b",
        ErrorCategory.Grammar, Severity.Major, "verb form after negative",
        "Use base form after negative auxiliary verbs",
        weight=3, correction=r"\1 \2",
    ),
    _rule(
        "double_comparative", r"\bmore\s+(\w+er)\b",
        ErrorCategory.Grammar, Severity.Major, "double comparative",
        "Use either 'more' or '-er', not both",
        weight=2, correction=r"\1",
    ),
    _rule(
        "missing_space_after_period",
        r"(?<=[a-z])([a-z])\.(?![A-Za-z]+\.[A-Za-z])(?!(?:com|org|net|edu|gov|io)\b)([A-Za-z])",
        ErrorCategory.Punctuation, Severity.Minor, "punctuation spacing",
        "Add space after period",
        weight=2, correction=r"\1. \2", flags=re.NOFLAG,
    ),
    _rule(
        "repeated_spaces", r"[ \t]{2,}",
        ErrorCategory.Punctuation, Severity.Minor, "extra spacing",
        "Use single space between words",
        weight=1, correction=" ",
    ),
)

SPELLING_RULES: tuple[Rule, ...] = tuple(
    _rule(
        f"spelling_{name}", pattern,
        ErrorCategory.Spelling, Severity.Major, "spelling",
        f'Correct spelling: "{correct}"',
        weight=0, correction=replacement,
    )
    for name, pattern, correct, replacement in (
        ("receive", r"\brecieve\b", "receive", "receive"),
        ("occurred", r"\boccured\b", "occurred", "occurred"),
        ("separate", r"\bseperate\b", "separate", "separate"),
        ("definitely", r"\bdefinately\b", "definitely", "definitely"),
        ("their", r"\bthier\b", "their", "their"),
        ("youre", r"\byour\s+(a|an|the|is|are)\b", "you're", r"you're \1"),
    )
)

PRONUNCIATION_RULES: tuple[Rule, ...] = (
    _rule(
        "th_sound", r"\b(th|the|that|this)\b",
        ErrorCategory.Pronunciation, Severity.Major, "TH sound pronunciation",
        "Practice 'th' sound - tongue between teeth",
    ),
    _rule(
        "r_sound", r"\b(r|right|read|run)\b",
        ErrorCategory.Pronunciation, Severity.Minor, "R sound clarity",
        "Ensure clear 'r' sound without 'l' substitution",
    ),
    _rule(
        "v_sound", r"\b(v|very|have|voice)\b",
        ErrorCategory.Pronunciation, Severity.Minor, "V sound pronunciation",
        "Distinguish 'v' from 'w' - teeth touch lower lip",
    ),
)
# fmt: on
