"""Tests for the rule tables and the rule matcher."""

from __future__ import annotations

import re

import pytest

from fluentmark.evaluation.errors import RuleEvaluationError
from fluentmark.evaluation.rules import apply_rules, count_by_rule, GRAMMAR_RULES, PRONUNCIATION_RULES, Rule, \
    SPELLING_RULES, total_weight
from fluentmark.model import ErrorCategory, Severity


def names(text: str, rules: tuple[Rule, ...] = GRAMMAR_RULES) -> list[str]:
    return [m.rule.name for m in apply_rules(text, rules)]


class TestGrammarRules(object):
    """Each grammar rule, one at a time."""

    def test_third_person_with_are(self) -> None:
        (m,) = apply_rules("She are late.", GRAMMAR_RULES)
        assert m.rule.name == "subject_verb_third_person"
        assert m.matched_text == "She are"
        assert m.correction == "She is"
        assert m.severity is Severity.Critical
        assert m.weight == 3

    def test_plural_subject_with_is(self) -> None:
        matches = apply_rules("They is here and I is too", GRAMMAR_RULES)
        assert [m.correction for m in matches] == ["They are", "I am"]

    def test_a_before_vowel(self) -> None:
        (m,) = apply_rules("I ate a apple", GRAMMAR_RULES)
        assert m.rule.name == "article_before_vowel"
        assert m.correction == "an apple"

    def test_an_before_consonant_keeps_case(self) -> None:
        (m,) = apply_rules("An dog barked", GRAMMAR_RULES)
        assert m.rule.name == "article_before_consonant"
        assert m.correction == "A dog"

    def test_existential_agreement(self) -> None:
        (m,) = apply_rules("there is many are", GRAMMAR_RULES)
        assert m.rule.name == "existential_agreement"
        assert m.correction == "there are many"

    def test_verb_form_after_negative(self) -> None:
        (m,) = apply_rules("I didn't walked home", GRAMMAR_RULES)
        assert m.rule.name == "verb_form_after_negative"
        assert m.correction == "didn't walk"

    def test_double_comparative(self) -> None:
        (m,) = apply_rules("this is more bigger", GRAMMAR_RULES)
        assert m.rule.name == "double_comparative"
        assert m.correction == "bigger"

    def test_missing_space_after_period(self) -> None:
        (m,) = apply_rules("sunny.a dog", GRAMMAR_RULES)
        assert m.rule.name == "missing_space_after_period"
        assert m.category is ErrorCategory.Punctuation
        assert m.span == (4, 7)
        assert m.correction == "y. a"

    def test_missing_space_ignores_abbreviations(self) -> None:
        """An uppercase letter before the period is not a sentence end."""
        assert names("the U.S. economy") == []

    @pytest.mark.parametrize("text", ["see e.g.x below", "i.e.the rest", "visit example.com today", "www.example.org"])
    def test_missing_space_ignores_abbreviations_and_domains(self, text: str) -> None:
        assert names(text) == []

    def test_missing_space_after_capitalized_word(self) -> None:
        (m,) = apply_rules("happy.Then we left", GRAMMAR_RULES)
        assert m.rule.name == "missing_space_after_period"
        assert m.correction == "y. T"

    def test_repeated_spaces(self) -> None:
        (m,) = apply_rules("two  spaces", GRAMMAR_RULES)
        assert m.rule.name == "repeated_spaces"
        assert m.correction == " "

    def test_paragraph_breaks_are_not_repeated_spaces(self) -> None:
        assert names("One paragraph.\n\nAnother one.") == []

    def test_clean_text(self) -> None:
        assert apply_rules("The weather is lovely today.", GRAMMAR_RULES) == []


class TestApplyRules(object):
    def test_reports_every_match_in_table_order(self) -> None:
        """Rules run in declaration order; matches within a rule run left to right."""
        text = "He are happy. Its sunny.a dog runs. She are sad."
        assert names(text) == [
            "subject_verb_third_person",
            "subject_verb_third_person",
            "missing_space_after_period",
        ]

    def test_stateless(self) -> None:
        text = "He are happy. Its sunny.a dog runs."
        assert apply_rules(text, GRAMMAR_RULES) == apply_rules(text, GRAMMAR_RULES)

    def test_overlapping_matches_of_different_rules(self) -> None:
        matches = apply_rules("it are a  apple", GRAMMAR_RULES)
        assert count_by_rule(matches) == {
            "subject_verb_third_person": 1,
            "article_before_vowel": 1,
            "repeated_spaces": 1,
        }

    def test_total_weight(self) -> None:
        matches = apply_rules("He are happy. Its sunny.a dog runs.", GRAMMAR_RULES)
        assert total_weight(matches) == 5

    def test_failing_correction_is_wrapped(self) -> None:
        def broken(m: re.Match[str]) -> str:
            raise IndexError("no such group")

        rule = Rule(
            name="broken",
            pattern=re.compile("x"),
            category=ErrorCategory.Grammar,
            severity=Severity.Minor,
            label="broken",
            suggestion="",
            correction=broken,
        )
        with pytest.raises(RuleEvaluationError) as exc_info:
            apply_rules("x", (rule,))
        assert exc_info.value.rule_name == "broken"

    def test_bad_template_is_wrapped(self) -> None:
        rule = Rule(
            name="bad_template",
            pattern=re.compile("(x)"),
            category=ErrorCategory.Grammar,
            severity=Severity.Minor,
            label="bad",
            suggestion="",
            correction=r"\2",
        )
        with pytest.raises(RuleEvaluationError):
            apply_rules("x", (rule,))


class TestSpellingRules(object):
    def test_common_misspellings(self) -> None:
        matches = apply_rules("I recieve it. It occured. Definately.", SPELLING_RULES)
        assert [m.correction for m in matches] == ["receive", "occurred", "definitely"]
        assert all(m.category is ErrorCategory.Spelling for m in matches)

    def test_your_before_article(self) -> None:
        (m,) = apply_rules("your the best", SPELLING_RULES)
        assert m.correction == "you're the"

    def test_spelling_carries_no_grammar_weight(self) -> None:
        assert total_weight(apply_rules("recieve seperate thier", SPELLING_RULES)) == 0


class TestPronunciationRules(object):
    def test_counts_sound_families(self) -> None:
        matches = apply_rules("this that the very right", PRONUNCIATION_RULES)
        assert count_by_rule(matches) == {"th_sound": 3, "r_sound": 1, "v_sound": 1}
