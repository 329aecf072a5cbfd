"""Errors raised by the evaluation pipeline."""

from __future__ import annotations

import typing as t


class EvaluationError(Exception):
    """Base class for evaluation errors.

    ``user_message`` is what callers may show to a student; the exception text
    itself is for logs.
    """

    user_message: t.ClassVar[str] = "Evaluation failed, retry available"


class UnsupportedContentType(EvaluationError):
    def __init__(self, content_type: str):
        self.content_type = content_type
        super().__init__(f"unsupported content type: {content_type!r}")


class RuleEvaluationError(EvaluationError):
    """A rule table entry failed while being applied; indicates a defect in the table."""

    def __init__(self, rule_name: str, cause: Exception):
        self.rule_name = rule_name
        super().__init__(f"rule {rule_name!r} failed: {cause}")


class StorageFailure(EvaluationError):
    """A persistence collaborator call failed."""


class NotificationFailure(EvaluationError):
    """Notification dispatch failed. Never fatal to an evaluation."""


class SubmissionNotFound(EvaluationError):
    pass


class SubmissionNotEvaluable(EvaluationError):
    """The submission is not in a state from which evaluation may start."""


class EvaluationNotFound(EvaluationError):
    pass


class AlreadyReviewed(EvaluationError):
    pass


class FeedbackNotFound(EvaluationError):
    pass
