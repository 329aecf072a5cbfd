__all__ = [
    # Pipeline
    "BatchEvaluator",
    "BatchResult",
    "EvaluationOutcome",
    "EvaluationPipeline",
    # Components
    "apply_rules",
    "compose_feedback",
    "detect_challenges",
    "detect_mistakes",
    "score_submission",
    "similarity",
    "summarize",
    # Errors
    "AlreadyReviewed",
    "EvaluationError",
    "EvaluationNotFound",
    "FeedbackNotFound",
    "NotificationFailure",
    "RuleEvaluationError",
    "StorageFailure",
    "SubmissionNotEvaluable",
    "SubmissionNotFound",
    "UnsupportedContentType",
]

from .challenges import detect_challenges
from .errors import AlreadyReviewed, EvaluationError, EvaluationNotFound, FeedbackNotFound, NotificationFailure, \
    RuleEvaluationError, StorageFailure, SubmissionNotEvaluable, SubmissionNotFound, UnsupportedContentType
from .feedback import compose_feedback, summarize
from .mistakes import detect_mistakes
from .pipeline import BatchEvaluator, BatchResult, EvaluationOutcome, EvaluationPipeline
from .rules import apply_rules
from .scoring import score_submission
from .similarity import similarity
