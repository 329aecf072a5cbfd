__all__ = [
    # Base
    "BaseModel",
    "WithCtime",
    "WithTimestamps",
    # Enums
    "ContentType",
    "DeploymentEnvironment",
    "ErrorCategory",
    "NotificationType",
    "QuestionType",
    "Severity",
    "SubmissionStatus",
    "Tone",
    # ID Types
    "ActivityID",
    "EvaluationID",
    "FeedbackID",
    "MistakeID",
    "NotificationID",
    "QuestionID",
    "StudentID",
    "SubmissionID",
    "TeacherID",
    # Submissions
    "QuizAnswer",
    "QuizContent",
    "SpeakingContent",
    "Submission",
    "SubmissionContent",
    "WritingContent",
    # Activities
    "Activity",
    "QuizQuestion",
    # Evaluation
    "Evaluation",
    "Feedback",
    "Mistake",
    # Notification
    "Notification",
]

from .activity import Activity, QuizQuestion
from .base import BaseModel, WithCtime, WithTimestamps
from .enum import ContentType, DeploymentEnvironment, ErrorCategory, NotificationType, QuestionType, Severity, \
    SubmissionStatus, Tone
from .evaluation import Evaluation
from .feedback import Feedback
from .id import ActivityID, EvaluationID, FeedbackID, MistakeID, NotificationID, QuestionID, StudentID, \
    SubmissionID, TeacherID
from .mistake import Mistake
from .notification import Notification
from .submission import QuizAnswer, QuizContent, SpeakingContent, Submission, SubmissionContent, WritingContent
