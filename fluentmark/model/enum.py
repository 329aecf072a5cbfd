import enum


class DeploymentEnvironment(enum.Enum):
    Production = "production"
    Development = "development"
    Staging = "staging"
    Test = "test"
    Local = "local"


class ContentType(enum.Enum):
    Speaking = "speaking"
    Writing = "writing"
    Quiz = "quiz"


class SubmissionStatus(enum.Enum):
    Pending = "pending"
    Evaluating = "evaluating"
    Completed = "completed"
    Failed = "failed"


class ErrorCategory(enum.Enum):
    Grammar = "grammar"
    Vocabulary = "vocabulary"
    Pronunciation = "pronunciation"
    Logic = "logic"
    Spelling = "spelling"
    Punctuation = "punctuation"


class Severity(enum.Enum):
    Critical = "critical"
    Major = "major"
    Minor = "minor"


class Tone(enum.Enum):
    Encouraging = "encouraging"
    Constructive = "constructive"
    Neutral = "neutral"


class QuestionType(enum.Enum):
    MultipleChoice = "multiple-choice"
    TrueFalse = "true-false"
    ShortAnswer = "short-answer"


class NotificationType(enum.Enum):
    EvaluationCompleted = "evaluation_completed"
    FeedbackReady = "feedback_ready"
    TeacherReview = "teacher_review"
