import datetime
import typing as t

from sqlalchemy import ForeignKey, func, MetaData, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, MappedAsDataclass
from sqlalchemy.types import DateTime, JSON, Text

from fluentmark.model import ActivityID, EvaluationID, FeedbackID, MistakeID, NotificationID, QuestionID, \
    StudentID, SubmissionID, TeacherID

from .type import ShortUUIDKeyType

metadata = MetaData()


class base(MappedAsDataclass, DeclarativeBase):
    metadata = metadata
    type_annotation_map = {
        StudentID: ShortUUIDKeyType(StudentID),
        TeacherID: ShortUUIDKeyType(TeacherID),
        ActivityID: ShortUUIDKeyType(ActivityID),
        QuestionID: ShortUUIDKeyType(QuestionID),
        SubmissionID: ShortUUIDKeyType(SubmissionID),
        EvaluationID: ShortUUIDKeyType(EvaluationID),
        MistakeID: ShortUUIDKeyType(MistakeID),
        FeedbackID: ShortUUIDKeyType(FeedbackID),
        NotificationID: ShortUUIDKeyType(NotificationID),
        datetime.datetime: DateTime(timezone=True),
        dict[str, t.Any]: JSON,
        dict[str, float]: JSON,
        list[str]: JSON,
    }


# Activities


class activities(base):
    __tablename__ = "activities"

    activity_id: Mapped[ActivityID] = mapped_column(primary_key=True)
    title: Mapped[str]
    content_type: Mapped[str]
    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())
    update_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now(), onupdate=func.now())


class quiz_questions(base):
    __tablename__ = "quiz_questions"
    __table_args__ = (UniqueConstraint("activity_id", "position"),)

    question_id: Mapped[QuestionID] = mapped_column(primary_key=True)
    activity_id: Mapped[ActivityID] = mapped_column(ForeignKey("activities.activity_id"))
    position: Mapped[int]
    question_text: Mapped[str] = mapped_column(Text)
    question_type: Mapped[str]
    correct_answer: Mapped[str] = mapped_column(Text)
    points: Mapped[float] = mapped_column(default=1.0)


# Submissions


class submissions(base):
    __tablename__ = "submissions"

    submission_id: Mapped[SubmissionID] = mapped_column(primary_key=True)
    student_id: Mapped[StudentID] = mapped_column(index=True)
    activity_id: Mapped[ActivityID] = mapped_column(ForeignKey("activities.activity_id"))

    # stored as text so that unreadable payloads surface on load, not on insert
    content_type: Mapped[str]
    content: Mapped[dict[str, t.Any]]
    status: Mapped[str] = mapped_column(default="pending", index=True)

    submitted_at: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())
    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())
    update_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now(), onupdate=func.now())


# Evaluations


class evaluations(base):
    __tablename__ = "evaluations"

    evaluation_id: Mapped[EvaluationID] = mapped_column(primary_key=True)
    submission_id: Mapped[SubmissionID] = mapped_column(ForeignKey("submissions.submission_id"), unique=True)

    overall_score: Mapped[int]
    ai_confidence: Mapped[float]
    evaluated_at: Mapped[datetime.datetime]

    grammar_score: Mapped[int | None] = mapped_column(default=None)
    vocabulary_score: Mapped[int | None] = mapped_column(default=None)
    pronunciation_score: Mapped[int | None] = mapped_column(default=None)
    logic_score: Mapped[int | None] = mapped_column(default=None)
    score_breakdown: Mapped[dict[str, float]] = mapped_column(default_factory=dict, insert_default=lambda: {})

    reviewed_by_teacher: Mapped[bool] = mapped_column(default=False)
    teacher_id: Mapped[TeacherID | None] = mapped_column(default=None)
    teacher_notes: Mapped[str | None] = mapped_column(Text, default=None)
    reviewed_at: Mapped[datetime.datetime | None] = mapped_column(default=None)

    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())
    update_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now(), onupdate=func.now())


class mistakes(base):
    __tablename__ = "mistakes"

    mistake_id: Mapped[MistakeID] = mapped_column(primary_key=True)
    evaluation_id: Mapped[EvaluationID] = mapped_column(ForeignKey("evaluations.evaluation_id"), index=True)
    ordinal: Mapped[int]  # detection order within the evaluation

    category: Mapped[str]
    severity: Mapped[str]
    description: Mapped[str] = mapped_column(Text)
    suggestion: Mapped[str | None] = mapped_column(Text, default=None)
    position_start: Mapped[int | None] = mapped_column(default=None)
    position_end: Mapped[int | None] = mapped_column(default=None)
    original_text: Mapped[str | None] = mapped_column(Text, default=None)
    corrected_text: Mapped[str | None] = mapped_column(Text, default=None)
    possible_error: Mapped[bool] = mapped_column(default=False)

    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())


class feedback(base):
    __tablename__ = "feedback"

    feedback_id: Mapped[FeedbackID] = mapped_column(primary_key=True)
    evaluation_id: Mapped[EvaluationID] = mapped_column(ForeignKey("evaluations.evaluation_id"), unique=True)

    text: Mapped[str] = mapped_column(Text)
    generated_at: Mapped[datetime.datetime]
    strengths: Mapped[list[str]] = mapped_column(default_factory=list, insert_default=lambda: [])
    improvements: Mapped[list[str]] = mapped_column(default_factory=list, insert_default=lambda: [])
    recommendations: Mapped[list[str]] = mapped_column(default_factory=list, insert_default=lambda: [])
    tone: Mapped[str] = mapped_column(default="neutral")
    summarized: Mapped[bool] = mapped_column(default=False)

    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())
    update_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now(), onupdate=func.now())


# Notifications


class notifications(base):
    __tablename__ = "notifications"

    notification_id: Mapped[NotificationID] = mapped_column(primary_key=True)
    student_id: Mapped[StudentID] = mapped_column(index=True)
    type: Mapped[str]
    title: Mapped[str]
    message: Mapped[str] = mapped_column(Text)
    entity_id: Mapped[str | None] = mapped_column(default=None)
    read: Mapped[bool] = mapped_column(default=False)

    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())
