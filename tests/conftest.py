"""Pytest fixtures for fluentmark tests.

The container is booted once per session in the ``test`` environment, which
points persistent storage at an in-memory SQLite database. Every test that
touches the database gets a freshly created schema, dropped again afterwards.

Usage:
    def test_something(submission_factory):
        submission = submission_factory(WritingContent(text="..."))
"""

from __future__ import annotations

import datetime
import os
import typing as t
from pathlib import Path

import jinja2
import pydantic as p
import pytest
import sqlalchemy
from sqlalchemy.orm import Session

import fluentmark
from fluentmark.core import FluentmarkContainer, TimestampProvider
from fluentmark.core.container.evaluation import provide_pipeline
from fluentmark.evaluation import EvaluationPipeline
from fluentmark.evaluation.randomness import FixedRandom
from fluentmark.model import Activity, ActivityID, ContentType, DeploymentEnvironment, Evaluation, QuestionType, \
    QuizQuestion, StudentID, Submission, SubmissionContent, SubmissionID, SubmissionStatus
from fluentmark.storage import activity as activity_storage
from fluentmark.storage import evaluation as evaluation_storage
from fluentmark.storage import submission as submission_storage
from fluentmark.storage.table import metadata

FIXED_NOW = datetime.datetime(2026, 3, 14, 9, 26, 53, tzinfo=datetime.UTC)


@pytest.fixture(scope="session")
def container() -> t.Generator[FluentmarkContainer]:
    """Boot the DI container for the test session."""
    ct = FluentmarkContainer()
    root = Path(os.path.dirname(fluentmark.__file__)).parent

    FluentmarkContainer.boot(
        ct,
        debug=True,
        env=DeploymentEnvironment.Test,
        config_root=p.FileUrl(f"file://{root}/config"),
        override=(),
    )

    yield ct

    ct.shutdown_resources()


@pytest.fixture
def engine(container: FluentmarkContainer) -> t.Generator[sqlalchemy.Engine]:
    """The in-memory engine, with all tables created for the duration of one test."""
    engine = container.storage().persistent().engine()
    metadata.create_all(engine)
    yield engine
    metadata.drop_all(engine)


@pytest.fixture
def db_session(engine: sqlalchemy.Engine) -> t.Generator[Session]:
    """Provide a session configured like the production one.

    autobegin=False matches production: every unit of work runs inside an
    explicit ``session.begin()``.
    """
    session = Session(bind=engine, autobegin=False, expire_on_commit=False, autoflush=False)
    yield session
    session.close()


@pytest.fixture(scope="session")
def template_env(container: FluentmarkContainer) -> jinja2.Environment:
    return container.template().text()


@pytest.fixture
def utcnow() -> TimestampProvider:
    """Provide a timestamp provider frozen at FIXED_NOW."""
    return lambda: FIXED_NOW


@pytest.fixture
def pipeline(
    db_session: Session, template_env: jinja2.Environment, utcnow: TimestampProvider
) -> EvaluationPipeline:
    """A pipeline over the test database whose randomness always draws 0.5."""
    return provide_pipeline(db_session, template_env, lambda: FixedRandom(0.5), utcnow)


@pytest.fixture
def activity_factory(db_session: Session) -> t.Callable[..., Activity]:
    def create_activity(content_type: ContentType = ContentType.Writing, title: str = "Test Activity") -> Activity:
        with db_session.begin():
            return activity_storage.create({"title": title, "content_type": content_type}, session=db_session)

    return create_activity


@pytest.fixture
def question_factory(
    db_session: Session, activity_factory: t.Callable[..., Activity]
) -> t.Callable[..., QuizQuestion]:
    """Factory fixture for quiz questions.

    Usage:
        def test_something(question_factory):
            q = question_factory(activity_id, position=0, correct_answer="A")
    """

    def create_question(
        activity_id: ActivityID | None = None,
        *,
        position: int = 0,
        correct_answer: str = "A",
        question_type: QuestionType = QuestionType.MultipleChoice,
        points: float = 1.0,
        question_text: str | None = None,
    ) -> QuizQuestion:
        if activity_id is None:
            activity_id = activity_factory(ContentType.Quiz).activity_id
        with db_session.begin():
            return activity_storage.add_question(
                {
                    "activity_id": activity_id,
                    "position": position,
                    "question_text": question_text or f"Question {position + 1}",
                    "question_type": question_type,
                    "correct_answer": correct_answer,
                    "points": points,
                },
                session=db_session,
            )

    return create_question


@pytest.fixture
def submission_factory(
    db_session: Session, activity_factory: t.Callable[..., Activity]
) -> t.Callable[..., Submission]:
    """Factory fixture for submissions.

    An activity of the matching content type is created unless one is given.
    """

    def create_submission(
        content: SubmissionContent,
        *,
        activity_id: ActivityID | None = None,
        student_id: StudentID | None = None,
        status: SubmissionStatus = SubmissionStatus.Pending,
        submitted_at: datetime.datetime | None = None,
    ) -> Submission:
        if activity_id is None:
            activity_id = activity_factory(ContentType(content.content_type)).activity_id
        with db_session.begin():
            params: submission_storage.SubmissionCreateParams = {
                "student_id": student_id or StudentID(),
                "activity_id": activity_id,
                "content": content,
                "status": status,
            }
            if submitted_at is not None:
                params["submitted_at"] = submitted_at
            return submission_storage.create(params, session=db_session)

    return create_submission


@pytest.fixture
def evaluation_factory(db_session: Session, utcnow: TimestampProvider) -> t.Callable[..., Evaluation]:
    def create_evaluation(
        submission_id: SubmissionID,
        *,
        overall_score: int = 80,
        ai_confidence: float = 0.9,
        **scores: t.Any,
    ) -> Evaluation:
        with db_session.begin():
            return evaluation_storage.create(
                {
                    "submission_id": submission_id,
                    "overall_score": overall_score,
                    "ai_confidence": ai_confidence,
                    "evaluated_at": utcnow(),
                    **scores,
                },
                session=db_session,
            )

    return create_evaluation
