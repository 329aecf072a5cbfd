from __future__ import annotations

import typing as t

from sqlalchemy import select

from fluentmark.core import di
from fluentmark.model import Activity, ActivityID, ContentType, QuestionID, QuestionType, QuizQuestion

from . import Session
from .table import activities, quiz_questions


def get(key: ActivityID, session: Session = di.Provide["storage.persistent.session"]) -> Activity | None:
    stmt = select(activities.__table__).where(activities.activity_id == key)
    row = session.execute(stmt).mappings().one_or_none()
    return Activity(**row) if row else None


def create(params: ActivityCreateParams, session: Session = di.Provide["storage.persistent.session"]) -> Activity:
    activity = activities(
        activity_id=ActivityID(),
        title=params["title"],
        content_type=params["content_type"].value,
    )
    session.add(activity)
    session.flush()
    return get(activity.activity_id, session=session)  # type: ignore


def questions(
    activity_id: ActivityID, session: Session = di.Provide["storage.persistent.session"]
) -> tuple[QuizQuestion, ...]:
    stmt = (
        select(quiz_questions.__table__)
        .where(quiz_questions.activity_id == activity_id)
        .order_by(quiz_questions.position)
    )
    rows = session.execute(stmt).mappings().all()
    return tuple(QuizQuestion(**row) for row in rows)


def add_question(
    params: QuestionCreateParams, session: Session = di.Provide["storage.persistent.session"]
) -> QuizQuestion:
    question = quiz_questions(
        question_id=QuestionID(),
        activity_id=params["activity_id"],
        position=params["position"],
        question_text=params["question_text"],
        question_type=params["question_type"].value,
        correct_answer=params["correct_answer"],
        points=params.get("points", 1.0),
    )
    session.add(question)
    session.flush()
    stmt = select(quiz_questions.__table__).where(quiz_questions.question_id == question.question_id)
    return QuizQuestion(**session.execute(stmt).mappings().one())


class ActivityCreateParams(t.TypedDict):
    title: str
    content_type: ContentType


class QuestionCreateParams(t.TypedDict, total=False):
    activity_id: t.Required[ActivityID]
    position: t.Required[int]
    question_text: t.Required[str]
    question_type: t.Required[QuestionType]
    correct_answer: t.Required[str]
    points: float
