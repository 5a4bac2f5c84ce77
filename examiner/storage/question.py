from __future__ import annotations

import typing as t

from sqlalchemy import func, select

from examiner.core import di
from examiner.model import Difficulty, Question, QuestionID

from . import Session
from .table import questions


def get(key: QuestionID, session: Session = di.Provide["storage.persistent.session"]) -> Question | None:
    stmt = select(questions.__table__).where(questions.question_id == key)
    row = session.execute(stmt).mappings().one_or_none()
    return Question(**row) if row else None


def find(
    *,
    difficulty: Difficulty | None = None,
    topic: str | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[Question, ...]:
    """Questions in bank order, optionally filtered"""
    stmt = select(questions.__table__).order_by(questions.position)
    if difficulty is not None:
        stmt = stmt.where(questions.difficulty == difficulty.value)
    if topic is not None:
        stmt = stmt.where(questions.topic == topic)
    rows = session.execute(stmt).mappings().all()
    return tuple(Question(**row) for row in rows)


def count(session: Session = di.Provide["storage.persistent.session"]) -> int:
    return session.execute(select(func.count()).select_from(questions)).scalar_one()


def topics(session: Session = di.Provide["storage.persistent.session"]) -> tuple[str, ...]:
    stmt = select(questions.topic).distinct().order_by(questions.topic)
    return tuple(session.execute(stmt).scalars().all())


def create(params: QuestionCreateParams, session: Session = di.Provide["storage.persistent.session"]) -> Question:
    position = params.get("position")
    if position is None:
        position = session.execute(select(func.coalesce(func.max(questions.position) + 1, 0))).scalar_one()
    question = questions(
        question_id=QuestionID(),
        text=params["text"],
        difficulty=params["difficulty"].value,
        topic=params["topic"],
        max_points=params["max_points"],
        position=position,
        rubric=params.get("rubric", ""),
        reference_answer=params.get("reference_answer", ""),
    )
    session.add(question)
    session.flush()
    return get(question.question_id, session=session)  # type: ignore


class QuestionCreateParams(t.TypedDict, total=False):
    text: t.Required[str]
    difficulty: t.Required[Difficulty]
    topic: t.Required[str]
    max_points: t.Required[int]
    rubric: str
    reference_answer: str
    position: int
