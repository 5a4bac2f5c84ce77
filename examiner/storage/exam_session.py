from __future__ import annotations

import datetime
import typing as t

from sqlalchemy import select, update

from examiner.core import di
from examiner.model import BlueprintID, ExamSession, ExamSessionID, QuestionID, SessionStatus, ThreadID, UserID

from . import Session
from .table import exam_sessions, threads


def get(key: ExamSessionID, session: Session = di.Provide["storage.persistent.session"]) -> ExamSession | None:
    stmt = select(exam_sessions.__table__).where(exam_sessions.session_id == key)
    row = session.execute(stmt).mappings().one_or_none()
    return ExamSession(**row) if row else None


def find(
    *,
    respondent_id: UserID | None = None,
    status: SessionStatus | t.Collection[SessionStatus] | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[ExamSession, ...]:
    stmt = select(exam_sessions.__table__).order_by(exam_sessions.started_at, exam_sessions.session_id)
    if respondent_id is not None:
        stmt = stmt.where(exam_sessions.respondent_id == respondent_id)
    if isinstance(status, SessionStatus):
        stmt = stmt.where(exam_sessions.status == status.value)
    elif status is not None:
        stmt = stmt.where(exam_sessions.status.in_([s.value for s in status]))
    rows = session.execute(stmt).mappings().all()
    return tuple(ExamSession(**row) for row in rows)


def create(params: SessionCreateParams, session: Session = di.Provide["storage.persistent.session"]) -> ExamSession:
    """Insert the session and one open thread per question, in the given order

    Atomic only within the caller's transaction.
    """
    exam_session = exam_sessions(
        session_id=ExamSessionID(),
        blueprint_id=params["blueprint_id"],
        respondent_id=params["respondent_id"],
        status=SessionStatus.InProgress.value,
    )
    session.add(exam_session)
    session.flush()

    session.add_all([
        threads(
            thread_id=ThreadID(),
            session_id=exam_session.session_id,
            question_id=question_id,
            position=position,
        )
        for position, question_id in enumerate(params["question_ids"])
    ])
    session.flush()
    return get(exam_session.session_id, session=session)  # type: ignore


def transition(
    key: ExamSessionID,
    from_: SessionStatus,
    to: SessionStatus,
    *,
    submitted_at: datetime.datetime | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> bool:
    """Compare-and-set the session status; False when the session was not in `from_`"""
    values: dict[str, t.Any] = {"status": to.value}
    if submitted_at is not None:
        values["submitted_at"] = submitted_at
    stmt = (
        update(exam_sessions)
        .where(exam_sessions.session_id == key, exam_sessions.status == from_.value)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    result = session.execute(stmt)
    return result.rowcount == 1  # pyright: ignore [reportAttributeAccessIssue]


class SessionCreateParams(t.TypedDict):
    blueprint_id: BlueprintID
    respondent_id: UserID
    question_ids: t.Sequence[QuestionID]
