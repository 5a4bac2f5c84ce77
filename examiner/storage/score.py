from __future__ import annotations

from sqlalchemy import func, select, update

from examiner.core import di
from examiner.lib.sql import upsert as upsert_row
from examiner.model import ExamSessionID, Score, ThreadID

from . import Session
from .table import scores, threads


def get(thread_id: ThreadID, session: Session = di.Provide["storage.persistent.session"]) -> Score | None:
    stmt = select(scores.__table__).where(scores.thread_id == thread_id)
    row = session.execute(stmt).mappings().one_or_none()
    return Score(**row) if row else None


def find(
    *,
    session_id: ExamSessionID,
    session: Session = di.Provide["storage.persistent.session"],
) -> dict[ThreadID, Score]:
    """Scores of a session's threads, keyed by thread"""
    stmt = (
        select(scores.__table__)
        .join(threads, threads.thread_id == scores.thread_id)
        .where(threads.session_id == session_id)
    )
    rows = session.execute(stmt).mappings().all()
    return {row["thread_id"]: Score(**row) for row in rows}


def upsert(
    thread_id: ThreadID,
    *,
    auto_score: float,
    auto_feedback: str,
    session: Session = di.Provide["storage.persistent.session"],
) -> Score:
    """Write the automatic score; a repeated write replaces it and keeps any override"""
    upsert_row(
        session,
        scores.__table__,  # pyright: ignore [reportArgumentType]
        {"thread_id": thread_id, "auto_score": auto_score, "auto_feedback": auto_feedback},
        index_elements=["thread_id"],
        update=["auto_score", "auto_feedback"],
        extra_set={"update_time": func.now()},
    )
    session.flush()
    return get(thread_id, session=session)  # type: ignore


def set_override(
    thread_id: ThreadID,
    *,
    override_score: float,
    override_comment: str | None,
    session: Session = di.Provide["storage.persistent.session"],
) -> Score | None:
    stmt = (
        update(scores)
        .where(scores.thread_id == thread_id)
        .values(override_score=override_score, override_comment=override_comment, update_time=func.now())
        .execution_options(synchronize_session=False)
    )
    session.execute(stmt)
    return get(thread_id, session=session)
