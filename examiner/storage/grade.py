from __future__ import annotations

import datetime

from sqlalchemy import func, select, update

from examiner.core import di
from examiner.lib.sql import upsert as upsert_row
from examiner.model import ExamSessionID, Grade, UserID

from . import Session
from .table import grades


def get(session_id: ExamSessionID, session: Session = di.Provide["storage.persistent.session"]) -> Grade | None:
    stmt = select(grades.__table__).where(grades.session_id == session_id)
    row = session.execute(stmt).mappings().one_or_none()
    return Grade(**row) if row else None


def upsert(
    session_id: ExamSessionID,
    *,
    auto_percentage: float,
    session: Session = di.Provide["storage.persistent.session"],
) -> Grade:
    upsert_row(
        session,
        grades.__table__,  # pyright: ignore [reportArgumentType]
        {"session_id": session_id, "auto_percentage": auto_percentage},
        index_elements=["session_id"],
        update=["auto_percentage"],
        extra_set={"update_time": func.now()},
    )
    session.flush()
    return get(session_id, session=session)  # type: ignore


def finalize(
    session_id: ExamSessionID,
    *,
    final_percentage: float,
    reviewed_by: UserID,
    reviewed_at: datetime.datetime,
    session: Session = di.Provide["storage.persistent.session"],
) -> Grade | None:
    stmt = (
        update(grades)
        .where(grades.session_id == session_id)
        .values(
            final_percentage=final_percentage,
            reviewed_by=reviewed_by,
            reviewed_at=reviewed_at,
            update_time=func.now(),
        )
        .execution_options(synchronize_session=False)
    )
    session.execute(stmt)
    return get(session_id, session=session)
