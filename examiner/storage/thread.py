from __future__ import annotations

from sqlalchemy import select, update

from examiner.core import di
from examiner.model import ExamSessionID, Thread, ThreadID, ThreadStatus

from . import Session
from .table import threads


def get(key: ThreadID, session: Session = di.Provide["storage.persistent.session"]) -> Thread | None:
    stmt = select(threads.__table__).where(threads.thread_id == key)
    row = session.execute(stmt).mappings().one_or_none()
    return Thread(**row) if row else None


def find(
    *,
    session_id: ExamSessionID,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[Thread, ...]:
    """A session's threads in position order"""
    stmt = select(threads.__table__).where(threads.session_id == session_id).order_by(threads.position)
    rows = session.execute(stmt).mappings().all()
    return tuple(Thread(**row) for row in rows)


def advance(
    key: ThreadID,
    *,
    expected_revision: int,
    status: ThreadStatus | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> bool:
    """
    Bump the revision (and optionally set the status) only if nobody else has
    since `expected_revision` was read. False means another writer won.
    """
    values: dict[str, object] = {"revision": threads.revision + 1}
    if status is not None:
        values["status"] = status.value
    stmt = (
        update(threads)
        .where(threads.thread_id == key, threads.revision == expected_revision)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    result = session.execute(stmt)
    return result.rowcount == 1  # pyright: ignore [reportAttributeAccessIssue]


def set_status(
    key: ThreadID,
    status: ThreadStatus,
    session: Session = di.Provide["storage.persistent.session"],
) -> bool:
    """Set the status regardless of the current revision; the revision is still bumped"""
    stmt = (
        update(threads)
        .where(threads.thread_id == key)
        .values(status=status.value, revision=threads.revision + 1)
        .execution_options(synchronize_session=False)
    )
    result = session.execute(stmt)
    return result.rowcount == 1  # pyright: ignore [reportAttributeAccessIssue]
