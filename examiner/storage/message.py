from __future__ import annotations

from sqlalchemy import func, select

from examiner.core import di
from examiner.llm.tokens import estimate_tokens
from examiner.model import Message, MessageID, MessageRole, ThreadID

from . import Session
from .table import messages


def get(key: MessageID, session: Session = di.Provide["storage.persistent.session"]) -> Message | None:
    stmt = select(messages.__table__).where(messages.message_id == key)
    row = session.execute(stmt).mappings().one_or_none()
    return Message(**row) if row else None


def find(
    *,
    thread_id: ThreadID,
    role: MessageRole | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[Message, ...]:
    """A thread's messages in conversation order"""
    stmt = select(messages.__table__).where(messages.thread_id == thread_id).order_by(messages.position)
    if role is not None:
        stmt = stmt.where(messages.role == role.value)
    rows = session.execute(stmt).mappings().all()
    return tuple(Message(**row) for row in rows)


def count(
    *,
    thread_id: ThreadID,
    role: MessageRole | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> int:
    stmt = select(func.count()).select_from(messages).where(messages.thread_id == thread_id)
    if role is not None:
        stmt = stmt.where(messages.role == role.value)
    return session.execute(stmt).scalar_one()


def append(
    thread_id: ThreadID,
    role: MessageRole,
    content: str,
    session: Session = di.Provide["storage.persistent.session"],
) -> Message:
    """Add a message after the thread's last one

    Two concurrent appends compute the same position; the unique
    (thread_id, position) constraint rejects the loser with IntegrityError.
    """
    stmt = select(func.coalesce(func.max(messages.position) + 1, 0)).where(messages.thread_id == thread_id)
    position = session.execute(stmt).scalar_one()
    message = messages(
        message_id=MessageID(),
        thread_id=thread_id,
        role=role.value,
        content=content,
        position=position,
        token_count=estimate_tokens(content),
    )
    session.add(message)
    session.flush()
    return get(message.message_id, session=session)  # type: ignore
