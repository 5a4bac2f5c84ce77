"""Tests for examiner.storage.thread, message and exam_session."""

from __future__ import annotations

import datetime
import typing as t

import pytest
import sqlalchemy.exc
from sqlalchemy.orm import Session

from examiner.model import ExamSession, MessageID, MessageRole, SessionStatus, ThreadID, ThreadStatus
from examiner.storage import exam_session as exam_session_storage
from examiner.storage import message as message_storage
from examiner.storage import thread as thread_storage
from examiner.storage.table import messages


class TestAdvance(object):
    def test_compare_and_set(self, db_session: Session, session_factory: t.Callable[..., ExamSession]) -> None:
        exam_session = session_factory()
        with db_session.begin():
            [thread] = thread_storage.find(session_id=exam_session.session_id, session=db_session)
            assert thread.revision == 0

            assert thread_storage.advance(
                thread.thread_id, expected_revision=0, status=ThreadStatus.Answered, session=db_session
            )
            # a second writer holding the stale revision loses
            assert not thread_storage.advance(thread.thread_id, expected_revision=0, session=db_session)

            current = thread_storage.get(thread.thread_id, session=db_session)

        assert current is not None
        assert current.revision == 1
        assert current.status is ThreadStatus.Answered

    def test_set_status_ignores_revision(
        self, db_session: Session, session_factory: t.Callable[..., ExamSession]
    ) -> None:
        exam_session = session_factory()
        with db_session.begin():
            [thread] = thread_storage.find(session_id=exam_session.session_id, session=db_session)
            thread_storage.advance(thread.thread_id, expected_revision=0, session=db_session)

            assert thread_storage.set_status(thread.thread_id, ThreadStatus.Completed, session=db_session)
            current = thread_storage.get(thread.thread_id, session=db_session)

        assert current is not None
        assert current.status is ThreadStatus.Completed
        assert current.revision == 2

    def test_unknown_thread(self, db_session: Session) -> None:
        with db_session.begin():
            assert not thread_storage.advance(ThreadID(), expected_revision=0, session=db_session)


class TestMessages(object):
    def test_positions_increase(self, db_session: Session, session_factory: t.Callable[..., ExamSession]) -> None:
        exam_session = session_factory()
        with db_session.begin():
            [thread] = thread_storage.find(session_id=exam_session.session_id, session=db_session)
            for i, role in enumerate([MessageRole.Respondent, MessageRole.Assessor, MessageRole.Respondent]):
                message_storage.append(thread.thread_id, role, f"turn {i}", session=db_session)

            found = message_storage.find(thread_id=thread.thread_id, session=db_session)
            respondent = message_storage.count(
                thread_id=thread.thread_id, role=MessageRole.Respondent, session=db_session
            )

        assert [m.position for m in found] == [0, 1, 2]
        assert [m.content for m in found] == ["turn 0", "turn 1", "turn 2"]
        assert all(m.token_count > 0 for m in found)
        assert respondent == 2

    def test_duplicate_position_rejected(
        self, db_session: Session, session_factory: t.Callable[..., ExamSession]
    ) -> None:
        """Two appends that computed the same position cannot both land."""
        exam_session = session_factory()
        with db_session.begin():
            [thread] = thread_storage.find(session_id=exam_session.session_id, session=db_session)
            message_storage.append(thread.thread_id, MessageRole.Respondent, "first", session=db_session)

        with pytest.raises(sqlalchemy.exc.IntegrityError):
            with db_session.begin():
                db_session.add(
                    messages(
                        message_id=MessageID(),
                        thread_id=thread.thread_id,
                        role=MessageRole.Respondent.value,
                        content="racing",
                        position=0,
                    )
                )
                db_session.flush()


class TestSessionTransition(object):
    def test_transition_requires_expected_status(
        self, db_session: Session, session_factory: t.Callable[..., ExamSession]
    ) -> None:
        exam_session = session_factory()
        submitted_at = datetime.datetime(2026, 5, 4, 12, 0, tzinfo=datetime.UTC)

        with db_session.begin():
            assert exam_session_storage.transition(
                exam_session.session_id,
                SessionStatus.InProgress,
                SessionStatus.Submitted,
                submitted_at=submitted_at,
                session=db_session,
            )
            assert not exam_session_storage.transition(
                exam_session.session_id, SessionStatus.InProgress, SessionStatus.Submitted, session=db_session
            )
            current = exam_session_storage.get(exam_session.session_id, session=db_session)

        assert current is not None
        assert current.status is SessionStatus.Submitted
        assert current.submitted_at is not None
        assert current.submitted_at.replace(tzinfo=None) == submitted_at.replace(tzinfo=None)

    def test_find_by_status(self, db_session: Session, session_factory: t.Callable[..., ExamSession]) -> None:
        first = session_factory()
        second = session_factory()
        with db_session.begin():
            exam_session_storage.transition(
                second.session_id, SessionStatus.InProgress, SessionStatus.Submitted, session=db_session
            )
            in_progress = exam_session_storage.find(status=SessionStatus.InProgress, session=db_session)
            either = exam_session_storage.find(
                status=(SessionStatus.InProgress, SessionStatus.Submitted), session=db_session
            )

        assert [s.session_id for s in in_progress] == [first.session_id]
        assert {s.session_id for s in either} == {first.session_id, second.session_id}
