"""Tests for examiner.exam.export."""

from __future__ import annotations

import asyncio
import datetime
import json
import typing as t

from sqlalchemy.orm import Session

from examiner.exam import ExamExport, export_results, SessionOrchestrator
from examiner.model import ExamSession, MessageRole, PromptVariant, Question, UserID
from examiner.storage import message as message_storage
from examiner.storage import thread as thread_storage

from ..conftest import ScriptedChatModel

EXPORT_DATE = datetime.date(2026, 6, 1)


def run_export(db_session: Session, num_questions: int = 0) -> ExamExport:
    return export_results(
        exam_id="os-midterm",
        subject="Operating Systems",
        date=EXPORT_DATE,
        prompt_variant=PromptVariant.Strict,
        num_questions=num_questions,
        session=db_session,
    )


class TestExportResults(object):
    def test_graded_session(
        self,
        db_session: Session,
        orchestrator: SessionOrchestrator,
        grading_model: ScriptedChatModel,
        session_factory: t.Callable[..., ExamSession],
        question_factory: t.Callable[..., Question],
        reply: t.Callable[..., str],
    ) -> None:
        questions = [question_factory(max_points=4), question_factory(max_points=6)]
        exam_session = session_factory(questions=questions)
        with db_session.begin():
            thread = thread_storage.find(session_id=exam_session.session_id, session=db_session)[0]
            message_storage.append(thread.thread_id, MessageRole.Respondent, "Shared state.", session=db_session)
            message_storage.append(thread.thread_id, MessageRole.Assessor, "Good.", session=db_session)
        grading_model.responses.append(reply(3, "Nearly complete."))
        asyncio.run(orchestrator.submit_session(exam_session.session_id, session=db_session))
        orchestrator.override_score(thread.thread_id, 4.0, "Complete after all.", session=db_session)

        export = run_export(db_session)

        assert export.exam_id == "os-midterm"
        assert export.num_questions == 2
        [result] = export.results
        assert result.respondent_id == exam_session.respondent_id
        assert result.session_number == 1
        assert result.llm_grade == 30.0
        assert result.final_grade is None
        first, second = result.questions
        assert first.max_points == 4
        assert first.model_answer == questions[0].reference_answer
        assert [m.role for m in first.conversation] == [MessageRole.Respondent, MessageRole.Assessor]
        assert first.llm_score == 3.0
        assert first.override_score == 4.0
        assert first.override_comment == "Complete after all."
        assert second.conversation == []
        assert second.llm_feedback == "No answer provided"

    def test_session_numbers_per_respondent(
        self, db_session: Session, session_factory: t.Callable[..., ExamSession]
    ) -> None:
        alice = UserID()
        session_factory(respondent_id=alice)
        session_factory(respondent_id=alice)
        session_factory()

        export = run_export(db_session, num_questions=5)

        assert export.num_questions == 5
        numbers = sorted(r.session_number for r in export.results if r.respondent_id == alice)
        assert numbers == [1, 2]
        assert all(r.llm_grade is None for r in export.results)

    def test_json_shape(self, db_session: Session, session_factory: t.Callable[..., ExamSession]) -> None:
        session_factory()

        body = json.loads(run_export(db_session).model_dump_json())

        assert body["date"] == "2026-06-01"
        assert body["prompt_variant"] == "strict"
        assert set(body["results"][0]["questions"][0]) >= {"text", "rubric", "model_answer", "conversation"}

    def test_no_sessions(self, db_session: Session) -> None:
        export = run_export(db_session)

        assert export.results == []
        assert export.num_questions == 0
