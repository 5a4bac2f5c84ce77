"""Exam-taking API routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from examiner.core import di
from examiner.exam import GradingReport, SessionOrchestrator, ThreadEngine
from examiner.model import ExamSessionID, Message, SessionView, ThreadID, UserID
from examiner.storage import thread as thread_storage

from ..view.exam import AnswerRequest, GradingItemResponse, MessageResponse, QuestionResponse, SessionListResponse, \
    SessionResponse, SessionSummary, StartExamRequest, SubmitResponse, ThreadResponse, TurnResponse

router = APIRouter(prefix="/api/exams", tags=["exams"])


def _message_response(m: Message) -> MessageResponse:
    return MessageResponse(message_id=m.message_id, role=m.role, content=m.content, create_time=m.create_time)


def _session_response(view: SessionView) -> SessionResponse:
    threads = [
        ThreadResponse(
            thread_id=tv.thread.thread_id,
            position=tv.thread.position,
            status=tv.thread.status,
            question=QuestionResponse(
                question_id=tv.question.question_id,
                text=tv.question.text,
                topic=tv.question.topic,
                difficulty=tv.question.difficulty,
                max_points=tv.question.max_points,
            ),
            messages=[_message_response(m) for m in tv.messages],
            score=tv.score.effective_score if tv.score else None,
            feedback=tv.score.auto_feedback if tv.score else None,
        )
        for tv in view.threads
    ]
    grade = view.grade
    return SessionResponse(
        session_id=view.session.session_id,
        respondent_id=view.session.respondent_id,
        status=view.session.status,
        started_at=view.session.started_at,
        submitted_at=view.session.submitted_at,
        max_followups=view.blueprint.max_followups,
        threads=threads,
        percentage=(grade.final_percentage if grade.final_percentage is not None else grade.auto_percentage)
        if grade
        else None,
    )


def _submit_response(report: GradingReport) -> SubmitResponse:
    return SubmitResponse(
        session_id=report.session_id,
        achieved=report.achieved,
        possible=report.possible,
        percentage=report.percentage,
        items=[
            GradingItemResponse(
                thread_id=i.thread_id,
                score=i.score,
                max_points=i.max_points,
                feedback=i.feedback,
                failed=i.error is not None,
            )
            for i in report.items
        ],
    )


@router.post("", operation_id="start_exam", status_code=status.HTTP_201_CREATED)
@di.inject
def start_exam(
    request: StartExamRequest,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
    orchestrator: SessionOrchestrator = Depends(di.Provide["exam.orchestrator"]),
) -> SessionResponse:
    """Start an exam session for a respondent."""
    exam_session = orchestrator.start_session(
        request.blueprint_id,
        request.respondent_id,
        difficulty=request.difficulty,
        topic=request.topic,
        num_questions=request.num_questions,
        session=session,
    )
    return _session_response(orchestrator.get_session_view(exam_session.session_id, session=session))


@router.get("", operation_id="list_exams")
@di.inject
def list_exams(
    respondent_id: UserID,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
    orchestrator: SessionOrchestrator = Depends(di.Provide["exam.orchestrator"]),
) -> SessionListResponse:
    """List a respondent's sessions, oldest first."""
    sessions = orchestrator.list_sessions(respondent_id, session=session)
    return SessionListResponse(
        sessions=[
            SessionSummary(
                session_id=s.session_id, status=s.status, started_at=s.started_at, submitted_at=s.submitted_at
            )
            for s in sessions
        ],
        total=len(sessions),
    )


@router.get("/{session_id}", operation_id="get_exam")
@di.inject
def get_exam(
    session_id: ExamSessionID,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
    orchestrator: SessionOrchestrator = Depends(di.Provide["exam.orchestrator"]),
) -> SessionResponse:
    return _session_response(orchestrator.get_session_view(session_id, session=session))


@router.post("/{session_id}/threads/{thread_id}/answer", operation_id="answer_thread")
@di.inject
async def answer_thread(
    session_id: ExamSessionID,
    thread_id: ThreadID,
    request: AnswerRequest,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
    engine: ThreadEngine = Depends(di.Provide["exam.engine"]),
) -> TurnResponse:
    """Answer the current question of a thread and return the assessor's reply."""
    with session.begin():
        thread = thread_storage.get(thread_id, session=session)
        if thread is None or thread.session_id != session_id:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Thread not found")

    outcome = await engine.answer(thread_id, request.text, session=session)
    return TurnResponse(
        thread_id=outcome.thread_id,
        status=outcome.status,
        message=_message_response(outcome.assessor_message),
        followup_asked=outcome.followup_asked,
    )


@router.post("/{session_id}/submit", operation_id="submit_exam")
@di.inject
async def submit_exam(
    session_id: ExamSessionID,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
    orchestrator: SessionOrchestrator = Depends(di.Provide["exam.orchestrator"]),
) -> SubmitResponse:
    """Submit the session and grade every thread."""
    report = await orchestrator.submit_session(session_id, session=session)
    return _submit_response(report)
