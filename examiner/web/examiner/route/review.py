"""Reviewer API routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from examiner.core import di
from examiner.exam import SessionOrchestrator
from examiner.model import ExamSessionID, SessionView, ThreadID
from examiner.storage import grade as grade_storage

from ..view.review import FinalizeRequest, GradeResponse, ReviewListResponse, ReviewSummary, ScoreOverrideRequest, \
    ScoreResponse

router = APIRouter(prefix="/api/reviews", tags=["reviews"])


@router.get("", operation_id="list_reviews")
@di.inject
def list_reviews(
    session: Session = Depends(di.Manage["storage.persistent.session"]),
    orchestrator: SessionOrchestrator = Depends(di.Provide["exam.orchestrator"]),
) -> ReviewListResponse:
    """List graded and reviewed sessions."""
    sessions = orchestrator.list_reviewable(session=session)

    reviews: list[ReviewSummary] = []
    with session.begin():
        for s in sessions:
            grade = grade_storage.get(s.session_id, session=session)
            reviews.append(
                ReviewSummary(
                    session_id=s.session_id,
                    respondent_id=s.respondent_id,
                    status=s.status,
                    started_at=s.started_at,
                    submitted_at=s.submitted_at,
                    auto_percentage=grade.auto_percentage if grade else None,
                    final_percentage=grade.final_percentage if grade else None,
                )
            )
    return ReviewListResponse(reviews=reviews, total=len(reviews))


@router.get("/{session_id}", operation_id="get_review")
@di.inject
def get_review(
    session_id: ExamSessionID,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
    orchestrator: SessionOrchestrator = Depends(di.Provide["exam.orchestrator"]),
) -> SessionView:
    """Full session detail, including rubrics and reference answers."""
    return orchestrator.get_session_view(session_id, session=session)


@router.post("/{session_id}/threads/{thread_id}/score", operation_id="override_score")
@di.inject
def override_score(
    session_id: ExamSessionID,
    thread_id: ThreadID,
    request: ScoreOverrideRequest,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
    orchestrator: SessionOrchestrator = Depends(di.Provide["exam.orchestrator"]),
) -> ScoreResponse:
    view = orchestrator.get_session_view(session_id, session=session)
    if not any(tv.thread.thread_id == thread_id for tv in view.threads):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Thread not found")

    score = orchestrator.override_score(thread_id, request.score, request.comment, session=session)
    return ScoreResponse(
        thread_id=score.thread_id,
        auto_score=score.auto_score,
        auto_feedback=score.auto_feedback,
        override_score=score.override_score,
        override_comment=score.override_comment,
        effective_score=score.effective_score,
    )


@router.post("/{session_id}/finalize", operation_id="finalize_review")
@di.inject
def finalize_review(
    session_id: ExamSessionID,
    request: FinalizeRequest,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
    orchestrator: SessionOrchestrator = Depends(di.Provide["exam.orchestrator"]),
) -> GradeResponse:
    """Record the final percentage and mark the session reviewed."""
    grade = orchestrator.finalize(session_id, request.final_percentage, request.reviewer_id, session=session)
    return GradeResponse(
        session_id=grade.session_id,
        auto_percentage=grade.auto_percentage,
        final_percentage=grade.final_percentage,
        reviewed_by=grade.reviewed_by,
        reviewed_at=grade.reviewed_at,
    )
