"""Result export for offline analysis."""

from __future__ import annotations

import collections
import datetime

import pydantic as p

from examiner.model import BaseModel, Difficulty, ExamSessionID, MessageRole, PromptVariant, SessionStatus, UserID
from examiner.storage import Session
from examiner.storage import exam_session as exam_session_storage
from examiner.storage import grade as grade_storage
from examiner.storage import message as message_storage
from examiner.storage import question as question_storage
from examiner.storage import score as score_storage
from examiner.storage import thread as thread_storage


class ConversationMessage(BaseModel):
    role: MessageRole
    content: str
    at: datetime.datetime


class QuestionResult(BaseModel):
    model_config = p.ConfigDict(protected_namespaces=())

    text: str
    topic: str
    difficulty: Difficulty
    max_points: int
    rubric: str
    model_answer: str
    conversation: list[ConversationMessage]
    llm_score: float | None = None
    llm_feedback: str | None = None
    override_score: float | None = None
    override_comment: str | None = None


class RespondentResult(BaseModel):
    session_id: ExamSessionID
    respondent_id: UserID
    # 1 for a respondent's first session, 2 for the next, ...
    session_number: int
    status: SessionStatus
    started_at: datetime.datetime
    submitted_at: datetime.datetime | None = None
    questions: list[QuestionResult]
    llm_grade: float | None = None
    final_grade: float | None = None
    reviewed_by: UserID | None = None


class ExamExport(BaseModel):
    exam_id: str
    subject: str
    date: datetime.date
    prompt_variant: PromptVariant
    num_questions: int
    results: list[RespondentResult]


def export_results(
    *,
    exam_id: str,
    subject: str,
    date: datetime.date,
    prompt_variant: PromptVariant,
    num_questions: int = 0,
    session: Session,
) -> ExamExport:
    """Collect every session with its conversations, scores and grade

    With `num_questions` of 0 the count is taken from the first session.
    """
    results: list[RespondentResult] = []
    ordinals: collections.Counter[UserID] = collections.Counter()

    with session.begin():
        for exam_session in exam_session_storage.find(session=session):
            ordinals[exam_session.respondent_id] += 1
            scores = score_storage.find(session_id=exam_session.session_id, session=session)

            questions: list[QuestionResult] = []
            for thread in thread_storage.find(session_id=exam_session.session_id, session=session):
                question = question_storage.get(thread.question_id, session=session)
                assert question is not None
                score = scores.get(thread.thread_id)
                questions.append(
                    QuestionResult(
                        text=question.text,
                        topic=question.topic,
                        difficulty=question.difficulty,
                        max_points=question.max_points,
                        rubric=question.rubric,
                        model_answer=question.reference_answer,
                        conversation=[
                            ConversationMessage(role=m.role, content=m.content, at=m.create_time)
                            for m in message_storage.find(thread_id=thread.thread_id, session=session)
                        ],
                        llm_score=score.auto_score if score else None,
                        llm_feedback=score.auto_feedback if score else None,
                        override_score=score.override_score if score else None,
                        override_comment=score.override_comment if score else None,
                    )
                )

            grade = grade_storage.get(exam_session.session_id, session=session)
            results.append(
                RespondentResult(
                    session_id=exam_session.session_id,
                    respondent_id=exam_session.respondent_id,
                    session_number=ordinals[exam_session.respondent_id],
                    status=exam_session.status,
                    started_at=exam_session.started_at,
                    submitted_at=exam_session.submitted_at,
                    questions=questions,
                    llm_grade=grade.auto_percentage if grade else None,
                    final_grade=grade.final_percentage if grade else None,
                    reviewed_by=grade.reviewed_by if grade else None,
                )
            )

    if num_questions == 0 and results:
        num_questions = len(results[0].questions)

    return ExamExport(
        exam_id=exam_id,
        subject=subject,
        date=date,
        prompt_variant=prompt_variant,
        num_questions=num_questions,
        results=results,
    )
