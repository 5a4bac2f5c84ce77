"""Per-turn answering within one thread."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import sqlalchemy.exc

from examiner.core.logging import TRACE
from examiner.llm import AssessorGateway
from examiner.llm.evaluation import Assessment, PromptBuilder
from examiner.model import Message, MessageRole, SessionStatus, ThreadID, ThreadStatus
from examiner.storage import Session
from examiner.storage import blueprint as blueprint_storage
from examiner.storage import exam_session as exam_session_storage
from examiner.storage import message as message_storage
from examiner.storage import question as question_storage
from examiner.storage import thread as thread_storage

from .errors import (
    ConcurrentTurnError,
    EmptyAnswerError,
    NotFoundError,
    SessionNotInProgressError,
    ThreadCompletedError,
)

logger = logging.getLogger(__name__)

FOLLOWUP_SEPARATOR = "\n\n**Follow-up question:** "


@dataclass(frozen=True)
class TurnOutcome:
    thread_id: ThreadID
    status: ThreadStatus
    respondent_message: Message
    assessor_message: Message
    assessment: Assessment

    @property
    def followup_asked(self) -> bool:
        return self.status is ThreadStatus.Answered


class ThreadEngine(object):
    """Records an answer, asks the assessor about it and records the reply

    The respondent's message is committed before the assessor is called, so
    a failed call loses nothing the respondent wrote; the thread status is
    only changed once the assessor has replied.
    """

    def __init__(self, gateway: AssessorGateway, prompt_builder: PromptBuilder):
        self.gateway = gateway
        self.prompt_builder = prompt_builder

    async def answer(
        self,
        thread_id: ThreadID,
        text: str,
        *,
        session: Session,
    ) -> TurnOutcome:
        with session.begin():
            thread = thread_storage.get(thread_id, session=session)
            if thread is None:
                raise NotFoundError("thread", thread_id)
            exam_session = exam_session_storage.get(thread.session_id, session=session)
            assert exam_session is not None

            if exam_session.status is not SessionStatus.InProgress:
                raise SessionNotInProgressError(f"session {exam_session.session_id} is {exam_session.status.value}")
            if not text.strip():
                raise EmptyAnswerError("answer is empty")
            if thread.status is ThreadStatus.Completed:
                raise ThreadCompletedError(f"thread {thread_id} is completed")

            question = question_storage.get(thread.question_id, session=session)
            blueprint = blueprint_storage.get(exam_session.blueprint_id, session=session)
            assert question is not None and blueprint is not None

            try:
                respondent_message = message_storage.append(
                    thread_id, MessageRole.Respondent, text.strip(), session=session
                )
            except sqlalchemy.exc.IntegrityError as e:
                raise ConcurrentTurnError(f"thread {thread_id} was written concurrently") from e
            if not thread_storage.advance(thread_id, expected_revision=thread.revision, session=session):
                raise ConcurrentTurnError(f"thread {thread_id} was written concurrently")
            revision = thread.revision + 1

        with session.begin():
            conversation = message_storage.find(thread_id=thread_id, session=session)

        assessor_input = self.prompt_builder.build_evaluation_input(question, conversation, blueprint.max_followups)
        logger.log(
            TRACE,
            "evaluation input",
            extra={"thread_id": thread_id, "turns": len(conversation), "can_followup": assessor_input.can_followup},
        )
        assessment = await self.gateway.evaluate(
            assessor_input,
            question.max_points,
            session_id=exam_session.session_id,
            thread_id=thread_id,
        )

        followup = assessment.followup_question.strip()
        if assessment.need_followup and followup and assessor_input.can_followup:
            content = f"{assessment.feedback}{FOLLOWUP_SEPARATOR}{followup}"
            status = ThreadStatus.Answered
        else:
            if assessment.need_followup and not assessor_input.can_followup:
                logger.info("follow-up ignored, limit reached", extra={"thread_id": thread_id})
            content = assessment.feedback
            status = ThreadStatus.Completed

        with session.begin():
            if not thread_storage.advance(thread_id, expected_revision=revision, status=status, session=session):
                raise ConcurrentTurnError(f"thread {thread_id} was written concurrently")
            try:
                assessor_message = message_storage.append(thread_id, MessageRole.Assessor, content, session=session)
            except sqlalchemy.exc.IntegrityError as e:
                raise ConcurrentTurnError(f"thread {thread_id} was written concurrently") from e

        logger.info(
            "thread turn recorded",
            extra={
                "session_id": exam_session.session_id,
                "thread_id": thread_id,
                "status": status.value,
                "score": assessment.score,
            },
        )
        return TurnOutcome(
            thread_id=thread_id,
            status=status,
            respondent_message=respondent_message,
            assessor_message=assessor_message,
            assessment=assessment,
        )
