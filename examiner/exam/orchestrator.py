"""Session lifecycle: start, submit and grade, review."""

from __future__ import annotations

import logging
import random
import typing as t
from dataclasses import dataclass

from examiner.core.provider import TimestampProvider
from examiner.llm import AssessorError, AssessorGateway
from examiner.llm.evaluation import PromptBuilder
from examiner.model import (
    BlueprintID,
    Difficulty,
    ExamSession,
    ExamSessionID,
    Grade,
    MessageRole,
    Score,
    SessionStatus,
    SessionView,
    ThreadID,
    ThreadStatus,
    ThreadView,
    UserID,
)
from examiner.storage import Session
from examiner.storage import blueprint as blueprint_storage
from examiner.storage import exam_session as exam_session_storage
from examiner.storage import grade as grade_storage
from examiner.storage import message as message_storage
from examiner.storage import question as question_storage
from examiner.storage import score as score_storage
from examiner.storage import thread as thread_storage

from .errors import InvalidReviewError, InvalidTransitionError, NoQuestionsError, NotFoundError

if t.TYPE_CHECKING:
    from examiner.core.config import ExamSettings

logger = logging.getLogger(__name__)

DEFAULT_BLUEPRINT = "Exam"
NO_ANSWER_FEEDBACK = "No answer provided"
REVIEWABLE = (SessionStatus.Graded, SessionStatus.Reviewed)


@dataclass(frozen=True)
class ItemResult:
    thread_id: ThreadID
    score: float
    max_points: int
    feedback: str
    # set when the assessor call failed and the item was scored 0
    error: str | None = None


@dataclass(frozen=True)
class GradingReport:
    session_id: ExamSessionID
    items: tuple[ItemResult, ...]
    achieved: float
    possible: int
    percentage: float

    @property
    def failures(self) -> tuple[ItemResult, ...]:
        return tuple(i for i in self.items if i.error is not None)


def overall_percentage(achieved: float, possible: int) -> float:
    if possible == 0:
        return 0.0
    return 100.0 * achieved / possible


class SessionOrchestrator(object):
    def __init__(
        self,
        gateway: AssessorGateway,
        prompt_builder: PromptBuilder,
        selection: ExamSettings,
        rng: random.Random,
        utcnow: TimestampProvider,
    ):
        self.gateway = gateway
        self.prompt_builder = prompt_builder
        self.selection = selection
        self.rng = rng
        self.utcnow = utcnow

    def start_session(
        self,
        blueprint_id: BlueprintID | None,
        respondent_id: UserID,
        *,
        difficulty: Difficulty | None = None,
        topic: str | None = None,
        num_questions: int | None = None,
        session: Session,
    ) -> ExamSession:
        """Pick questions and create the session with one open thread each

        Filters not given here fall back to the deployment's exam settings.
        Without a blueprint id the default blueprint is used.
        """
        difficulty = difficulty or self.selection.difficulty
        topic = topic or self.selection.topic
        if num_questions is None:
            num_questions = self.selection.num_questions

        with session.begin():
            if blueprint_id is None:
                blueprint = next(iter(blueprint_storage.find(name=DEFAULT_BLUEPRINT, session=session)), None)
            else:
                blueprint = blueprint_storage.get(blueprint_id, session=session)
            if blueprint is None:
                raise NotFoundError("blueprint", blueprint_id or DEFAULT_BLUEPRINT)

            questions = list(question_storage.find(difficulty=difficulty, topic=topic, session=session))
            if self.selection.shuffle:
                self.rng.shuffle(questions)
            if num_questions > 0:
                questions = questions[:num_questions]
            if not questions:
                raise NoQuestionsError("no questions match the configured filters")

            exam_session = exam_session_storage.create(
                {
                    "blueprint_id": blueprint.blueprint_id,
                    "respondent_id": respondent_id,
                    "question_ids": [q.question_id for q in questions],
                },
                session=session,
            )

        logger.info(
            "exam session started",
            extra={
                "session_id": exam_session.session_id,
                "respondent_id": respondent_id,
                "num_questions": len(questions),
                "difficulty": difficulty,
                "topic": topic,
            },
        )
        return exam_session

    async def submit_session(self, session_id: ExamSessionID, *, session: Session) -> GradingReport:
        """Close the session to answers and give every thread its final score

        A failed assessor call scores that item 0 and grading carries on; every
        item's max points count toward the denominator either way.
        """
        with session.begin():
            if exam_session_storage.get(session_id, session=session) is None:
                raise NotFoundError("session", session_id)
            if not exam_session_storage.transition(
                session_id, SessionStatus.InProgress, SessionStatus.Submitted, submitted_at=self.utcnow(),
                session=session,
            ):
                raise InvalidTransitionError(f"session {session_id} is not in progress")
        logger.info("exam session submitted", extra={"session_id": session_id})

        with session.begin():
            exam_session_storage.transition(session_id, SessionStatus.Submitted, SessionStatus.Grading, session=session)
            threads = thread_storage.find(session_id=session_id, session=session)
        logger.info("exam session grading", extra={"session_id": session_id, "num_threads": len(threads)})

        items: list[ItemResult] = []
        for thread in threads:
            items.append(await self._grade_thread(session_id, thread.thread_id, session=session))

        achieved = sum(i.score for i in items)
        possible = sum(i.max_points for i in items)
        percentage = overall_percentage(achieved, possible)

        with session.begin():
            grade_storage.upsert(session_id, auto_percentage=percentage, session=session)
            exam_session_storage.transition(session_id, SessionStatus.Grading, SessionStatus.Graded, session=session)

        report = GradingReport(
            session_id=session_id,
            items=tuple(items),
            achieved=achieved,
            possible=possible,
            percentage=percentage,
        )
        logger.info(
            "exam session graded",
            extra={
                "session_id": session_id,
                "achieved": achieved,
                "possible": possible,
                "percentage": percentage,
                "failures": len(report.failures),
            },
        )
        return report

    async def _grade_thread(self, session_id: ExamSessionID, thread_id: ThreadID, *, session: Session) -> ItemResult:
        with session.begin():
            thread = thread_storage.get(thread_id, session=session)
            assert thread is not None
            question = question_storage.get(thread.question_id, session=session)
            assert question is not None
            conversation = message_storage.find(thread_id=thread_id, session=session)

        if not any(m.role is MessageRole.Respondent for m in conversation):
            with session.begin():
                score_storage.upsert(thread_id, auto_score=0.0, auto_feedback=NO_ANSWER_FEEDBACK, session=session)
            return ItemResult(
                thread_id=thread_id, score=0.0, max_points=question.max_points, feedback=NO_ANSWER_FEEDBACK
            )

        assessor_input = self.prompt_builder.build_final_grading_input(question, conversation)
        try:
            assessment = await self.gateway.grade_final(
                assessor_input, question.max_points, session_id=session_id, thread_id=thread_id
            )
        except AssessorError as e:
            logger.error(
                "final grading failed",
                extra={"session_id": session_id, "thread_id": thread_id, "error": str(e)},
                exc_info=e,
            )
            feedback = f"Grading error: {e}"
            with session.begin():
                score_storage.upsert(thread_id, auto_score=0.0, auto_feedback=feedback, session=session)
            return ItemResult(
                thread_id=thread_id, score=0.0, max_points=question.max_points, feedback=feedback, error=str(e)
            )

        with session.begin():
            score_storage.upsert(
                thread_id, auto_score=assessment.score, auto_feedback=assessment.feedback, session=session
            )
            thread_storage.set_status(thread_id, ThreadStatus.Completed, session=session)
        return ItemResult(
            thread_id=thread_id,
            score=assessment.score,
            max_points=question.max_points,
            feedback=assessment.feedback,
        )

    def override_score(
        self,
        thread_id: ThreadID,
        score: float,
        comment: str | None,
        *,
        session: Session,
    ) -> Score:
        """Record a reviewer's score for one thread; the automatic score is kept"""
        with session.begin():
            thread = thread_storage.get(thread_id, session=session)
            if thread is None:
                raise NotFoundError("thread", thread_id)
            exam_session = exam_session_storage.get(thread.session_id, session=session)
            assert exam_session is not None
            if exam_session.status is not SessionStatus.Graded:
                raise InvalidTransitionError(f"session {exam_session.session_id} is {exam_session.status.value}")
            question = question_storage.get(thread.question_id, session=session)
            assert question is not None
            if not 0 <= score <= question.max_points:
                raise InvalidReviewError(f"score must be between 0 and {question.max_points}")
            if score_storage.get(thread_id, session=session) is None:
                raise NotFoundError("score", thread_id)

            result = score_storage.set_override(
                thread_id, override_score=score, override_comment=comment, session=session
            )
            assert result is not None

        logger.info("score overridden", extra={"thread_id": thread_id, "override_score": score})
        return result

    def finalize(
        self,
        session_id: ExamSessionID,
        final_percentage: float,
        reviewer_id: UserID,
        *,
        session: Session,
    ) -> Grade:
        """Record the reviewer's final percentage as given and close the review"""
        if not 0 <= final_percentage <= 100:
            raise InvalidReviewError("final percentage must be between 0 and 100")

        with session.begin():
            if exam_session_storage.get(session_id, session=session) is None:
                raise NotFoundError("session", session_id)
            if not exam_session_storage.transition(
                session_id, SessionStatus.Graded, SessionStatus.Reviewed, session=session
            ):
                raise InvalidTransitionError(f"session {session_id} is not graded")
            grade = grade_storage.finalize(
                session_id,
                final_percentage=final_percentage,
                reviewed_by=reviewer_id,
                reviewed_at=self.utcnow(),
                session=session,
            )
            if grade is None:
                raise NotFoundError("grade", session_id)

        logger.info(
            "exam session reviewed",
            extra={"session_id": session_id, "final_percentage": final_percentage, "reviewed_by": reviewer_id},
        )
        return grade

    def get_session_view(self, session_id: ExamSessionID, *, session: Session) -> SessionView:
        with session.begin():
            exam_session = exam_session_storage.get(session_id, session=session)
            if exam_session is None:
                raise NotFoundError("session", session_id)
            blueprint = blueprint_storage.get(exam_session.blueprint_id, session=session)
            assert blueprint is not None
            scores = score_storage.find(session_id=session_id, session=session)

            views: list[ThreadView] = []
            for thread in thread_storage.find(session_id=session_id, session=session):
                question = question_storage.get(thread.question_id, session=session)
                assert question is not None
                views.append(
                    ThreadView(
                        thread=thread,
                        question=question,
                        messages=list(message_storage.find(thread_id=thread.thread_id, session=session)),
                        score=scores.get(thread.thread_id),
                    )
                )

            return SessionView(
                session=exam_session,
                blueprint=blueprint,
                threads=views,
                grade=grade_storage.get(session_id, session=session),
            )

    def list_sessions(self, respondent_id: UserID, *, session: Session) -> tuple[ExamSession, ...]:
        with session.begin():
            return exam_session_storage.find(respondent_id=respondent_id, session=session)

    def list_reviewable(self, *, session: Session) -> tuple[ExamSession, ...]:
        with session.begin():
            return exam_session_storage.find(status=REVIEWABLE, session=session)
