"""Pytest fixtures for examiner tests.

The container is booted once against the test environment, whose storage is
a single in-memory SQLite database. Every test starts from freshly created
tables. Assessor calls go to `ScriptedChatModel`, which replays canned
replies (or raises canned errors) in order and records what it was sent.

Usage:
    def test_answer(thread_engine, evaluation_model, reply, session_factory):
        evaluation_model.responses.append(reply(4, "Good"))
        ...
"""

from __future__ import annotations

import datetime
import json
import os
import random
import typing as t
from pathlib import Path

import jinja2
import pydantic as p
import pytest
import sqlalchemy
from dependency_injector.providers import Object
from fastapi import FastAPI
from fastapi.testclient import TestClient
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage
from langchain_core.outputs import ChatGeneration, ChatResult
from sqlalchemy.orm import Session

import examiner
from examiner.core import ExaminerContainer, TimestampProvider
from examiner.core.config import ExamSettings
from examiner.exam import SessionOrchestrator, ThreadEngine
from examiner.llm import AssessorGateway
from examiner.llm.evaluation import PromptBuilder
from examiner.model import Blueprint, DeploymentEnvironment, Difficulty, ExamSession, PromptVariant, Question, UserID
from examiner.storage import blueprint as blueprint_storage
from examiner.storage import exam_session as exam_session_storage
from examiner.storage import question as question_storage
from examiner.storage.table import metadata


class ScriptedChatModel(BaseChatModel):
    """Replays `responses` in order; an exception in the list is raised instead"""

    responses: list[t.Any] = p.Field(default_factory=list)
    calls: list[list[BaseMessage]] = p.Field(default_factory=list)

    @property
    def _llm_type(self) -> str:
        return "scripted"

    def _generate(
        self,
        messages: list[BaseMessage],
        stop: list[str] | None = None,
        run_manager: t.Any = None,
        **kwargs: t.Any,
    ) -> ChatResult:
        self.calls.append(list(messages))
        if not self.responses:
            raise AssertionError("no scripted response left")
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        message = AIMessage(
            content=response,
            usage_metadata={"input_tokens": 100, "output_tokens": 20, "total_tokens": 120},
        )
        return ChatResult(generations=[ChatGeneration(message=message)])

    async def _agenerate(
        self,
        messages: list[BaseMessage],
        stop: list[str] | None = None,
        run_manager: t.Any = None,
        **kwargs: t.Any,
    ) -> ChatResult:
        return self._generate(messages, stop=stop, **kwargs)


@pytest.fixture(scope="session")
def container() -> t.Generator[ExaminerContainer]:
    """Boot the DI container once for the test session."""
    ct = ExaminerContainer()
    root = Path(os.path.dirname(examiner.__file__)).parent

    ExaminerContainer.boot(
        ct,
        debug=False,
        env=DeploymentEnvironment.Test,
        config_root=p.FileUrl(f"file://{root}/config"),
        override=(),
    )

    yield ct

    ct.shutdown_resources()


@pytest.fixture
def db_engine(container: ExaminerContainer) -> sqlalchemy.Engine:
    engine = container.storage().persistent().engine()
    metadata.drop_all(engine)
    metadata.create_all(engine)
    return engine


@pytest.fixture
def db_session(db_engine: sqlalchemy.Engine) -> t.Generator[Session]:
    """A session configured like the application's: callers open their own transactions."""
    session = Session(bind=db_engine, autobegin=False, expire_on_commit=False, autoflush=False)
    yield session
    session.close()


@pytest.fixture
def utcnow() -> TimestampProvider:
    return lambda: datetime.datetime.now(datetime.UTC)


@pytest.fixture
def reply() -> t.Callable[..., str]:
    """Build the JSON text an assessor would send back."""

    def make_reply(
        score: float,
        feedback: str = "Reasonable answer.",
        *,
        max_points: int | None = None,
        need_followup: bool = False,
        followup_question: str = "",
    ) -> str:
        return json.dumps({
            "score": score,
            "max_points": max_points,
            "feedback": feedback,
            "need_followup": need_followup,
            "followup_question": followup_question,
        })

    return make_reply


@pytest.fixture
def evaluation_model() -> ScriptedChatModel:
    return ScriptedChatModel()


@pytest.fixture
def grading_model() -> ScriptedChatModel:
    return ScriptedChatModel()


@pytest.fixture
def gateway(evaluation_model: ScriptedChatModel, grading_model: ScriptedChatModel) -> AssessorGateway:
    return AssessorGateway(evaluation_model, grading_model, model_name="gpt-4o-mini")


@pytest.fixture(scope="session")
def llm_env(container: ExaminerContainer) -> jinja2.Environment:
    return container.template().llm()


@pytest.fixture
def prompt_builder(llm_env: jinja2.Environment) -> PromptBuilder:
    return PromptBuilder(llm_env, PromptVariant.Standard)


@pytest.fixture
def exam_settings() -> ExamSettings:
    return ExamSettings(shuffle=False, max_followups=1)


@pytest.fixture
def thread_engine(gateway: AssessorGateway, prompt_builder: PromptBuilder) -> ThreadEngine:
    return ThreadEngine(gateway, prompt_builder)


@pytest.fixture
def orchestrator(
    gateway: AssessorGateway,
    prompt_builder: PromptBuilder,
    exam_settings: ExamSettings,
    utcnow: TimestampProvider,
) -> SessionOrchestrator:
    return SessionOrchestrator(gateway, prompt_builder, exam_settings, random.Random(7), utcnow)


@pytest.fixture
def question_factory(db_session: Session) -> t.Callable[..., Question]:
    """Insert bank questions with sensible defaults."""

    def create_question(
        text: str = "What is a race condition?",
        difficulty: Difficulty = Difficulty.Medium,
        topic: str = "concurrency",
        max_points: int = 10,
        rubric: str = "Names shared state and unsynchronized access.",
        reference_answer: str = "Two threads touch shared state without synchronization.",
    ) -> Question:
        with db_session.begin():
            return question_storage.create(
                {
                    "text": text,
                    "difficulty": difficulty,
                    "topic": topic,
                    "max_points": max_points,
                    "rubric": rubric,
                    "reference_answer": reference_answer,
                },
                session=db_session,
            )

    return create_question


@pytest.fixture
def blueprint_factory(db_session: Session) -> t.Callable[..., Blueprint]:
    def create_blueprint(name: str = "Exam", max_followups: int = 1) -> Blueprint:
        with db_session.begin():
            return blueprint_storage.create({"name": name, "max_followups": max_followups}, session=db_session)

    return create_blueprint


@pytest.fixture
def session_factory(
    db_session: Session,
    blueprint_factory: t.Callable[..., Blueprint],
    question_factory: t.Callable[..., Question],
) -> t.Callable[..., ExamSession]:
    """Create an in-progress session over the given (or fresh) questions."""

    def create_session(
        questions: t.Sequence[Question] | None = None,
        blueprint: Blueprint | None = None,
        respondent_id: UserID | None = None,
    ) -> ExamSession:
        if questions is None:
            questions = [question_factory()]
        if blueprint is None:
            blueprint = blueprint_factory()
        with db_session.begin():
            return exam_session_storage.create(
                {
                    "blueprint_id": blueprint.blueprint_id,
                    "respondent_id": respondent_id or UserID(),
                    "question_ids": [q.question_id for q in questions],
                },
                session=db_session,
            )

    return create_session


@pytest.fixture
def app(container: ExaminerContainer) -> FastAPI:
    """The HTTP application, wired to the booted container."""
    from examiner.core.config.web import ExaminerWebSettings
    from examiner.web.examiner.main import _create_app  # pyright: ignore[reportPrivateUsage]

    container.wire(packages=["examiner.web.examiner"])
    return _create_app(
        config=ExaminerWebSettings(**container.config.web.examiner()),
        env=DeploymentEnvironment.Test,
    )


@pytest.fixture
def client(
    app: FastAPI,
    container: ExaminerContainer,
    db_session: Session,
    gateway: AssessorGateway,
    exam_settings: ExamSettings,
) -> t.Generator[TestClient]:
    """A TestClient whose requests share the test's session and scripted assessor."""
    persistent = container.storage().persistent()
    exam = container.exam()

    # each override is undone on exit, leaving the wiring made at boot
    with (
        persistent.session.override(Object(db_session)),
        exam.gateway.override(Object(gateway)),
        exam.settings.override(Object(exam_settings)),
        TestClient(app) as test_client,
    ):
        yield test_client
