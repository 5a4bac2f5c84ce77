from __future__ import annotations

import random
import typing as t

import jinja2
from dependency_injector.containers import DeclarativeContainer
from dependency_injector.providers import Configuration, Factory, Object, Provider, Singleton

from ..config.exam import ExamSettings
from ..provider import TimestampProvider

if t.TYPE_CHECKING:
    from examiner.exam import SessionOrchestrator, ThreadEngine
    from examiner.llm import AssessorGateway
    from examiner.llm.evaluation import PromptBuilder


def provide_prompt_builder(env: jinja2.Environment, settings: ExamSettings) -> PromptBuilder:
    from examiner.llm.evaluation import PromptBuilder

    return PromptBuilder(env, settings.prompt_variant)


def provide_engine(gateway: AssessorGateway, prompt_builder: PromptBuilder) -> ThreadEngine:
    from examiner.exam import ThreadEngine

    return ThreadEngine(gateway, prompt_builder)


def provide_orchestrator(
    gateway: AssessorGateway,
    prompt_builder: PromptBuilder,
    settings: ExamSettings,
    rng: random.Random,
    utcnow: TimestampProvider,
) -> SessionOrchestrator:
    from examiner.exam import SessionOrchestrator

    return SessionOrchestrator(gateway, prompt_builder, settings, rng, utcnow)


class ExamContainer(DeclarativeContainer):
    config: Configuration = Configuration()
    templates: Provider[jinja2.Environment] = Object()
    gateway: Provider[AssessorGateway] = Object()
    utcnow: Provider[TimestampProvider] = Object()

    settings: Provider[ExamSettings] = Singleton(ExamSettings, config)
    rng: Provider[random.Random] = Singleton(random.Random)

    prompt_builder: Provider[PromptBuilder] = Singleton(provide_prompt_builder, env=templates, settings=settings)
    engine: Provider[ThreadEngine] = Factory(provide_engine, gateway=gateway, prompt_builder=prompt_builder)
    orchestrator: Provider[SessionOrchestrator] = Factory(
        provide_orchestrator,
        gateway=gateway,
        prompt_builder=prompt_builder,
        settings=settings,
        rng=rng,
        utcnow=utcnow,
    )
