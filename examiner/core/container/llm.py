"""LLM container for dependency injection."""

from __future__ import annotations

from dependency_injector.containers import DeclarativeContainer
from dependency_injector.providers import Configuration, Provider, Singleton
from langchain_core.language_models import BaseChatModel

from examiner.llm import AssessorGateway, create_chat_model

from ..config.llm import LLMSettings, ModelSettings
from ..config.secrets import LLMSecrets


def create_model(settings: LLMSettings, call: ModelSettings, secrets: LLMSecrets) -> BaseChatModel:
    """Create a chat model from settings."""
    return create_chat_model(settings, call, api_key=secrets.api_key)


class LLMContainer(DeclarativeContainer):
    """Container for the assessor models and gateway."""

    config: Configuration = Configuration()
    secrets: Configuration = Configuration()

    settings: Provider[LLMSettings] = Singleton(LLMSettings, config)
    llm_secrets: Provider[LLMSecrets] = Singleton(LLMSecrets, api_key=secrets.api_key)

    evaluation_model: Provider[BaseChatModel] = Singleton(
        create_model, settings=settings, call=settings.provided.evaluation, secrets=llm_secrets
    )
    grading_model: Provider[BaseChatModel] = Singleton(
        create_model, settings=settings, call=settings.provided.grading, secrets=llm_secrets
    )

    gateway: Provider[AssessorGateway] = Singleton(
        AssessorGateway,
        evaluation_model=evaluation_model,
        grading_model=grading_model,
        model_name=settings.provided.model,
    )
