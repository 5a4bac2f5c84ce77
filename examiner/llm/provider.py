"""Assessor chat-model construction using LangChain."""

from __future__ import annotations

import enum
import typing as t

import pydantic as p
from langchain_core.language_models import BaseChatModel

if t.TYPE_CHECKING:
    from examiner.core.config import LLMSettings, ModelSettings


class ProviderType(enum.Enum):
    """Supported LLM providers."""

    # any OpenAI-compatible endpoint, see LLMSettings.base_url
    OpenAI = "openai"
    Anthropic = "anthropic"


def create_chat_model(
    settings: LLMSettings,
    call: ModelSettings,
    *,
    api_key: p.Secret[str],
) -> BaseChatModel:
    """Create a LangChain chat model for one kind of assessor call.

    Args:
        settings: Provider, model name, endpoint and failure policy
        call: Per-call sampling parameters (temperature, max tokens)
        api_key: Provider API key

    Returns:
        Configured LangChain chat model that asks for a JSON object response
    """
    if settings.provider == ProviderType.OpenAI:
        from langchain_openai import ChatOpenAI

        return ChatOpenAI(
            model=settings.model,
            base_url=str(settings.base_url) if settings.base_url else None,
            temperature=call.temperature,
            max_completion_tokens=call.max_tokens,
            timeout=settings.timeout_seconds,
            max_retries=settings.max_retries,
            api_key=p.SecretStr(api_key.get_secret_value()),
            model_kwargs={"response_format": {"type": "json_object"}},
        )
    elif settings.provider == ProviderType.Anthropic:
        from langchain_anthropic import ChatAnthropic

        # no JSON mode; the system instruction alone asks for a JSON object
        return ChatAnthropic(
            model_name=settings.model,
            temperature=call.temperature,
            max_tokens_to_sample=call.max_tokens,
            timeout=settings.timeout_seconds,
            max_retries=settings.max_retries,
            api_key=p.SecretStr(api_key.get_secret_value()),
            stop=None,
        )
    else:
        raise ValueError(f"Unsupported provider: {settings.provider}")
