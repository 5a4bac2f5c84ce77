"""Assessor model configuration."""

from __future__ import annotations

import pydantic as p

from examiner.llm.provider import ProviderType

from .base import BaseSettings


class ModelSettings(BaseSettings):
    """Settings for one kind of assessor call."""

    temperature: float
    max_tokens: int = 2048


class LLMSettings(BaseSettings):
    """Root assessor configuration.

    `base_url` points the OpenAI provider at any compatible endpoint (e.g. a
    local Ollama). A failed call is never retried by default; `timeout_seconds`
    of None leaves the transport's own timeout in place.
    """

    provider: ProviderType = ProviderType.OpenAI
    model: str = "llama3.1"
    base_url: p.HttpUrl | None = p.HttpUrl("http://localhost:11434/v1")
    max_retries: int = p.Field(default=0, ge=0)
    timeout_seconds: float | None = None

    evaluation: ModelSettings = p.Field(default_factory=lambda: ModelSettings(temperature=0.3))
    grading: ModelSettings = p.Field(default_factory=lambda: ModelSettings(temperature=0.1))
