from __future__ import annotations

import pydantic as p
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from examiner.model import DeploymentEnvironment

from .base import BaseSecrets
from .source import YAMLSecretsSource


class PostgresqlSecrets(BaseSecrets):
    username: p.Secret[str] | None = None
    password: p.Secret[str] | None = None


class LLMSecrets(BaseSecrets):
    """Assessor API key; local OpenAI-compatible servers accept any value"""

    api_key: p.Secret[str] = p.Secret("not-needed")


class Secrets(BaseSecrets):
    """
    Read from the environment first (EXAMINER_LLM__API_KEY, ...), then from an
    unencrypted secrets.yaml beside the configuration
    """

    model_config = SettingsConfigDict(env_prefix="EXAMINER_", env_nested_delimiter="__")

    root: p.AnyUrl
    env: DeploymentEnvironment

    llm: LLMSecrets = p.Field(default_factory=LLMSecrets)
    postgresql: PostgresqlSecrets = p.Field(default_factory=PostgresqlSecrets)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return init_settings, env_settings, YAMLSecretsSource(settings_cls)
