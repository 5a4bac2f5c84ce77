import pydantic as p
from pydantic_settings import BaseSettings as PydanticBaseSettings
from pydantic_settings import PydanticBaseSettingsSource

from examiner.model import DeploymentEnvironment

from .base import BaseSettings
from .exam import ExamSettings
from .llm import LLMSettings
from .logging import LoggingSettings
from .source import OverrideSettingsSource, YAMLCascadingSettingsSource
from .storage import StorageSettings
from .template import TemplateSettings
from .web import WebSettings

SettingsField = p.Field(default=..., validate_default=True)


class Settings(BaseSettings):
    root: p.FileUrl
    env: DeploymentEnvironment
    override: tuple[str, ...]

    logging: LoggingSettings = SettingsField
    storage: StorageSettings = SettingsField
    template: TemplateSettings = p.Field(default_factory=TemplateSettings)
    llm: LLMSettings = p.Field(default_factory=LLMSettings)
    exam: ExamSettings = p.Field(default_factory=ExamSettings)
    web: WebSettings = SettingsField

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[PydanticBaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:  # noqa: E501
        return init_settings, OverrideSettingsSource(settings_cls), YAMLCascadingSettingsSource(settings_cls)
