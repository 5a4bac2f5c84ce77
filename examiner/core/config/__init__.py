__all__ = [
    "ExamSettings",
    "ExaminerWebSettings",
    "LLMSettings",
    "LoggingSettings",
    "ModelSettings",
    "PersistentSettings",
    "Secrets",
    "Settings",
    "StorageSettings",
    "TemplateSettings",
    "WebSettings",
]


from .exam import ExamSettings
from .llm import LLMSettings, ModelSettings
from .logging import LoggingSettings
from .secrets import Secrets
from .settings import Settings
from .storage import PersistentSettings, StorageSettings
from .template import TemplateSettings
from .web import ExaminerWebSettings, WebSettings
