__all__ = [
    "BootConfiguration",
    "ExamContainer",
    "ExaminerContainer",
    "LLMContainer",
    "StorageContainer",
    "TemplateContainer",
]

from .exam import ExamContainer
from .examiner import BootConfiguration, ExaminerContainer
from .llm import LLMContainer
from .storage import StorageContainer
from .template import TemplateContainer
