__all__ = [
    "BootConfiguration",
    "di",
    "ExaminerContainer",
    "LoggingProvider",
    "Settings",
    "Secrets",
    "TimestampProvider",
]


from . import di
from .config import Secrets, Settings
from .container import BootConfiguration, ExaminerContainer
from .provider import LoggingProvider, TimestampProvider
