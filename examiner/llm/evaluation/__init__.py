"""Assessor prompt construction and result validation."""

__all__ = [
    "Assessment",
    "AssessorInput",
    "Correction",
    "PromptBuilder",
    "PromptTemplateError",
    "RawAssessment",
    "count_followups",
    "sanitize_answer",
    "validate_assessment",
]

from .prompt import AssessorInput, PromptBuilder, PromptTemplateError, count_followups, sanitize_answer
from .result import Assessment, Correction, RawAssessment
from .validator import validate_assessment
