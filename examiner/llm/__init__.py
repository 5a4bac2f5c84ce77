"""Assessor integration using LangChain."""

__all__ = [
    # Provider
    "ProviderType",
    "create_chat_model",
    # Gateway
    "AssessorGateway",
    # Errors
    "AssessorCallError",
    "AssessorConnectionError",
    "AssessorEmptyResponseError",
    "AssessorError",
    "AssessorParseError",
    "AssessorStatusError",
    # Cost estimation
    "TokenUsage",
    "estimate_cost",
    "estimate_tokens",
]

from .errors import (
    AssessorCallError,
    AssessorConnectionError,
    AssessorEmptyResponseError,
    AssessorError,
    AssessorParseError,
    AssessorStatusError,
)
from .gateway import AssessorGateway
from .provider import ProviderType, create_chat_model
from .tokens import TokenUsage, estimate_cost, estimate_tokens
