"""The single point through which assessor calls are made."""

from __future__ import annotations

import asyncio
import json
import logging
import re
import typing as t

import anthropic
import httpx
import openai
import pydantic as p
from langchain_core.language_models import BaseChatModel

from .errors import (
    AssessorCallError,
    AssessorConnectionError,
    AssessorEmptyResponseError,
    AssessorParseError,
    AssessorStatusError,
)
from .evaluation.prompt import AssessorInput
from .evaluation.result import Assessment, RawAssessment
from .evaluation.validator import validate_assessment
from .tokens import TokenUsage, estimate_cost

logger = logging.getLogger(__name__)

FENCED_JSON = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


def content_str(content: t.Any) -> str:
    """Extract string content from a LangChain message content field."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts: list[str] = []
        for item in t.cast(list[t.Any], content):
            if isinstance(item, str):
                parts.append(item)
            elif isinstance(item, dict) and item.get("type") == "text":
                parts.append(str(item.get("text", "")))
        return "".join(parts)
    return str(content)


def parse_assessment(text: str) -> RawAssessment:
    """Parse assessor output into a RawAssessment

    A single JSON object is required; the only leniency is a surrounding
    markdown code fence.
    """
    body = text.strip()
    if m := FENCED_JSON.match(body):
        body = m.group(1)

    try:
        parsed = json.loads(body)
    except json.JSONDecodeError as e:
        raise AssessorParseError(f"assessor response is not JSON: {e.msg}", text) from e

    if not isinstance(parsed, dict):
        raise AssessorParseError("assessor response is not a JSON object", text)

    try:
        return RawAssessment.model_validate(parsed)
    except p.ValidationError as e:
        raise AssessorParseError(f"assessor response has the wrong shape: {e.error_count()} errors", text) from e


class AssessorGateway(object):
    """Sends assessor inputs to the chat models and returns validated results

    Every failure surfaces as an AssessorError subtype; nothing here retries
    beyond what the underlying client is configured to do.
    """

    def __init__(self, evaluation_model: BaseChatModel, grading_model: BaseChatModel, model_name: str):
        self.evaluation_model = evaluation_model
        self.grading_model = grading_model
        self.model_name = model_name

    async def evaluate(self, input: AssessorInput, max_points: int, **context: t.Any) -> Assessment:
        """Assess the latest answer in a thread"""
        raw = await self._invoke(self.evaluation_model, input, op="evaluate", **context)
        return validate_assessment(raw, max_points)

    async def grade_final(self, input: AssessorInput, max_points: int, **context: t.Any) -> Assessment:
        """Grade a whole thread transcript"""
        raw = await self._invoke(self.grading_model, input, op="grade", **context)
        return validate_assessment(raw, max_points)

    async def _invoke(self, model: BaseChatModel, input: AssessorInput, *, op: str, **context: t.Any) -> RawAssessment:
        try:
            response = await model.ainvoke(list(input.messages))
        except (openai.APIStatusError, anthropic.APIStatusError) as e:
            raise AssessorStatusError(f"assessor returned status {e.status_code}", e.status_code) from e
        except (openai.APIConnectionError, anthropic.APIConnectionError, httpx.TransportError,
                asyncio.TimeoutError) as e:
            raise AssessorConnectionError(f"assessor unreachable: {e}") from e
        except (openai.APIError, anthropic.APIError) as e:
            raise AssessorCallError(f"assessor client error: {e}") from e
        except Exception as e:
            # e.g. a LangChain ValueError on an unexpected content block
            raise AssessorCallError(f"assessor call failed: {type(e).__name__}: {e}") from e

        self._log_usage(response, op=op, **context)

        text = content_str(response.content)
        if not text.strip():
            raise AssessorEmptyResponseError("assessor returned an empty response")

        return parse_assessment(text)

    def _log_usage(self, response: t.Any, *, op: str, **context: t.Any) -> None:
        metadata = getattr(response, "usage_metadata", None)
        if not metadata:
            return

        usage = TokenUsage(
            input_tokens=metadata.get("input_tokens", 0),
            output_tokens=metadata.get("output_tokens", 0),
        )
        logger.info(
            "assessor token usage",
            extra={
                "op": op,
                "model": self.model_name,
                **context,
                "input_tokens": usage.input_tokens,
                "output_tokens": usage.output_tokens,
                "total_tokens": usage.total_tokens,
                "estimated_cost_usd": str(estimate_cost(self.model_name, usage)),
            },
        )
