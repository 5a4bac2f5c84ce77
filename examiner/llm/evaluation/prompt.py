"""Assessor input construction.

Respondent text is untrusted: it is stripped of the delimiter tags the
instructions rely on, bounded in length, and only ever placed inside
`<respondent-answer>` tags.
"""

from __future__ import annotations

import re
import typing as t
from dataclasses import dataclass

import jinja2
import jinja2.meta
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from examiner.lib.util import truncate
from examiner.model import Message, MessageRole, PromptVariant, Question

RESPONDENT_TAG = re.compile(r"<\s*/?\s*respondent-answer\b[^>]*>", re.IGNORECASE)
SYSTEM_TAG = re.compile(r"<\s*/?\s*system-instructions\b[^>]*>", re.IGNORECASE)

NO_ANSWER = "[No answer provided]"
MAX_ANSWER_LENGTH = 10_000
TRUNCATED_MARKER = "\n\n[Answer truncated due to length]"


class PromptTemplateError(Exception):
    def __init__(self, template: str, reason: str):
        super().__init__(f"prompt template {template}: {reason}")
        self.template = template


@dataclass(frozen=True)
class AssessorInput:
    messages: tuple[BaseMessage, ...]
    # False once the follow-up allowance is spent; the instruction then forbids asking
    can_followup: bool = False


def sanitize_answer(text: str) -> str:
    text = RESPONDENT_TAG.sub("", text)
    text = SYSTEM_TAG.sub("", text)
    text = text.strip()
    if not text:
        return NO_ANSWER
    text, _ = truncate(text, MAX_ANSWER_LENGTH, TRUNCATED_MARKER)
    return text


def wrap_answer(text: str) -> str:
    return f"<respondent-answer>\n{text}\n</respondent-answer>"


def count_followups(conversation: t.Sequence[Message]) -> int:
    """Assessor turns so far; each one may have carried a follow-up question"""
    return sum(1 for m in conversation if m.role is MessageRole.Assessor)


def render_transcript(conversation: t.Sequence[Message]) -> str:
    parts: list[str] = []
    for m in conversation:
        match m.role:
            case MessageRole.Respondent:
                parts.append(f"Respondent: {m.content}")
            case MessageRole.Assessor:
                parts.append(f"Assessor: {m.content}")
            case MessageRole.System:
                continue
    return "\n\n".join(parts)


class PromptBuilder(object):
    """Renders assessor inputs for one strictness variant

    Templates are loaded when the builder is constructed, so a missing or
    broken template fails at startup rather than mid-exam.
    """

    def __init__(self, env: jinja2.Environment, variant: PromptVariant):
        self.variant = variant
        self.evaluation_template = self._load(env, f"evaluation/eval_{variant.value}.j2")
        self.grading_template = self._load(env, f"evaluation/grade_{variant.value}.j2")

    @classmethod
    def _load(cls, env: jinja2.Environment, name: str) -> jinja2.Template:
        """Compile `name` and, recursively, every template it extends or includes

        jinja2 resolves `{% extends %}` only at render time, so parents are
        loaded here explicitly.
        """
        assert env.loader is not None
        try:
            template = env.get_template(name)
            source, _, _ = env.loader.get_source(env, name)
        except jinja2.TemplateNotFound as e:
            raise PromptTemplateError(name, "not found") from e
        except jinja2.TemplateSyntaxError as e:
            raise PromptTemplateError(name, f"line {e.lineno}: {e.message}") from e

        for parent in jinja2.meta.find_referenced_templates(env.parse(source)):
            # None for a name computed at render time
            if parent is not None:
                cls._load(env, parent)
        return template

    def build_evaluation_input(
        self, question: Question, conversation: t.Sequence[Message], max_followups: int
    ) -> AssessorInput:
        """Instruction, then the prior turns, then the latest answer in tags"""
        can_followup = count_followups(conversation) < max_followups
        system = self.evaluation_template.render(question=question, can_followup=can_followup)

        latest = max(
            (i for i, m in enumerate(conversation) if m.role is MessageRole.Respondent),
            default=None,
        )
        prior = conversation[:latest] if latest is not None else conversation
        answer = conversation[latest].content if latest is not None else ""

        messages: list[BaseMessage] = [SystemMessage(content=system)]
        for m in prior:
            match m.role:
                case MessageRole.Respondent:
                    messages.append(HumanMessage(content=wrap_answer(sanitize_answer(m.content))))
                case MessageRole.Assessor:
                    messages.append(AIMessage(content=m.content))
                case MessageRole.System:
                    continue
        messages.append(HumanMessage(content=wrap_answer(sanitize_answer(answer))))
        return AssessorInput(messages=tuple(messages), can_followup=can_followup)

    def build_final_grading_input(self, question: Question, conversation: t.Sequence[Message]) -> AssessorInput:
        """Instruction, then the whole sanitized transcript as one turn"""
        system = self.grading_template.render(question=question)
        transcript = sanitize_answer(render_transcript(conversation))
        return AssessorInput(
            messages=(SystemMessage(content=system), HumanMessage(content=wrap_answer(transcript))),
        )
