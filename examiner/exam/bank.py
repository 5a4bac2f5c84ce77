"""Question bank import from JSON files."""

from __future__ import annotations

import hashlib
import logging
import typing as t
from dataclasses import dataclass
from pathlib import Path

import pydantic as p

from examiner.model import BaseModel, Difficulty
from examiner.storage import Session
from examiner.storage import blueprint as blueprint_storage
from examiner.storage import imported_file as imported_file_storage
from examiner.storage import question as question_storage

from .orchestrator import DEFAULT_BLUEPRINT

logger = logging.getLogger(__name__)


class QuestionBankError(Exception):
    def __init__(self, path: Path, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path


class QuestionImport(BaseModel):
    """One entry of a question file"""

    model_config = p.ConfigDict(extra="ignore", populate_by_name=True)

    text: t.Annotated[str, p.StringConstraints(strip_whitespace=True, min_length=1)]
    difficulty: Difficulty
    topic: str
    rubric: str = ""
    reference_answer: str = p.Field(default="", alias="model_answer")
    max_points: p.PositiveInt


QuestionFile = p.TypeAdapter(list[QuestionImport])


@dataclass(frozen=True)
class ImportSummary:
    imported: dict[Path, int]
    unchanged: tuple[Path, ...]
    changed: tuple[Path, ...]


def file_digest(path: Path) -> tuple[bytes, str]:
    data = path.read_bytes()
    return data, hashlib.sha256(data).hexdigest()


def load_question_bank(paths: t.Iterable[Path], *, max_followups: int, session: Session) -> ImportSummary:
    """Import every question file not seen before

    A file is identified by its path and SHA-256. A file whose contents changed
    since it was imported is skipped so the denominators of existing sessions
    stay as they were.
    """
    with session.begin():
        if question_storage.count(session=session) == 0 and not blueprint_storage.find(
            name=DEFAULT_BLUEPRINT, session=session
        ):
            blueprint = blueprint_storage.create(
                {"name": DEFAULT_BLUEPRINT, "max_followups": max_followups}, session=session
            )
            logger.info(
                "created default blueprint",
                extra={"blueprint_id": blueprint.blueprint_id, "max_followups": max_followups},
            )

    imported: dict[Path, int] = {}
    unchanged: list[Path] = []
    changed: list[Path] = []
    for path in paths:
        try:
            data, digest = file_digest(path)
        except OSError as e:
            raise QuestionBankError(path, f"cannot read: {e.strerror}") from e

        with session.begin():
            previous = imported_file_storage.get(str(path), session=session)
            if previous is not None and previous.sha256 == digest:
                logger.info("questions file unchanged, skipping", extra={"path": str(path)})
                unchanged.append(path)
                continue
            if previous is not None:
                logger.warning(
                    "questions file changed since last import, skipping to avoid breaking existing sessions",
                    extra={"path": str(path)},
                )
                changed.append(path)
                continue

            try:
                entries = QuestionFile.validate_json(data)
            except p.ValidationError as e:
                raise QuestionBankError(path, f"invalid question file ({e.error_count()} errors)") from e

            for entry in entries:
                question_storage.create(
                    {
                        "text": entry.text,
                        "difficulty": entry.difficulty,
                        "topic": entry.topic,
                        "rubric": entry.rubric,
                        "reference_answer": entry.reference_answer,
                        "max_points": entry.max_points,
                    },
                    session=session,
                )
            imported_file_storage.record(str(path), digest, session=session)

        logger.info("imported questions", extra={"path": str(path), "count": len(entries)})
        imported[path] = len(entries)

    return ImportSummary(imported=imported, unchanged=tuple(unchanged), changed=tuple(changed))
