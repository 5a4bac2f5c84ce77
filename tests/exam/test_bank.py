"""Tests for examiner.exam.bank."""

from __future__ import annotations

import json
import typing as t
from pathlib import Path

import pytest
from sqlalchemy.orm import Session

from examiner.exam import load_question_bank, QuestionBankError
from examiner.model import Difficulty
from examiner.storage import blueprint as blueprint_storage
from examiner.storage import question as question_storage

QUESTIONS: list[dict[str, t.Any]] = [
    {
        "text": "What does ACID stand for?",
        "difficulty": "easy",
        "topic": "databases",
        "rubric": "All four properties named.",
        "model_answer": "Atomicity, consistency, isolation, durability.",
        "max_points": 4,
    },
    {
        "text": "  Explain the CAP theorem.  ",
        "difficulty": "hard",
        "topic": "distributed systems",
        "max_points": 10,
        "source": "lecture 7",
    },
]


def write_bank(path: Path, entries: list[dict[str, t.Any]]) -> Path:
    path.write_text(json.dumps(entries), encoding="utf8")
    return path


class TestLoadQuestionBank(object):
    def test_first_import(self, db_session: Session, tmp_path: Path) -> None:
        path = write_bank(tmp_path / "bank.json", QUESTIONS)

        summary = load_question_bank([path], max_followups=2, session=db_session)

        assert summary.imported == {path: 2}
        with db_session.begin():
            questions = question_storage.find(session=db_session)
            [blueprint] = blueprint_storage.find(name="Exam", session=db_session)
        assert blueprint.max_followups == 2
        assert [q.text for q in questions] == ["What does ACID stand for?", "Explain the CAP theorem."]
        assert questions[0].reference_answer == "Atomicity, consistency, isolation, durability."
        assert questions[1].difficulty is Difficulty.Hard
        assert questions[1].rubric == ""

    def test_unchanged_file_skipped(self, db_session: Session, tmp_path: Path) -> None:
        path = write_bank(tmp_path / "bank.json", QUESTIONS)
        load_question_bank([path], max_followups=2, session=db_session)

        summary = load_question_bank([path], max_followups=2, session=db_session)

        assert summary.unchanged == (path,)
        assert summary.imported == {}
        with db_session.begin():
            assert question_storage.count(session=db_session) == 2
            assert len(blueprint_storage.find(name="Exam", session=db_session)) == 1

    def test_changed_file_skipped_with_warning(
        self, db_session: Session, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        path = write_bank(tmp_path / "bank.json", QUESTIONS)
        load_question_bank([path], max_followups=2, session=db_session)
        write_bank(path, QUESTIONS[:1])

        summary = load_question_bank([path], max_followups=2, session=db_session)

        assert summary.changed == (path,)
        assert any("changed since last import" in r.getMessage() for r in caplog.records)
        with db_session.begin():
            assert question_storage.count(session=db_session) == 2

    def test_invalid_file_stops_import(self, db_session: Session, tmp_path: Path) -> None:
        good = write_bank(tmp_path / "good.json", QUESTIONS)
        bad = write_bank(tmp_path / "bad.json", [{"text": "No points", "difficulty": "easy", "topic": "x"}])

        with pytest.raises(QuestionBankError) as exc_info:
            load_question_bank([good, bad], max_followups=1, session=db_session)

        assert exc_info.value.path == bad
        with db_session.begin():
            # the good file was committed before the bad one was read
            assert question_storage.count(session=db_session) == 2

    def test_unknown_difficulty_rejected(self, db_session: Session, tmp_path: Path) -> None:
        path = write_bank(tmp_path / "bank.json", [{**QUESTIONS[0], "difficulty": "impossible"}])

        with pytest.raises(QuestionBankError):
            load_question_bank([path], max_followups=1, session=db_session)

    def test_missing_file(self, db_session: Session, tmp_path: Path) -> None:
        with pytest.raises(QuestionBankError):
            load_question_bank([tmp_path / "absent.json"], max_followups=1, session=db_session)

    def test_sample_bank_is_valid(self, db_session: Session) -> None:
        sample = Path(__file__).parents[2] / "questions" / "sample.json"

        summary = load_question_bank([sample], max_followups=3, session=db_session)

        assert summary.imported[sample] == 3
