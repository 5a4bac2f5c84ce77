"""Tests for examiner.core.config."""

from __future__ import annotations

import os
from pathlib import Path

import pydantic as p
import pytest

import examiner
from examiner.core.config import Secrets, Settings
from examiner.core.config.exam import ExamSettings
from examiner.core.config.storage import PersistentSettings
from examiner.model import DeploymentEnvironment, PromptVariant

CONFIG_ROOT = p.FileUrl(f"file://{Path(os.path.dirname(examiner.__file__)).parent}/config")


class TestSettings(object):
    def test_test_environment_overlay(self) -> None:
        settings = Settings(env=DeploymentEnvironment.Test, root=CONFIG_ROOT, override=())

        assert settings.storage.persistent.sqlite is not None
        assert settings.storage.persistent.sqlite.memory is True
        assert settings.storage.persistent.postgresql is None
        assert settings.exam.max_followups == 1
        assert settings.exam.shuffle is False
        # no overlay for llm.yaml, so the root file applies
        assert settings.llm.model == "llama3.1"

    def test_local_environment_reads_root(self) -> None:
        settings = Settings(env=DeploymentEnvironment.Local, root=CONFIG_ROOT, override=())

        assert settings.exam.max_followups == 3
        assert settings.exam.question_files == [Path("questions/sample.json")]

    def test_override(self) -> None:
        settings = Settings(
            env=DeploymentEnvironment.Test,
            root=CONFIG_ROOT,
            override=("exam.max_followups=2", "llm.grading.temperature=0.0"),
        )

        assert settings.exam.max_followups == 2
        # untouched keys of the same file survive
        assert settings.exam.shuffle is False
        assert settings.llm.grading.temperature == 0.0


class TestExamSettings(object):
    def test_unknown_variant_falls_back(self, caplog: pytest.LogCaptureFixture) -> None:
        settings = ExamSettings(prompt_variant="harsh")

        assert settings.prompt_variant is PromptVariant.Standard
        assert any("unknown prompt variant" in r.getMessage() for r in caplog.records)

    def test_known_variant(self) -> None:
        assert ExamSettings(prompt_variant="lenient").prompt_variant is PromptVariant.Lenient

    def test_empty_filters_are_none(self) -> None:
        settings = ExamSettings(difficulty="", topic="")

        assert settings.difficulty is None
        assert settings.topic is None

    def test_negative_followups_rejected(self) -> None:
        with pytest.raises(p.ValidationError):
            ExamSettings(max_followups=-1)


class TestPersistentSettings(object):
    def test_requires_a_backend(self) -> None:
        with pytest.raises(p.ValidationError):
            PersistentSettings()

    def test_rejects_two_backends(self) -> None:
        with pytest.raises(p.ValidationError):
            PersistentSettings(sqlite={"memory": True}, postgresql={"database": "examiner"})


class TestSecrets(object):
    def test_yaml_then_environment(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "secrets.yaml").write_text("postgresql:\n  username: examiner\n", encoding="utf8")
        monkeypatch.setenv("EXAMINER_LLM__API_KEY", "sk-test")

        secrets = Secrets(env=DeploymentEnvironment.Local, root=p.FileUrl(f"file://{tmp_path}"))

        assert secrets.llm.api_key.get_secret_value() == "sk-test"
        assert secrets.postgresql.username is not None
        assert secrets.postgresql.username.get_secret_value() == "examiner"
        assert secrets.postgresql.password is None

    def test_defaults_without_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("EXAMINER_LLM__API_KEY", raising=False)

        secrets = Secrets(env=DeploymentEnvironment.Local, root=p.FileUrl(f"file://{tmp_path}"))

        assert secrets.llm.api_key.get_secret_value() == "not-needed"
