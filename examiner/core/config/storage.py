from __future__ import annotations

import typing as t
from pathlib import Path

import pydantic as p

from .base import BaseSettings


class StorageSettings(BaseSettings):
    persistent: PersistentSettings


class PersistentSettings(BaseSettings):
    """Exactly one backend is configured; postgresql is the deployment default"""

    postgresql: PostgresqlSettings | None = None
    sqlite: SQLiteSettings | None = None

    @p.model_validator(mode="after")
    def check_one_backend(self) -> t.Self:
        if (self.postgresql is None) == (self.sqlite is None):
            raise ValueError("configure exactly one of storage.persistent.postgresql, storage.persistent.sqlite")
        return self


class PostgresqlSettings(BaseSettings):
    host: p.IPvAnyAddress | str | None = None
    port: int = 5432
    database: str
    driver: t.Literal["postgresql+psycopg"] = "postgresql+psycopg"


class SQLiteSettings(BaseSettings):
    """
    `path` of None puts the database file under the XDG state directory;
    `memory` keeps one shared in-process database (tests)
    """

    path: Path | None = None
    memory: bool = False
    driver: t.Literal["sqlite"] = "sqlite"
