from __future__ import annotations

from sqlalchemy import func, select

from examiner.core import di
from examiner.lib.sql import upsert
from examiner.model import ImportedFile

from . import Session
from .table import imported_files


def get(path: str, session: Session = di.Provide["storage.persistent.session"]) -> ImportedFile | None:
    stmt = select(imported_files.__table__).where(imported_files.path == path)
    row = session.execute(stmt).mappings().one_or_none()
    return ImportedFile(**row) if row else None


def record(path: str, sha256: str, session: Session = di.Provide["storage.persistent.session"]) -> ImportedFile:
    upsert(
        session,
        imported_files.__table__,  # pyright: ignore [reportArgumentType]
        {"path": path, "sha256": sha256},
        index_elements=["path"],
        update=["sha256"],
        extra_set={"imported_at": func.now()},
    )
    session.flush()
    return get(path, session=session)  # type: ignore
