from __future__ import annotations

import typing as t

import sqlalchemy as sqla
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session


def upsert(
    session: Session,
    table: sqla.Table,
    values: dict[str, t.Any],
    *,
    index_elements: t.Sequence[str],
    update: t.Sequence[str],
    extra_set: dict[str, t.Any] | None = None,
) -> None:
    """
    INSERT ... ON CONFLICT (index_elements) DO UPDATE, last writer wins

    `update` names the columns copied from the incoming row; `extra_set`
    assigns further columns only on conflict (e.g. update_time)
    """
    dialect = session.get_bind().dialect.name
    match dialect:
        case "postgresql":
            stmt = postgresql.insert(table).values(**values)
        case "sqlite":
            stmt = sqlite.insert(table).values(**values)
        case _:
            raise NotImplementedError(f"upsert is not supported on {dialect}")

    set_ = {c: stmt.excluded[c] for c in update}
    if extra_set:
        set_.update(extra_set)
    session.execute(stmt.on_conflict_do_update(index_elements=list(index_elements), set_=set_))
