from __future__ import annotations

import typing as t

from sqlalchemy import select

from examiner.core import di
from examiner.model import Blueprint, BlueprintID

from . import Session
from .table import blueprints


def get(key: BlueprintID, session: Session = di.Provide["storage.persistent.session"]) -> Blueprint | None:
    stmt = select(blueprints.__table__).where(blueprints.blueprint_id == key)
    row = session.execute(stmt).mappings().one_or_none()
    return Blueprint(**row) if row else None


def find(
    *,
    name: str | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[Blueprint, ...]:
    stmt = select(blueprints.__table__).order_by(blueprints.create_time, blueprints.blueprint_id)
    if name is not None:
        stmt = stmt.where(blueprints.name == name)
    rows = session.execute(stmt).mappings().all()
    return tuple(Blueprint(**row) for row in rows)


def create(params: BlueprintCreateParams, session: Session = di.Provide["storage.persistent.session"]) -> Blueprint:
    blueprint = blueprints(
        blueprint_id=BlueprintID(),
        name=params["name"],
        max_followups=params["max_followups"],
        time_limit_minutes=params.get("time_limit_minutes"),
    )
    session.add(blueprint)
    session.flush()
    return get(blueprint.blueprint_id, session=session)  # type: ignore


class BlueprintCreateParams(t.TypedDict, total=False):
    name: t.Required[str]
    max_followups: t.Required[int]
    time_limit_minutes: int | None
