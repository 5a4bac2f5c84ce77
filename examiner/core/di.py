"""Thin layer over dependency_injector's wiring markers."""

from __future__ import annotations

__all__ = ["Manage", "NotReady", "Provide", "as_", "inject"]

import functools
import typing as t

import dependency_injector.wiring as wiring
from dependency_injector.containers import Container
from dependency_injector.providers import Provider
from dependency_injector.wiring import Closing, Provide, TypeModifier

P = t.ParamSpec("P")
R = t.TypeVar("R")
T = t.TypeVar("T")


def inject(fn: t.Callable[P, R]) -> t.Callable[P, R]:
    injections, closing = wiring._fetch_reference_injections(fn)  # pyright: ignore [reportPrivateUsage]
    patched = wiring._get_patched(fn, injections, closing)  # pyright: ignore [reportPrivateUsage]

    # FastAPI resolves string annotations against the handler's __globals__
    if fn.__module__.startswith("examiner.web") and hasattr(fn, "__globals__"):
        return functools.wraps(fn, updated=("__globals__",))(patched)
    return patched


class Manage(object):
    """`Provide[...]` for resources (sessions) that are closed once the call returns"""

    def __new__(cls, provider: Provider[T] | Container | str):
        return Closing[Provide[provider]]

    @classmethod
    def __class_getitem__(cls, item: Provider[T] | Container | str):
        return cls(item)


def as_(type_: type[T]) -> TypeModifier:
    # wiring.as_ is untyped
    return TypeModifier(type_)


class NotReady(object):
    """Placeholder for values only known once the container has booted"""

    _instance: t.ClassVar[NotReady | None] = None

    def __new__(cls) -> NotReady:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "<NotReady>"
