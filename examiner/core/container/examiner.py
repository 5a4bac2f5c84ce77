from __future__ import annotations

import datetime
import os
import sys
import types
from pathlib import Path

import pydantic as p
import xdg_base_dirs as xdg
from dependency_injector.containers import DeclarativeContainer
from dependency_injector.providers import Configuration, Container, Object, Provider, Resource, Singleton

import examiner
from examiner.model import BaseModel, DeploymentEnvironment

from ..config import Secrets, Settings
from ..di import NotReady
from ..provider import LoggingProvider, TimestampProvider
from .exam import ExamContainer
from .llm import LLMContainer
from .storage import StorageContainer
from .template import TemplateContainer


def provide_xdg_state() -> Path:
    stp = xdg.xdg_state_home() / "examiner"
    if stp.exists() and stp.is_dir():
        return stp
    stp.mkdir(parents=True, exist_ok=True)
    return stp


class BootConfiguration(BaseModel):
    debug: bool
    env: DeploymentEnvironment
    config_root: p.AnyUrl
    secrets_path: p.AnyUrl | None = None
    override: tuple[str, ...]


class ExaminerContainer(DeclarativeContainer):
    config: Configuration = Configuration()
    secrets: Configuration = Configuration()

    debug: Provider[bool] = Singleton(bool)
    env: Provider[DeploymentEnvironment] = Singleton(DeploymentEnvironment)
    root: Object[NotReady | Path] = Object(NotReady())
    state_path: Provider[Path] = Resource(provide_xdg_state)

    logging: Provider[LoggingProvider] = Resource(LoggingProvider, config=config.logging, debug=debug)
    storage: Provider[StorageContainer] = Container(
        StorageContainer, config=config.storage, secrets=secrets, logging=logging, root=root, state_path=state_path
    )
    template: Provider[TemplateContainer] = Container(TemplateContainer, config=config.template)
    llm: Provider[LLMContainer] = Container(LLMContainer, config=config.llm, secrets=secrets.llm)

    utcnow: Provider[TimestampProvider] = Object(lambda: datetime.datetime.now(datetime.UTC))

    exam: Provider[ExamContainer] = Container(
        ExamContainer,
        config=config.exam,
        templates=template.llm,
        gateway=llm.gateway,
        utcnow=utcnow,
    )

    _boot_config: Provider[BootConfiguration | NotReady] = Object(NotReady())

    @staticmethod
    def boot(
        ct: ExaminerContainer,
        /,
        debug: bool,
        env: DeploymentEnvironment,
        config_root: p.FileUrl,
        secrets_path: p.AnyUrl | None = None,
        override: tuple[str, ...] | None = None,
        wiring: tuple[str | types.ModuleType, ...] | None = None,
    ):
        if config_root.scheme != "file":
            raise ValueError(f"unsupported scheme for config root: {config_root.scheme}")
        ps = Settings(env=env, root=config_root, override=override or ())
        ct.config.from_pydantic(ps)
        ct.wire(
            packages=[
                "examiner.storage",
            ]
        )
        if wiring:
            ct.wire(modules=wiring)
        if imported := [mod for name, mod in sys.modules.items() if name.startswith("examiner.")]:
            ct.wire(modules=imported)

        logger = ct.logging().get_logger()

        for ov in ps.override:
            k, v = ov.split("=", 1)
            logger.info(
                "overriding configuration parameter",
                extra={
                    "key": k,
                    "value": v,
                },
            )

        ct.debug.override(debug)
        ct.env.override(env)
        ct.root.override(Path(os.path.dirname(examiner.__file__)).parent)
        if debug:
            ct.logging().capture_warnings(True)

        secrets = Secrets(env=env, root=secrets_path or config_root)
        ct.secrets.from_pydantic(secrets)

        logger.debug(
            "configuration finished",
            extra={
                "config": str(config_root),
                "env": env.value,
            },
        )
        ct._boot_config.override(
            BootConfiguration(
                debug=debug, env=env, config_root=config_root, secrets_path=secrets_path, override=override or ()
            )
        )
