from __future__ import annotations

import os
import typing as t

import uvicorn

import examiner.lib.cli as click
from examiner.core import BootConfiguration, di
from examiner.core.config import LoggingSettings, WebSettings

# create_app re-boots the container in each uvicorn worker from this variable
BOOT_ENV = "__Examiner_BOOT"
APP_FACTORY = "examiner.web.examiner:create_app"


@di.inject
def _run(
    boot_cf: BootConfiguration = di.Provide["_boot_config"],
    logging_cf: LoggingSettings = di.Provide["config.logging", di.as_(LoggingSettings)],  # noqa: B008
    web_cf: WebSettings = di.Provide["config.web", di.as_(WebSettings)],  # noqa: B008
    **uvicorn_kwargs: t.Any,
) -> None:
    backend = web_cf.examiner.backend
    os.environ[BOOT_ENV] = boot_cf.model_dump_json()
    uvicorn.run(
        APP_FACTORY,
        factory=True,
        host=str(backend.host),
        port=backend.port,
        log_config=logging_cf.model_dump(),
        **uvicorn_kwargs,
    )


@click.group()
def web(): ...


@web.command(name="serve")
@click.option("-w", "--workers", type=click.IntRange(min=1), default=1)
def serve(workers: int):
    """Serve the exam and review API"""
    _run(workers=workers)


@web.command(name="develop")
def develop():
    """Serve the API, reloading on source changes"""
    _run(reload=True)
