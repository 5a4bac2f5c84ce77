"""Main entry point for the exam HTTP API."""

import logging
import os

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from examiner.core import BootConfiguration, di, ExaminerContainer
from examiner.core.config.web import ExaminerWebSettings
from examiner.exam import ConcurrentTurnError, EmptyAnswerError, ExamError, InvalidReviewError, \
    InvalidTransitionError, NoQuestionsError, NotFoundError, SessionNotInProgressError, ThreadCompletedError
from examiner.llm import AssessorError
from examiner.model import DeploymentEnvironment

from .route import router

BOOT_ENV = "__Examiner_BOOT"

logger = logging.getLogger(__name__)

EXAM_ERROR_STATUS: dict[type[ExamError], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    EmptyAnswerError: status.HTTP_400_BAD_REQUEST,
    NoQuestionsError: status.HTTP_400_BAD_REQUEST,
    InvalidReviewError: status.HTTP_400_BAD_REQUEST,
    SessionNotInProgressError: status.HTTP_409_CONFLICT,
    ThreadCompletedError: status.HTTP_409_CONFLICT,
    InvalidTransitionError: status.HTTP_409_CONFLICT,
    ConcurrentTurnError: status.HTTP_409_CONFLICT,
}


async def handle_exam_error(request: Request, exc: Exception) -> JSONResponse:
    code = next(
        (c for kind, c in EXAM_ERROR_STATUS.items() if isinstance(exc, kind)),
        status.HTTP_400_BAD_REQUEST,
    )
    return JSONResponse(status_code=code, content={"detail": str(exc)})


async def handle_assessor_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("assessor call failed", extra={"path": request.url.path, "error": str(exc)})
    return JSONResponse(status_code=status.HTTP_502_BAD_GATEWAY, content={"detail": f"assessment failed: {exc}"})


@di.inject
def _create_app(
    config: ExaminerWebSettings = di.Provide["config.web.examiner", di.as_(ExaminerWebSettings)],
    env: DeploymentEnvironment = di.Provide["env"],
) -> FastAPI:
    app = FastAPI(
        title="Examiner",
        description="Conversational, automatically graded examinations",
        version="0.1.0",
    )

    if env is DeploymentEnvironment.Local and config.frontend is not None:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[
                f"http://{config.frontend.host}:{config.frontend.port}",
                f"http://localhost:{config.frontend.port}",
            ],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.add_exception_handler(ExamError, handle_exam_error)
    app.add_exception_handler(AssessorError, handle_assessor_error)
    app.include_router(router)
    return app


def create_app() -> FastAPI:
    """Factory function for uvicorn."""
    boot_vars = os.getenv(BOOT_ENV)
    if boot_vars:
        boot_cf = BootConfiguration.model_validate_json(boot_vars)
        ct = ExaminerContainer()
        ExaminerContainer.boot(ct, **dict(boot_cf))
        ct.wire(packages=["examiner.web.examiner"])
        # fail at startup, not mid-exam, when a prompt template is missing
        ct.exam.prompt_builder()
        return _create_app(
            config=ExaminerWebSettings(**ct.config.web.examiner()),
            env=boot_cf.env,
        )
    return _create_app()
