"""Route aggregation for the exam HTTP API."""

from fastapi import APIRouter

from . import exam, review

router = APIRouter()
router.include_router(exam.router)
router.include_router(review.router)
