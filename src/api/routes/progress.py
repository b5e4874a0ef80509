"""
Lesson progress endpoints.

Thin wrappers around ``ProgressLedger``; each request is one transaction.
"""

from fastapi import APIRouter, Response

from src.core.models import CategoryProgress, ProgressUpdateRequest
from src.services.storage.database import get_session
from src.services.storage.progress import ProgressLedger

router = APIRouter(prefix="/progress", tags=["progress"])


@router.get("", response_model=dict[str, CategoryProgress], response_model_by_alias=True)
async def list_progress():
    """Return progress for every category."""
    async with get_session() as session:
        return await ProgressLedger(session).get_all()


@router.delete("", status_code=204)
async def reset_all_progress():
    async with get_session() as session:
        await ProgressLedger(session).reset_all()
    return Response(status_code=204)


@router.get("/{category}", response_model=CategoryProgress | None, response_model_by_alias=True)
async def get_progress(category: str):
    """Return progress for ``category``, or ``null`` if none is stored."""
    async with get_session() as session:
        return await ProgressLedger(session).get(category)


@router.post("/{category}", response_model=CategoryProgress, response_model_by_alias=True)
async def update_progress(category: str, body: ProgressUpdateRequest):
    """Record a completed lesson (and optional test score) in ``category``."""
    async with get_session() as session:
        return await ProgressLedger(session).update(
            category,
            lesson_index=body.lesson_index,
            total_lessons=body.total_lessons,
            test_score=body.test_score,
        )


@router.delete("/{category}", status_code=204)
async def reset_progress(category: str):
    async with get_session() as session:
        await ProgressLedger(session).reset(category)
    return Response(status_code=204)
