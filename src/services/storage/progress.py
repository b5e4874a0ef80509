"""
Per-category lesson progress.

``ProgressLedger`` keeps one JSON document (category -> ``CategoryProgress``)
under ``STORAGE_KEY``. Like the other data-access classes it calls
``flush()`` rather than ``commit()``; the transaction boundary belongs to
the caller (typically :func:`get_session`).
"""

import json
import logging
from datetime import UTC, datetime

from pydantic import TypeAdapter, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import InvalidProgressError
from src.core.models import CategoryProgress, TestScore
from src.core.utils import round_half_up
from src.services.storage.models_db import KeyValue

logger = logging.getLogger(__name__)

STORAGE_KEY = "sign_language_progress"

_ProgressMap = TypeAdapter(dict[str, CategoryProgress])


class ProgressLedger:
    """Read and update lesson progress for all categories.

    Args:
        session: An active SQLAlchemy ``AsyncSession``.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _load(self) -> dict[str, CategoryProgress]:
        row = await self._session.get(KeyValue, STORAGE_KEY)
        if row is None or not row.value:
            return {}
        try:
            return _ProgressMap.validate_json(row.value)
        except ValidationError:
            logger.warning("Stored progress under %r is unreadable; treating as empty", STORAGE_KEY)
            return {}

    async def _save(self, progress: dict[str, CategoryProgress]) -> None:
        value = json.dumps(
            {
                category: entry.model_dump(mode="json", by_alias=True)
                for category, entry in progress.items()
            }
        )
        row = await self._session.get(KeyValue, STORAGE_KEY)
        if row is None:
            self._session.add(KeyValue(key=STORAGE_KEY, value=value))
        else:
            row.value = value
        await self._session.flush()

    async def get_all(self) -> dict[str, CategoryProgress]:
        """Return progress for every category that has any."""
        return await self._load()

    async def get(self, category: str) -> CategoryProgress | None:
        """Return progress for ``category``, or None if it has none."""
        return (await self._load()).get(category)

    async def update(
        self,
        category: str,
        lesson_index: int,
        total_lessons: int,
        test_score: TestScore | None = None,
    ) -> CategoryProgress:
        """Record that ``lesson_index`` was completed.

        The furthest completed index is kept; a test score replaces any
        earlier score for the same lesson id.

        Raises:
            InvalidProgressError: If ``total_lessons < 1`` or ``lesson_index < 0``.
        """
        if total_lessons < 1:
            raise InvalidProgressError(f"total_lessons must be at least 1, got {total_lessons}")
        if lesson_index < 0:
            raise InvalidProgressError(f"lesson_index must be non-negative, got {lesson_index}")

        progress = await self._load()
        existing = progress.get(category)
        last_index = lesson_index
        scores: list[TestScore] = []
        if existing is not None:
            last_index = max(existing.last_completed_index, lesson_index)
            scores = list(existing.test_scores)
        if test_score is not None:
            scores = [s for s in scores if s.lesson_id != test_score.lesson_id]
            scores.append(test_score)

        entry = CategoryProgress(
            last_completed_index=last_index,
            test_scores=scores,
            completion_percentage=min(100, round_half_up((last_index + 1) / total_lessons * 100)),
            last_accessed_date=datetime.now(UTC),
        )
        progress[category] = entry
        await self._save(progress)
        logger.info(
            "Progress %s: lesson %d/%d (%d%%)",
            category,
            last_index + 1,
            total_lessons,
            entry.completion_percentage,
        )
        return entry

    async def reset(self, category: str) -> None:
        """Forget all progress for ``category``."""
        progress = await self._load()
        if progress.pop(category, None) is not None:
            await self._save(progress)

    async def reset_all(self) -> None:
        """Forget progress for every category."""
        row = await self._session.get(KeyValue, STORAGE_KEY)
        if row is not None:
            await self._session.delete(row)
            await self._session.flush()

    async def completion_percentage(self, category: str) -> int:
        entry = await self.get(category)
        return entry.completion_percentage if entry else 0

    async def is_category_completed(self, category: str, total_lessons: int) -> bool:
        entry = await self.get(category)
        return entry is not None and entry.last_completed_index >= total_lessons - 1

    async def resume_index(self, category: str) -> int:
        """Index of the lesson to open next (0 when the category is untouched)."""
        entry = await self.get(category)
        return 0 if entry is None else entry.last_completed_index + 1
