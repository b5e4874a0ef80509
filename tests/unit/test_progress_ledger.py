"""Tests for ProgressLedger on an in-memory SQLite database."""

import pytest

from src.core.exceptions import InvalidProgressError
from src.core.models import TestScore
from src.services.storage.models_db import KeyValue
from src.services.storage.progress import STORAGE_KEY, ProgressLedger


@pytest.fixture
def ledger(db_session):
    return ProgressLedger(db_session)


class TestUpdate:
    async def test_first_update(self, ledger):
        entry = await ledger.update("FAMILY", 3, 8)

        assert entry.last_completed_index == 3
        assert entry.completion_percentage == 50
        assert entry.test_scores == []
        assert entry.last_accessed_date is not None

    @pytest.mark.parametrize(
        ("lesson_index", "total", "expected"),
        [(0, 3, 33), (1, 3, 67), (0, 8, 13), (2, 8, 38), (7, 8, 100), (0, 1, 100)],
    )
    async def test_percentage_rounds_half_up(self, ledger, lesson_index, total, expected):
        entry = await ledger.update("ALPHABET", lesson_index, total)

        assert entry.completion_percentage == expected

    async def test_index_never_moves_backwards(self, ledger):
        await ledger.update("FAMILY", 5, 8)

        entry = await ledger.update("FAMILY", 2, 8)

        assert entry.last_completed_index == 5
        assert entry.completion_percentage == 75

    async def test_score_replaced_by_lesson_id(self, ledger):
        await ledger.update("FAMILY", 3, 8, TestScore(lesson_id=3, score=0, passed=False))

        entry = await ledger.update("FAMILY", 3, 8, TestScore(lesson_id=3, score=1, passed=True))

        assert entry.test_scores == [TestScore(lesson_id=3, score=1, passed=True)]

    async def test_scores_for_other_lessons_kept(self, ledger):
        await ledger.update("FAMILY", 1, 8, TestScore(lesson_id=1, score=1, passed=True))

        entry = await ledger.update("FAMILY", 3, 8, TestScore(lesson_id=3, score=0, passed=False))

        assert [s.lesson_id for s in entry.test_scores] == [1, 3]

    @pytest.mark.parametrize(("lesson_index", "total"), [(0, 0), (-1, 8)])
    async def test_invalid_indices(self, ledger, lesson_index, total):
        with pytest.raises(InvalidProgressError):
            await ledger.update("FAMILY", lesson_index, total)

    async def test_categories_are_independent(self, ledger):
        await ledger.update("FAMILY", 3, 8)
        await ledger.update("COLORS", 0, 4)

        progress = await ledger.get_all()

        assert set(progress) == {"FAMILY", "COLORS"}
        assert progress["COLORS"].completion_percentage == 25


class TestQueries:
    async def test_get_missing_category(self, ledger):
        assert await ledger.get("FAMILY") is None

    async def test_resume_index(self, ledger):
        assert await ledger.resume_index("FAMILY") == 0

        await ledger.update("FAMILY", 3, 8)

        assert await ledger.resume_index("FAMILY") == 4

    async def test_is_category_completed(self, ledger):
        await ledger.update("FAMILY", 6, 8)
        assert await ledger.is_category_completed("FAMILY", 8) is False

        await ledger.update("FAMILY", 7, 8)
        assert await ledger.is_category_completed("FAMILY", 8) is True

    async def test_completion_percentage(self, ledger):
        assert await ledger.completion_percentage("FAMILY") == 0

        await ledger.update("FAMILY", 3, 8)

        assert await ledger.completion_percentage("FAMILY") == 50


class TestReset:
    async def test_reset_one_category(self, ledger):
        await ledger.update("FAMILY", 3, 8)
        await ledger.update("COLORS", 1, 4)

        await ledger.reset("FAMILY")

        assert await ledger.get("FAMILY") is None
        assert await ledger.get("COLORS") is not None

    async def test_reset_all(self, ledger):
        await ledger.update("FAMILY", 3, 8)

        await ledger.reset_all()

        assert await ledger.get_all() == {}

    async def test_reset_unknown_category_is_noop(self, ledger):
        await ledger.reset("NUMBERS")

        assert await ledger.get_all() == {}


class TestStorage:
    async def test_stored_with_camel_case_keys(self, ledger, db_session):
        await ledger.update("FAMILY", 3, 8, TestScore(lesson_id=3, score=1, passed=True))

        row = await db_session.get(KeyValue, STORAGE_KEY)

        assert '"lastCompletedIndex": 3' in row.value
        assert '"testScores"' in row.value
        assert '"lessonId": 3' in row.value

    async def test_corrupt_value_counts_as_empty(self, ledger, db_session):
        db_session.add(KeyValue(key=STORAGE_KEY, value="{not json"))
        await db_session.flush()

        assert await ledger.get_all() == {}

        entry = await ledger.update("FAMILY", 0, 2)
        assert entry.completion_percentage == 50
