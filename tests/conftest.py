"""Shared pytest fixtures for the SignSprout test suite.

Provides a scripted camera double, mock LLM / pipeline backends, sample
lesson items and verdicts, and an in-memory SQLite engine.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from src.core.exceptions import CameraError
from src.core.models import (
    EvaluationVerdict,
    HandShape,
    MediaReference,
    MovementPattern,
    PracticalTestItem,
)
from src.services.camera.base import BaseCamera

# ---------------------------------------------------------------------------
# Camera
# ---------------------------------------------------------------------------


class FakeCamera(BaseCamera):
    """In-memory camera that records how the session drives it.

    Args:
        open_error: Exception raised by ``open()`` (e.g. permission denied).
        chunks: Chunks delivered to ``on_data`` when recording starts.
        hold_open: If set, ``open()`` waits for this event before returning.
        hold_start: If set, ``start_recording()`` waits for this event.
        hold_stop: If set, ``stop_recording()`` waits for this event.
        stop_error: Exception raised by ``stop_recording()``.
    """

    mime_type = "video/webm"

    def __init__(
        self,
        open_error: CameraError | None = None,
        chunks: tuple[bytes, ...] = (b"\x1a\x45\xdf\xa3", b"frame-data"),
        hold_open: asyncio.Event | None = None,
        hold_start: asyncio.Event | None = None,
        hold_stop: asyncio.Event | None = None,
        stop_error: CameraError | None = None,
    ) -> None:
        self.open_error = open_error
        self.chunks = chunks
        self.hold_open = hold_open
        self.hold_start = hold_start
        self.hold_stop = hold_stop
        self.stop_error = stop_error
        self.open_calls: list[tuple[int, int, str]] = []
        self.release_calls = 0
        self.start_calls = 0
        self.stop_calls = 0
        self._open = False
        self._on_data = None

    @property
    def is_open(self) -> bool:
        return self._open

    async def open(self, width: int, height: int, facing_mode: str = "user") -> None:
        self.open_calls.append((width, height, facing_mode))
        if self.hold_open is not None:
            await self.hold_open.wait()
        if self.open_error is not None:
            raise self.open_error
        self._open = True

    async def start_recording(self, on_data) -> None:
        self.start_calls += 1
        if self.hold_start is not None:
            await self.hold_start.wait()
        self._on_data = on_data
        for chunk in self.chunks:
            on_data(chunk)

    async def stop_recording(self) -> None:
        self.stop_calls += 1
        if self.hold_stop is not None:
            await self.hold_stop.wait()
        self._on_data = None
        if self.stop_error is not None:
            raise self.stop_error

    async def release(self) -> None:
        self.release_calls += 1
        self._open = False


@pytest.fixture
def fake_camera():
    """A camera double that opens successfully and emits two chunks."""
    return FakeCamera()


# ---------------------------------------------------------------------------
# Lesson data
# ---------------------------------------------------------------------------


@pytest.fixture
def practical_item():
    """A practical test item for the sign HELLO with two hints."""
    return PracticalTestItem(
        id=4,
        sign_to_perform="HELLO",
        instructions="Start with a flat hand at your forehead and move it outward.",
        hints=["Keep your fingers together.", "Start the movement at your temple."],
        sign_description="Flat hand salute moving away from the forehead",
    )


def make_verdict(score: float, **overrides) -> EvaluationVerdict:
    """Build a verdict with the given score and neutral defaults."""
    fields = {
        "accuracy_score": score,
        "hand_shape_detected": HandShape.flat,
        "movement_pattern_detected": MovementPattern.single_direction,
        "strengths": ("Clear hand shape",),
        "critical_feedback": "",
        "encouragement": "Keep going!",
    }
    fields.update(overrides)
    return EvaluationVerdict(**fields)


@pytest.fixture
def passing_verdict():
    return make_verdict(85)


@pytest.fixture
def failing_verdict():
    return make_verdict(65, critical_feedback="Palm should face outward.")


# ---------------------------------------------------------------------------
# Backends
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_llm():
    """Create a mock LLM provider returning a valid JSON verdict."""
    from src.services.llm.base import BaseLLM

    llm = AsyncMock(spec=BaseLLM)
    llm.generate_json.return_value = (
        '{"accuracy_score": 82, "hand_shape_detected": "Flat", '
        '"movement_pattern_detected": "Single Direction", "strengths": ["Good start"], '
        '"improvements": [], "critical_feedback": "", "encouragement": "Nice!"}'
    )
    return llm


@pytest.fixture
def mock_uploader():
    """Mock uploader returning a fixed media reference."""
    from src.services.upload.base import BaseUploader

    uploader = AsyncMock(spec=BaseUploader)
    uploader.upload.return_value = MediaReference(
        url="http://localhost:8000/media/sign-1-abc.webm", id="sign-1-abc"
    )
    return uploader


@pytest.fixture
def mock_evaluator(passing_verdict):
    """Mock evaluator returning a passing verdict."""
    from src.services.evaluation.base import BaseEvaluator

    evaluator = AsyncMock(spec=BaseEvaluator)
    evaluator.evaluate.return_value = passing_verdict
    return evaluator


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest.fixture
async def db_engine():
    """In-memory SQLite engine with all tables created."""
    from src.services.storage.database import init_db

    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(db_engine):
    """An ``AsyncSession`` on the in-memory engine, rolled back afterwards."""
    factory = async_sessionmaker(db_engine, expire_on_commit=False)
    async with factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def camera_factory():
    """Return the ``FakeCamera`` class for tests that need custom behaviour."""
    return FakeCamera


@pytest.fixture
def verdict_factory():
    """Return ``make_verdict`` for tests that need a specific score."""
    return make_verdict
