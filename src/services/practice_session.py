"""Practice session: the recording state machine for one practical test.

A session owns the camera, a countdown, a fixed capture window and the
single clip recorded for the current attempt. Timers are asyncio tasks
on the session's event loop; there is no other concurrency. Every exit
path (pass, skip, close, ``async with`` exit, errors during acquisition)
goes through ``_teardown`` so the camera is released exactly once and no
timer outlives its state.

Usage::

    async with PracticeSession(item, camera, pipeline, on_pass=advance) as session:
        await session.request_camera()
        await session.start_countdown()
        ...  # countdown and recording tick on their own
        await session.submit()
"""

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable

from src.core.config import get_settings
from src.core.exceptions import (
    CameraError,
    CameraPermissionDeniedError,
    SignSproutError,
    SubmissionError,
)
from src.core.models import (
    EvaluationVerdict,
    GateResult,
    PracticalTestItem,
    SessionErrorInfo,
    SessionEvent,
    SessionState,
)
from src.services.camera import BaseCamera, Clip, ClipBuffer, create_camera
from src.services.evaluation import create_evaluator
from src.services.gating import gate
from src.services.pipeline import SubmissionPipeline
from src.services.upload import create_uploader

logger = logging.getLogger(__name__)

_CLIP_STATES = frozenset({SessionState.recorded, SessionState.evaluating, SessionState.result})


class PracticeSession:
    """One learner attempt at a practical test item, from camera request to pass/skip.

    Args:
        item: The practical test being attempted (sign, instructions, hints).
        camera: Capture device; acquired by ``request_camera``.
        pipeline: Upload + evaluation pipeline used by ``submit``.
        countdown_seconds: Countdown start value (default from settings).
        max_recording_seconds: Capture window (default from settings).
        tick_interval: Seconds per countdown / recording tick.
        pass_threshold: Score needed to pass (default from settings).
        notify: Optional async callback receiving a ``SessionEvent`` on each
            transition and tick. Failures are logged and ignored.
        on_pass: Async callback invoked with the verdict after ``pass_test``.
        on_skip: Async callback invoked after ``skip``.
    """

    def __init__(
        self,
        item: PracticalTestItem,
        camera: BaseCamera,
        pipeline: SubmissionPipeline,
        *,
        countdown_seconds: int | None = None,
        max_recording_seconds: int | None = None,
        tick_interval: float | None = None,
        pass_threshold: float | None = None,
        notify: Callable[[SessionEvent], Awaitable[None]] | None = None,
        on_pass: Callable[[EvaluationVerdict], Awaitable[None]] | None = None,
        on_skip: Callable[[], Awaitable[None]] | None = None,
    ) -> None:
        settings = get_settings()
        self._item = item
        self._context = item.to_sign_context()
        self._camera = camera
        self._pipeline = pipeline
        self._countdown_seconds = (
            settings.countdown_seconds if countdown_seconds is None else countdown_seconds
        )
        self._max_seconds = (
            settings.max_recording_seconds
            if max_recording_seconds is None
            else max_recording_seconds
        )
        self._tick = settings.tick_interval if tick_interval is None else tick_interval
        self._threshold = settings.pass_threshold if pass_threshold is None else pass_threshold
        self._camera_size = (settings.camera_width, settings.camera_height)
        self._notify = notify
        self._on_pass = on_pass
        self._on_skip = on_skip

        self._state = SessionState.idle
        self._buffer = ClipBuffer()
        self._clip: Clip | None = None
        self._elapsed = 0
        self._countdown_remaining = self._countdown_seconds
        self._permission_denied = False
        self._last_error: SessionErrorInfo | None = None
        self._verdict: EvaluationVerdict | None = None
        self._gate_result: GateResult | None = None
        self._attempt = 0
        self._timer_task: asyncio.Task | None = None
        self._camera_acquired = False
        self._capturing = False

    @classmethod
    def from_settings(cls, item: PracticalTestItem, **kwargs) -> "PracticeSession":
        """Build a session wired to the configured webcam and remote endpoints."""
        settings = get_settings()
        pipeline = SubmissionPipeline(
            uploader=create_uploader("http"),
            evaluator=create_evaluator("http"),
        )
        camera = create_camera(settings.camera_provider)
        return cls(item, camera, pipeline, **kwargs)

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def clip(self) -> Clip | None:
        return self._clip

    @property
    def elapsed_seconds(self) -> int:
        return self._elapsed

    @property
    def countdown_remaining(self) -> int:
        return self._countdown_remaining

    @property
    def max_recording_seconds(self) -> int:
        return self._max_seconds

    @property
    def permission_denied(self) -> bool:
        return self._permission_denied

    @property
    def last_error(self) -> SessionErrorInfo | None:
        return self._last_error

    @property
    def verdict(self) -> EvaluationVerdict | None:
        return self._verdict

    @property
    def gate_result(self) -> GateResult | None:
        return self._gate_result

    @property
    def attempt(self) -> int:
        """Number of verdicts received so far."""
        return self._attempt

    @property
    def camera_acquired(self) -> bool:
        return self._camera_acquired

    @property
    def is_closed(self) -> bool:
        return self._state is SessionState.closed

    # ------------------------------------------------------------------
    # Learner actions
    # ------------------------------------------------------------------

    async def request_camera(self) -> None:
        """Acquire the front camera. Errors are recorded, not raised."""
        if not self._expect(SessionState.idle, "request_camera"):
            return

        self._permission_denied = False
        self._last_error = None
        await self._transition(SessionState.requesting_permission)

        width, height = self._camera_size
        try:
            await self._camera.open(width, height, facing_mode="user")
        except CameraError as exc:
            logger.warning("Camera acquisition failed for item %s: %s", self._item.id, exc.detail)
            await self._release_camera()
            if self.is_closed:
                return
            self._permission_denied = isinstance(exc, CameraPermissionDeniedError)
            self._set_error(exc)
            await self._transition(SessionState.idle)
            return
        except BaseException:
            await self._release_camera()
            raise

        self._camera_acquired = True
        if self.is_closed:
            # skip() or close() ran while the permission prompt was open
            await self._release_camera()
            return
        await self._transition(SessionState.ready)

    async def start_countdown(self) -> None:
        """Start the countdown; recording begins automatically at zero."""
        if not self._expect(SessionState.ready, "start_countdown"):
            return

        self._countdown_remaining = self._countdown_seconds
        self._last_error = None
        await self._transition(SessionState.countdown)
        if self._countdown_remaining <= 0:
            await self._begin_recording()
            return
        self._timer_task = asyncio.create_task(self._run_countdown())

    async def stop_recording(self) -> None:
        """Stop capture before the window elapses."""
        if not self._expect(SessionState.recording, "stop_recording"):
            return
        if not self._capturing:
            # the window already elapsed and capture is being stopped
            self._reject("stop_recording")
            return
        await self._cancel_timer()
        await self._finish_recording()

    async def submit(self) -> GateResult | None:
        """Upload and evaluate the recorded clip.

        Returns:
            The gate result on success, or None if the submission failed
            (see ``last_error``) or was ignored.
        """
        if not self._expect(SessionState.recorded, "submit") or self._clip is None:
            return None

        self._last_error = None
        await self._transition(SessionState.evaluating)

        try:
            verdict = await self._pipeline.submit(self._clip, self._context)
        except SubmissionError as exc:
            if self._state is not SessionState.evaluating:
                return None
            self._set_error(exc)
            await self._transition(SessionState.recorded)
            return None

        if self._state is not SessionState.evaluating:
            return None

        self._verdict = verdict
        self._gate_result = gate(verdict, self._item.hints, self._threshold, self._attempt)
        self._attempt += 1
        logger.info(
            "Item %s attempt %d: score=%.1f passed=%s",
            self._item.id,
            self._attempt,
            verdict.accuracy_score,
            self._gate_result.passed,
        )
        await self._transition(SessionState.result)
        return self._gate_result

    async def retry(self) -> None:
        """Discard the current clip (and verdict) and return to ``ready``."""
        if self._state not in (SessionState.recorded, SessionState.result):
            self._reject("retry")
            return

        self._clip = None
        self._buffer.reset()
        self._verdict = None
        self._gate_result = None
        self._last_error = None
        self._elapsed = 0
        await self._transition(SessionState.ready)

    async def pass_test(self) -> None:
        """Accept a passing result, tear down and emit ``on_pass``."""
        if self._state is not SessionState.result or not (
            self._gate_result and self._gate_result.passed
        ):
            self._reject("pass_test")
            return

        verdict = self._verdict
        await self._teardown()
        if self._on_pass is not None:
            await self._on_pass(verdict)

    async def skip(self) -> None:
        """Abandon the test from any state, tear down and emit ``on_skip``."""
        if self.is_closed:
            return
        await self._teardown()
        if self._on_skip is not None:
            await self._on_skip()

    async def close(self) -> None:
        """Tear down without emitting callbacks (e.g. the item was unmounted)."""
        await self._teardown()

    async def __aenter__(self) -> "PracticeSession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------

    async def _run_countdown(self) -> None:
        while self._state is SessionState.countdown and self._countdown_remaining > 0:
            await asyncio.sleep(self._tick)
            if self._state is not SessionState.countdown:
                return
            self._countdown_remaining -= 1
            await self._emit()

        if self._state is SessionState.countdown:
            # _timer_task stays set through the handoff
            await self._begin_recording()

    async def _run_recording_timer(self) -> None:
        while self._state is SessionState.recording and self._elapsed < self._max_seconds:
            await asyncio.sleep(self._tick)
            if self._state is not SessionState.recording:
                return
            self._elapsed += 1
            await self._emit()

        if self._state is SessionState.recording:
            await self._finish_recording()

    async def _cancel_timer(self) -> None:
        task = self._timer_task
        self._timer_task = None
        if task is None or task is asyncio.current_task() or task.done():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    # ------------------------------------------------------------------
    # Capture
    # ------------------------------------------------------------------

    async def _begin_recording(self) -> None:
        self._buffer.reset()
        self._elapsed = 0
        try:
            await self._camera.start_recording(self._buffer.add_bytes)
        except CameraError as exc:
            logger.warning("Could not start capture for item %s: %s", self._item.id, exc.detail)
            if self._state is not SessionState.countdown:
                return
            await self._release_camera()
            self._set_error(exc)
            await self._transition(SessionState.idle)
            return

        self._capturing = True
        if self._state is not SessionState.countdown:
            # torn down while capture was starting
            await self._stop_capture()
            self._buffer.reset()
            return
        await self._transition(SessionState.recording)
        self._timer_task = asyncio.create_task(self._run_recording_timer())

    async def _finish_recording(self) -> None:
        if self._state is not SessionState.recording or not self._capturing:
            return
        error = await self._stop_capture()
        if self._state is not SessionState.recording:
            # torn down while capture was stopping
            return
        if error is not None:
            await self._release_camera()
            self._buffer.reset()
            self._elapsed = 0
            self._set_error(error)
            await self._transition(SessionState.idle)
            return

        self._clip = self._buffer.assemble(self._camera.mime_type, self._elapsed)
        logger.info(
            "Item %s recorded %d bytes in %ds", self._item.id, self._clip.size, self._elapsed
        )
        await self._transition(SessionState.recorded)

    async def _stop_capture(self) -> CameraError | None:
        """Stop an active capture, returning the camera error if one occurred."""
        if not self._capturing:
            return None
        self._capturing = False
        try:
            await self._camera.stop_recording()
        except CameraError as exc:
            logger.warning("Camera failed while stopping capture: %s", exc.detail)
            return exc
        return None

    async def _release_camera(self) -> None:
        """Release the device if this session holds it. Idempotent."""
        if not self._camera_acquired and not self._camera.is_open:
            return
        self._camera_acquired = False
        await self._camera.release()

    async def _teardown(self) -> None:
        if self.is_closed:
            return
        try:
            await self._cancel_timer()
            await self._stop_capture()
        finally:
            await self._release_camera()
            self._clip = None
            self._buffer.reset()
            await self._transition(SessionState.closed)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _expect(self, state: SessionState, action: str) -> bool:
        if self._state is state:
            return True
        self._reject(action)
        return False

    def _reject(self, action: str) -> None:
        logger.debug("Ignoring %s() in state %s", action, self._state)

    def _set_error(self, exc: SignSproutError) -> None:
        self._last_error = SessionErrorInfo(
            code=exc.code,
            message=exc.user_message,
            next_action=exc.next_action,
        )

    async def _transition(self, state: SessionState) -> None:
        previous = self._state
        self._state = state
        if state not in _CLIP_STATES and state is not SessionState.closed:
            # clip lives only in recorded/evaluating/result
            self._clip = None
        logger.info("Item %s: %s -> %s", self._item.id, previous, state)
        await self._emit()

    async def _emit(self) -> None:
        if self._notify is None:
            return
        event = SessionEvent(
            state=self._state,
            countdown_remaining=self._countdown_remaining,
            elapsed_seconds=self._elapsed,
            error=self._last_error,
        )
        try:
            await self._notify(event)
        except Exception:
            logger.warning("Notify callback failed for item %s (non-fatal)", self._item.id)
