"""
OpenCV webcam implementation.

Uses ``cv2.VideoCapture`` for the local capture device. Device calls block,
so they run through ``asyncio.to_thread`` to keep the session's event loop
responsive. Recorded frames are JPEG-encoded and emitted back to back as a
motion-JPEG stream.
"""

import asyncio
import logging
from collections.abc import Callable

import cv2

from src.core.config import get_settings
from src.core.exceptions import CameraPermissionDeniedError, CameraUnavailableError
from src.services.camera.base import BaseCamera

logger = logging.getLogger(__name__)


class OpenCVCamera(BaseCamera):
    """Local webcam accessed through OpenCV.

    OpenCV has no permission prompt of its own. A device that opens but
    never delivers a frame is what the OS returns when camera access is
    blocked, so that case is reported as a permission denial.
    """

    mime_type = "video/x-motion-jpeg"

    def __init__(
        self,
        index: int | None = None,
        fps: int | None = None,
        jpeg_quality: int = 85,
    ) -> None:
        settings = get_settings()
        self._index = settings.camera_index if index is None else index
        self._fps = fps or settings.camera_fps
        self._jpeg_quality = jpeg_quality
        self._capture: cv2.VideoCapture | None = None
        self._record_task: asyncio.Task | None = None
        self._stop_event = asyncio.Event()

    @property
    def is_open(self) -> bool:
        return self._capture is not None

    def _open_capture(self, width: int, height: int) -> cv2.VideoCapture:
        capture = cv2.VideoCapture(self._index)
        if not capture.isOpened():
            capture.release()
            raise CameraUnavailableError(f"Camera {self._index} failed to initialize")

        capture.set(cv2.CAP_PROP_FRAME_WIDTH, width)
        capture.set(cv2.CAP_PROP_FRAME_HEIGHT, height)

        ok, _frame = capture.read()
        if not ok:
            capture.release()
            raise CameraPermissionDeniedError(
                f"Camera {self._index} opened but returned no frames"
            )
        return capture

    async def open(self, width: int, height: int, facing_mode: str = "user") -> None:
        if self._capture is not None:
            return
        try:
            self._capture = await asyncio.to_thread(self._open_capture, width, height)
        except (CameraPermissionDeniedError, CameraUnavailableError):
            raise
        except cv2.error as exc:
            logger.warning("OpenCV error opening camera %s: %s", self._index, exc)
            raise CameraUnavailableError(f"Camera {self._index} error: {exc}") from exc
        logger.info("Camera %s opened at %dx%d", self._index, width, height)

    def _encode(self, frame) -> bytes | None:
        ok, buf = cv2.imencode(".jpg", frame, [cv2.IMWRITE_JPEG_QUALITY, self._jpeg_quality])
        return buf.tobytes() if ok else None

    async def _record_loop(self, on_data: Callable[[bytes], None]) -> None:
        interval = 1.0 / max(self._fps, 1)
        while not self._stop_event.is_set() and self._capture is not None:
            try:
                ok, frame = await asyncio.to_thread(self._capture.read)
                chunk = self._encode(frame) if ok else None
            except cv2.error as exc:
                logger.warning("OpenCV error while recording from camera %s: %s", self._index, exc)
                raise CameraUnavailableError(f"Camera {self._index} error: {exc}") from exc
            if chunk:
                on_data(chunk)
            elif not ok:
                logger.debug("Dropped frame from camera %s", self._index)
            await asyncio.sleep(interval)

    async def start_recording(self, on_data: Callable[[bytes], None]) -> None:
        if self._capture is None:
            raise CameraUnavailableError("Camera is not open")
        self._stop_event.clear()
        self._record_task = asyncio.create_task(self._record_loop(on_data))

    async def stop_recording(self) -> None:
        self._stop_event.set()
        task, self._record_task = self._record_task, None
        if task is not None:
            # re-raises a CameraUnavailableError from the record loop
            await task

    async def release(self) -> None:
        try:
            await self.stop_recording()
        finally:
            if self._capture is not None:
                capture = self._capture
                self._capture = None
                await asyncio.to_thread(capture.release)
                logger.info("Camera %s released", self._index)
