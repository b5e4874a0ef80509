"""
Local filesystem clip hosting.

Backs the upload endpoint: clips are written under ``media_dir`` and
served from ``media_base_url`` by the API's static mount.
"""

import asyncio
import logging
import time
import uuid
from pathlib import Path

from src.core.config import get_settings
from src.core.exceptions import ErrorReason, UploadError
from src.core.models import MediaReference
from src.services.camera.buffer import Clip
from src.services.upload.base import BaseUploader

logger = logging.getLogger(__name__)

_EXTENSIONS = {
    "video/webm": ".webm",
    "video/mp4": ".mp4",
    "video/quicktime": ".mov",
    "video/x-motion-jpeg": ".mjpeg",
}


def extension_for(mime_type: str) -> str:
    """Return a file extension for ``mime_type`` (``.bin`` if unknown)."""
    return _EXTENSIONS.get(mime_type.split(";")[0].strip().lower(), ".bin")


def too_large_error(limit: int, size: int | None = None) -> UploadError:
    """Build the 413 rejection for a clip over ``limit`` bytes."""
    actual = f"{size} bytes" if size is not None else f"over {limit} bytes"
    return UploadError(
        ErrorReason.server_rejection,
        f"Video is {actual}; limit is {limit}",
        status_code=413,
    )


class LocalMediaStore(BaseUploader):
    """Stores clips as files and returns public URLs for them."""

    def __init__(
        self,
        media_dir: str | None = None,
        base_url: str | None = None,
        max_bytes: int | None = None,
    ) -> None:
        settings = get_settings()
        self._media_dir = Path(media_dir or settings.media_dir)
        self._base_url = (base_url or settings.media_base_url).rstrip("/")
        self._max_bytes = settings.max_upload_bytes if max_bytes is None else max_bytes

    @property
    def media_dir(self) -> Path:
        return self._media_dir

    @property
    def max_bytes(self) -> int:
        return self._max_bytes

    def _write(self, path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)

    async def save(self, data: bytes, mime_type: str) -> MediaReference:
        """Write ``data`` to a new file and return its reference."""
        if not data:
            raise UploadError(ErrorReason.invalid_input, "No video file provided")
        if len(data) > self._max_bytes:
            raise too_large_error(self._max_bytes, len(data))

        media_id = f"sign-{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}"
        filename = f"{media_id}{extension_for(mime_type)}"
        try:
            await asyncio.to_thread(self._write, self._media_dir / filename, data)
        except OSError as exc:
            logger.error("Failed to store clip %s: %s", filename, exc)
            raise UploadError(ErrorReason.server_rejection, "Could not store video") from exc

        logger.info("Stored %d byte clip as %s", len(data), filename)
        return MediaReference(url=f"{self._base_url}/{filename}", id=media_id)

    async def upload(self, clip: Clip) -> MediaReference:
        return await self.save(clip.data, clip.mime_type)
