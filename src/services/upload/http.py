"""
HTTP client for a remote clip hosting endpoint.

Sends the clip as the multipart field ``video`` and expects
``{"url": ..., "id": ...}`` back.
"""

import logging

import httpx

from src.core.config import get_settings
from src.core.exceptions import ErrorReason, UploadError
from src.core.models import MediaReference
from src.services.camera.buffer import Clip
from src.services.upload.base import BaseUploader
from src.services.upload.media_store import extension_for

logger = logging.getLogger(__name__)


class HttpUploader(BaseUploader):
    """Uploads clips to ``POST /api/v1/upload-video`` or a compatible service."""

    def __init__(
        self,
        url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        settings = get_settings()
        self._url = url or settings.upload_url
        self._timeout = settings.upload_timeout if timeout is None else timeout
        self._client = client or httpx.AsyncClient(timeout=self._timeout)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def upload(self, clip: Clip) -> MediaReference:
        if clip.size == 0:
            raise UploadError(ErrorReason.invalid_input, "Clip is empty")

        files = {"video": (f"attempt{extension_for(clip.mime_type)}", clip.data, clip.mime_type)}
        logger.info("Uploading %d byte clip to %s", clip.size, self._url)
        try:
            resp = await self._client.post(self._url, files=files)
            resp.raise_for_status()
        except httpx.TimeoutException as exc:
            logger.warning("Upload timed out: %s", exc)
            raise UploadError(ErrorReason.timeout, "Upload timed out") from None
        except httpx.HTTPStatusError as exc:
            try:
                detail = exc.response.json().get("error", exc.response.text)
            except Exception:
                detail = exc.response.text or str(exc)
            logger.warning("Upload rejected (%s): %s", exc.response.status_code, detail)
            raise UploadError(ErrorReason.server_rejection, str(detail)) from None
        except httpx.HTTPError as exc:
            logger.warning("Upload network error: %s", exc)
            raise UploadError(ErrorReason.network, f"Network error: {exc}") from None

        try:
            body = resp.json()
            reference = MediaReference(url=body["url"], id=body.get("id") or body["publicId"])
        except (ValueError, KeyError, TypeError) as exc:
            raise UploadError(
                ErrorReason.server_rejection, "Hosting service returned no url/id"
            ) from exc
        logger.info("Clip stored as %s", reference.id)
        return reference
