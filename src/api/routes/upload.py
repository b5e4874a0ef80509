"""
Media upload endpoint.

Stores a recorded practice clip and returns the durable URL the
evaluation endpoint is later given.
"""

import asyncio
import logging

from fastapi import APIRouter, File, UploadFile

from src.core.config import get_settings
from src.core.exceptions import ErrorReason, UploadError
from src.core.models import MediaReference
from src.services.upload.media_store import LocalMediaStore, too_large_error

logger = logging.getLogger(__name__)

router = APIRouter(tags=["media"])


@router.post("/upload-video", response_model=MediaReference)
async def upload_video(video: UploadFile | None = File(None)):
    """Store the multipart ``video`` field as a media file."""
    if video is None:
        raise UploadError(ErrorReason.invalid_input, "No video file provided")

    settings = get_settings()
    store = LocalMediaStore()
    limit = store.max_bytes
    if video.size is not None and video.size > limit:
        raise too_large_error(limit, video.size)
    # never buffer more than one byte past the limit
    data = await video.read(limit + 1)
    if len(data) > limit:
        raise too_large_error(limit)

    mime_type = video.content_type or "application/octet-stream"
    try:
        return await asyncio.wait_for(store.save(data, mime_type), timeout=settings.upload_timeout)
    except TimeoutError:
        logger.error("Storing upload %r exceeded %.0fs", video.filename, settings.upload_timeout)
        raise UploadError(ErrorReason.timeout, "Storing the video timed out") from None
