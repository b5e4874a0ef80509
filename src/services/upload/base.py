"""
Abstract base class for clip hosting backends.
"""

from abc import ABC, abstractmethod

from src.core.models import MediaReference
from src.services.camera.buffer import Clip


class BaseUploader(ABC):
    """Interface that every hosting backend must implement."""

    @abstractmethod
    async def upload(self, clip: Clip) -> MediaReference:
        """Store ``clip`` and return where it can be fetched.

        Each call creates a new resource; uploading the same clip twice
        yields two references.

        Raises:
            UploadError: Empty clip, timeout, transport failure or rejection.
        """
