"""
Abstract base class for capture devices.

The practice session only talks to this interface, so a webcam, a file
replay or a test double can stand behind it.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable


class BaseCamera(ABC):
    """Interface that every capture device must implement.

    Implementations convert their own failures into
    ``CameraPermissionDeniedError`` / ``CameraUnavailableError``; no raw
    driver exception may escape ``open()``.
    """

    #: MIME type of the bytes handed to the ``on_data`` callback.
    mime_type: str = "application/octet-stream"

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """True while the device is held by this instance."""

    @abstractmethod
    async def open(self, width: int, height: int, facing_mode: str = "user") -> None:
        """Acquire exclusive access to the device at a fixed resolution.

        Raises:
            CameraPermissionDeniedError: Access was refused.
            CameraUnavailableError: No device, or the hardware failed.
        """

    @abstractmethod
    async def start_recording(self, on_data: Callable[[bytes], None]) -> None:
        """Begin emitting encoded media chunks to ``on_data``."""

    @abstractmethod
    async def stop_recording(self) -> None:
        """Stop emitting chunks; every pending chunk is delivered first."""

    @abstractmethod
    async def release(self) -> None:
        """Stop all tracks and free the device. Safe to call repeatedly."""
