"""
Camera module - Capture device abstraction and clip buffering.

Factory function for creating camera instances based on provider configuration.
"""

from .base import BaseCamera
from .buffer import Clip, ClipBuffer

__all__ = ["BaseCamera", "Clip", "ClipBuffer", "create_camera"]


def create_camera(provider: str, **kwargs) -> BaseCamera:
    """
    Factory function to create a camera instance based on provider.

    Args:
        provider: Camera provider name ("opencv")
        **kwargs: Provider-specific configuration

    Returns:
        BaseCamera implementation instance

    Raises:
        ValueError: If provider is unknown
    """
    if provider == "opencv":
        from .opencv import OpenCVCamera

        return OpenCVCamera(**kwargs)
    else:
        raise ValueError(f"Unknown camera provider: {provider}")
