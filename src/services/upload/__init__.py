"""
Upload module - Hosting backends that turn a clip into a durable URL.

Factory function for creating uploaders based on provider configuration.
"""

from .base import BaseUploader

__all__ = ["BaseUploader", "create_uploader"]


def create_uploader(provider: str, **kwargs) -> BaseUploader:
    """
    Factory function to create an uploader instance based on provider.

    Args:
        provider: Uploader name ("http", "local")
        **kwargs: Provider-specific configuration

    Returns:
        BaseUploader implementation instance

    Raises:
        ValueError: If provider is unknown
    """
    if provider == "http":
        from .http import HttpUploader

        return HttpUploader(**kwargs)
    elif provider == "local":
        from .media_store import LocalMediaStore

        return LocalMediaStore(**kwargs)
    else:
        raise ValueError(f"Unknown uploader provider: {provider}")
