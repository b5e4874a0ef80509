"""
LLM module - Model providers behind the sign evaluators.

``create_llm()`` builds the provider named in settings (``LLM_PROVIDER``)
unless one is passed explicitly.
"""

from .base import BaseLLM

__all__ = ["BaseLLM", "create_llm"]

_PROVIDERS = ("claude", "ollama")


def create_llm(provider: str | None = None, **kwargs) -> BaseLLM:
    """Create the LLM provider used for evaluation.

    Args:
        provider: "claude" or "ollama"; defaults to ``settings.llm_provider``.
        **kwargs: Forwarded to the provider constructor.

    Raises:
        ValueError: If provider is unknown.
    """
    if provider is None:
        from src.core.config import get_settings

        provider = get_settings().llm_provider

    name = provider.strip().lower()
    if name == "claude":
        from .claude import ClaudeLLM

        return ClaudeLLM(**kwargs)
    if name == "ollama":
        from .ollama import OllamaLLM

        return OllamaLLM(**kwargs)
    raise ValueError(f"Unknown LLM provider: {provider} (expected one of {', '.join(_PROVIDERS)})")
