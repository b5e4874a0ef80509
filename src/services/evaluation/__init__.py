"""
Evaluation module - Backends that turn an uploaded clip into a verdict.

Factory function for creating evaluators based on provider configuration.
"""

from .base import BaseEvaluator

__all__ = ["BaseEvaluator", "create_evaluator"]


def create_evaluator(provider: str, **kwargs) -> BaseEvaluator:
    """
    Factory function to create an evaluator instance based on provider.

    Args:
        provider: Evaluator name ("llm", "text", "simulated", "http")
        **kwargs: Provider-specific configuration

    Returns:
        BaseEvaluator implementation instance

    Raises:
        ValueError: If provider is unknown
    """
    if provider in ("llm", "text"):
        from src.services.llm import create_llm

        llm = kwargs.pop("llm", None) or create_llm()
        if provider == "llm":
            from .llm_evaluator import LLMEvaluator

            return LLMEvaluator(llm, **kwargs)

        from .text_adapter import TextVerdictAdapter

        return TextVerdictAdapter(llm, **kwargs)
    elif provider == "simulated":
        from .simulated import SimulatedEvaluator

        return SimulatedEvaluator(**kwargs)
    elif provider == "http":
        from .http import HttpEvaluator

        return HttpEvaluator(**kwargs)
    else:
        raise ValueError(f"Unknown evaluator provider: {provider}")
