"""
Abstract base class for LLM providers.

All LLM implementations (Claude, Ollama, etc.) must implement this interface,
so the evaluators stay provider-agnostic.
"""

from abc import ABC, abstractmethod


class BaseLLM(ABC):
    """Interface that every LLM provider must implement."""

    @abstractmethod
    async def generate(self, prompt: str, **kwargs) -> str:
        """Generate a free-form text response.

        Args:
            prompt: The user prompt to send to the model.
            **kwargs: Provider-specific options (system, temperature, max_tokens).

        Returns:
            The model's text response.
        """

    @abstractmethod
    async def generate_json(self, prompt: str, system: str, **kwargs) -> str:
        """Generate a response constrained to a single JSON object.

        Args:
            prompt: The user prompt carrying the data to judge.
            system: Instructions describing the expected JSON shape.
            **kwargs: Provider-specific options.

        Returns:
            Raw model output that should parse as JSON. Callers validate it.
        """
