"""
Abstract base class for evaluation backends.

Every backend returns the same ``EvaluationVerdict`` shape, so the
practice session does not care whether the verdict came from a structured
LLM call, a free-text adapter, a simulation or a remote endpoint.
"""

import logging
from abc import ABC, abstractmethod

from pydantic import ValidationError

from src.core.exceptions import ErrorReason, EvaluationError
from src.core.models import EvaluationVerdict, MediaReference, SignContext

logger = logging.getLogger(__name__)


class BaseEvaluator(ABC):
    """Interface that every evaluation backend must implement."""

    @abstractmethod
    async def evaluate(self, reference: MediaReference, context: SignContext) -> EvaluationVerdict:
        """Judge the learner's clip at ``reference`` against ``context``.

        Args:
            reference: Where the uploaded clip can be fetched.
            context: Sign name, instructions and optional reference media.

        Returns:
            A fresh verdict. Repeated calls may disagree.

        Raises:
            EvaluationError: On timeout, transport failure, rejection or a
                response that does not match the verdict schema.
        """


def verdict_from_payload(payload: object) -> EvaluationVerdict:
    """Validate a decoded JSON payload as an ``EvaluationVerdict``.

    Raises:
        EvaluationError: ``malformed_response`` for anything off-schema.
    """
    if not isinstance(payload, dict):
        raise EvaluationError(
            ErrorReason.malformed_response,
            f"Expected a JSON object, got {type(payload).__name__}",
        )
    try:
        return EvaluationVerdict.model_validate(payload)
    except ValidationError as exc:
        logger.warning("Verdict failed schema validation: %s", exc.errors()[:3])
        raise EvaluationError(
            ErrorReason.malformed_response,
            f"Verdict does not match schema ({exc.error_count()} errors)",
        ) from exc
