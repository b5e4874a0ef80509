"""
Structured LLM evaluation.

Asks the configured LLM provider for a JSON verdict and validates it
against ``EvaluationVerdict``. This is the canonical evaluation backend.
"""

import json
import logging

from src.core.exceptions import ErrorReason, EvaluationError
from src.core.models import EvaluationVerdict, MediaReference, SignContext
from src.core.utils import extract_json_object
from src.services.evaluation.base import BaseEvaluator, verdict_from_payload
from src.services.evaluation.prompts import SYSTEM_PROMPT, build_user_prompt
from src.services.llm.base import BaseLLM

logger = logging.getLogger(__name__)


def parse_verdict(raw_response: str) -> EvaluationVerdict:
    """Decode and validate a raw LLM reply.

    Raises:
        EvaluationError: ``malformed_response`` if the reply is not JSON or
            does not match the verdict schema.
    """
    try:
        data = json.loads(extract_json_object(raw_response))
    except json.JSONDecodeError as exc:
        raise EvaluationError(
            ErrorReason.malformed_response,
            f"Invalid JSON from LLM: {raw_response[:200]}",
        ) from exc
    return verdict_from_payload(data)


class LLMEvaluator(BaseEvaluator):
    """Evaluates clips with a single JSON-mode LLM call."""

    def __init__(self, llm: BaseLLM) -> None:
        """Initialize with the configured LLM provider.

        Args:
            llm: An LLM provider implementing ``BaseLLM``.
        """
        self._llm = llm

    async def evaluate(self, reference: MediaReference, context: SignContext) -> EvaluationVerdict:
        prompt = build_user_prompt(reference, context)
        logger.info("Evaluating '%s' at %s", context.sign_to_perform, reference.url)

        try:
            raw_response = await self._llm.generate_json(prompt, system=SYSTEM_PROMPT)
        except TimeoutError as exc:
            raise EvaluationError(ErrorReason.timeout, f"LLM call timed out: {exc}") from exc
        except ConnectionError as exc:
            raise EvaluationError(ErrorReason.network, f"LLM unreachable: {exc}") from exc
        except Exception as exc:
            raise EvaluationError(ErrorReason.server_rejection, f"LLM call failed: {exc}") from exc

        verdict = parse_verdict(raw_response)
        logger.info(
            "Verdict for '%s': score=%.1f hand=%s movement=%s",
            context.sign_to_perform,
            verdict.accuracy_score,
            verdict.hand_shape_detected,
            verdict.movement_pattern_detected,
        )
        return verdict
