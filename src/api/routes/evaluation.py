"""
Sign evaluation endpoint.

Builds a ``SignContext`` from the request and delegates to the evaluator
selected by ``settings.evaluator_provider``. No business logic here.
"""

import asyncio
import logging

from fastapi import APIRouter

from src.core.config import get_settings
from src.core.exceptions import ErrorReason, EvaluationError, SignSproutError
from src.core.models import EvaluateRequest, EvaluationVerdict, MediaReference, SignContext
from src.services.evaluation import create_evaluator

logger = logging.getLogger(__name__)

router = APIRouter(tags=["evaluation"])

_DEFAULT_SIGN = "the sign shown in the reference"
_DEFAULT_INSTRUCTIONS = "Perform the sign as shown in the reference material."


def _to_context(body: EvaluateRequest) -> SignContext:
    return SignContext(
        sign_to_perform=body.sign_to_perform or _DEFAULT_SIGN,
        instructions=body.instructions or body.sign_description or _DEFAULT_INSTRUCTIONS,
        sign_description=body.sign_description,
        reference_media=body.reference_video_url,
        reference_images=body.reference_images or [],
    )


@router.post("/evaluate", response_model=EvaluationVerdict)
async def evaluate_sign(body: EvaluateRequest):
    """Evaluate the clip at ``videoUrl`` against the requested sign."""
    settings = get_settings()
    if settings.evaluator_provider == "http":
        # would call this endpoint again
        raise SignSproutError(
            detail="evaluator_provider 'http' cannot serve the evaluation endpoint",
            code="EVALUATOR_MISCONFIGURED",
        )

    evaluator = create_evaluator(settings.evaluator_provider)
    reference = MediaReference(url=body.video_url, id=body.video_url.rsplit("/", 1)[-1])
    try:
        return await asyncio.wait_for(
            evaluator.evaluate(reference, _to_context(body)),
            timeout=settings.evaluation_timeout,
        )
    except TimeoutError:
        logger.error("Evaluation of %s exceeded %.0fs", body.video_url, settings.evaluation_timeout)
        raise EvaluationError(ErrorReason.timeout, "Evaluation timed out") from None
