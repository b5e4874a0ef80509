"""
Simulated evaluation backend for demos and offline development.

Draws pass/fail at a configured rate instead of calling a model. Seed the
random source to get repeatable verdicts in tests.
"""

import asyncio
import logging
import random

from src.core.config import get_settings
from src.core.models import (
    EvaluationVerdict,
    HandShape,
    MediaReference,
    MovementPattern,
    SignContext,
)
from src.services.evaluation.base import BaseEvaluator

logger = logging.getLogger(__name__)


class SimulatedEvaluator(BaseEvaluator):
    """Random-draw evaluator.

    Args:
        pass_rate: Probability of a passing verdict (default from settings).
        threshold: Pass threshold the generated scores are placed around.
        delay: Seconds to wait before answering, to mimic model latency.
        rng: Random source; pass ``random.Random(seed)`` for determinism.
    """

    def __init__(
        self,
        pass_rate: float | None = None,
        threshold: float | None = None,
        delay: float = 0.0,
        rng: random.Random | None = None,
    ) -> None:
        settings = get_settings()
        self._pass_rate = settings.simulated_pass_rate if pass_rate is None else pass_rate
        self._threshold = settings.pass_threshold if threshold is None else threshold
        self._delay = delay
        self._rng = rng or random.Random()

    async def evaluate(self, reference: MediaReference, context: SignContext) -> EvaluationVerdict:
        if self._delay:
            await asyncio.sleep(self._delay)

        passed = self._rng.random() < self._pass_rate
        if passed:
            score = self._rng.uniform(self._threshold, 100.0)
        else:
            score = self._rng.uniform(0.0, max(self._threshold - 1.0, 0.0))
        logger.debug("Simulated verdict for %s: passed=%s", reference.id, passed)

        if passed:
            return EvaluationVerdict(
                accuracy_score=round(score, 1),
                hand_shape_detected=HandShape.other,
                movement_pattern_detected=MovementPattern.other,
                strengths=(f'Your sign for "{context.sign_to_perform}" is accurate.',),
                critical_feedback="",
                encouragement="Excellent work!",
            )
        return EvaluationVerdict(
            accuracy_score=round(score, 1),
            hand_shape_detected=HandShape.other,
            movement_pattern_detected=MovementPattern.other,
            critical_feedback="Not quite right.",
            encouragement="Let's try again!",
        )
