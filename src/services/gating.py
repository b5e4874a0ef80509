"""Pass/fail gating for evaluation verdicts.

Pure functions: the same verdict, hints, threshold and attempt number
always produce the same ``GateResult``.
"""

from collections.abc import Sequence

from src.core.config import PASS_THRESHOLD
from src.core.models import EvaluationVerdict, GateResult


def select_hint(hints: Sequence[str], attempt: int = 0) -> str | None:
    """Pick the hint to show after a failed attempt.

    Hints rotate with the attempt number so a learner who keeps missing
    sees each tip in turn.
    """
    if not hints:
        return None
    return hints[attempt % len(hints)]


def gate(
    verdict: EvaluationVerdict,
    hints: Sequence[str] = (),
    threshold: float = PASS_THRESHOLD,
    attempt: int = 0,
) -> GateResult:
    """Decide pass/fail for ``verdict`` and choose a hint on failure."""
    if verdict.passed(threshold):
        return GateResult(passed=True)
    return GateResult(passed=False, hint=select_hint(hints, attempt))
