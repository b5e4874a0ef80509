"""
Legacy free-text evaluation adapter.

Older lesson builds asked the model for prose feedback and decided
pass/fail by keyword matching. This adapter keeps that path available
behind ``BaseEvaluator``: it requests the prose format and classifies it
into the same ``EvaluationVerdict`` the structured evaluator returns.
"""

import logging
import re

from src.core.exceptions import ErrorReason, EvaluationError
from src.core.models import (
    EvaluationVerdict,
    HandShape,
    Improvement,
    ImprovementAspect,
    ImprovementPriority,
    MediaReference,
    MovementPattern,
    SignContext,
)
from src.services.evaluation.base import BaseEvaluator
from src.services.evaluation.prompts import TEXT_SYSTEM_PROMPT, build_user_prompt
from src.services.llm.base import BaseLLM

logger = logging.getLogger(__name__)

_SCORE_RE = re.compile(
    r"accuracy\W{0,5}(?:score)?\W{0,5}(\d{1,3}(?:\.\d+)?)\s*(?:%|/\s*100)",
    re.IGNORECASE,
)

_HAND_SHAPE_PATTERNS = {
    HandShape.ily: re.compile(r"\bILY\b|\bI[\s-]love[\s-]you\b", re.IGNORECASE),
    HandShape.flat: re.compile(r"\bflat[\s-]hand\b", re.IGNORECASE),
    # "and" is too common to match case-insensitively
    HandShape.and_hand: re.compile(r"\bAND[\s-](?:[Hh]and|[Ss]hape)\b"),
    HandShape.clawed: re.compile(r"\bclaw(?:ed)?[\s-]hand\b", re.IGNORECASE),
    HandShape.bent: re.compile(r"\bbent[\s-]hand\b", re.IGNORECASE),
    HandShape.open: re.compile(r"\bopen[\s-]hand\b", re.IGNORECASE),
    HandShape.curved: re.compile(r"\bcurved[\s-]hand\b", re.IGNORECASE),
}

_MOVEMENT_PATTERNS = {
    MovementPattern.single_direction: re.compile(r"\bsingle[\s-]direction\b", re.IGNORECASE),
    MovementPattern.opposite: re.compile(r"\bopposite[\s-]direction\b", re.IGNORECASE),
    MovementPattern.double_arrows: re.compile(r"\bdouble[\s-]arrows?\b", re.IGNORECASE),
    MovementPattern.waves: re.compile(r"\bwav(?:e|es|ing)\b", re.IGNORECASE),
    MovementPattern.curved: re.compile(
        r"\bcurved[\s-](?:arrow|path|motion|movement)s?\b", re.IGNORECASE
    ),
    MovementPattern.circular: re.compile(r"\bcircular\b", re.IGNORECASE),
    MovementPattern.accents: re.compile(r"\baccents?\b|\bsnap\b|\bflick\b", re.IGNORECASE),
    MovementPattern.double_pointed: re.compile(r"\bdouble[\s-]pointed\b", re.IGNORECASE),
    MovementPattern.double_curved_lines: re.compile(
        r"\bdouble[\s-]curved[\s-]lines?\b|\bsqueez", re.IGNORECASE
    ),
}

# Checked in order; the first aspect whose keyword appears wins.
_ASPECT_KEYWORDS = (
    (ImprovementAspect.handshape, ("hand shape", "handshape", "finger")),
    (ImprovementAspect.facial_expression, ("facial", "expression", "non-manual")),
    (ImprovementAspect.orientation, ("orientation", "palm")),
    (ImprovementAspect.location, ("location", "position", "height")),
    (ImprovementAspect.stability, ("stability", "bouncing", "steady", "shaky")),
    (ImprovementAspect.speed, ("speed", "fast", "slow", "rhythm")),
    (ImprovementAspect.movement, ("movement", "motion", "direction")),
)

_POSITIVE_WORDS = ("correct", "accurate", "excellent", "great", "well done", "perfect")
_NEGATIVE_WORDS = ("incorrect", "wrong", "not quite", "try again", "missing", "inaccurate")

_STRENGTH_MARKERS = "✓✔"
_BULLET_MARKERS = "-*"


def _earliest(patterns: dict, text: str, default):
    """Return the key whose pattern matches earliest in ``text``."""
    best = None
    for key, pattern in patterns.items():
        match = pattern.search(text)
        if match and (best is None or match.start() < best[0]):
            best = (match.start(), key)
    return best[1] if best else default


def _keyword_score(text: str) -> float | None:
    """Estimate a score from praise vs. correction words, or None if neither occurs."""
    lowered = text.lower()
    positive = sum(lowered.count(w) for w in _POSITIVE_WORDS)
    # "incorrect"/"inaccurate" also contain positive words; cancel them out
    negative = sum(lowered.count(w) for w in _NEGATIVE_WORDS)
    positive -= lowered.count("incorrect") + lowered.count("inaccurate")
    if positive <= 0 and negative == 0:
        return None
    return float(max(0, min(100, 50 + 10 * (positive - negative))))


def _aspect_for(line: str) -> ImprovementAspect | None:
    label, _, _ = line.partition(":")
    for haystack in (label.lower(), line.lower()):
        for aspect, keywords in _ASPECT_KEYWORDS:
            if any(k in haystack for k in keywords):
                return aspect
    return None


def _to_improvement(line: str, rank: int) -> Improvement | None:
    aspect = _aspect_for(line)
    if aspect is None:
        return None
    _, sep, body = line.partition(":")
    body = (body if sep else line).strip()
    sentences = [s for s in re.split(r"(?<=[.!?])\s+", body) if s]
    if not sentences:
        return None
    if rank == 0:
        priority = ImprovementPriority.critical
    elif rank == 1:
        priority = ImprovementPriority.important
    else:
        priority = ImprovementPriority.minor
    return Improvement(
        aspect=aspect,
        issue=sentences[0],
        suggestion=" ".join(sentences[1:]) or sentences[0],
        priority=priority,
    )


def classify_feedback(text: str) -> EvaluationVerdict:
    """Map prose evaluator feedback onto an ``EvaluationVerdict``.

    Raises:
        EvaluationError: ``malformed_response`` if no score can be inferred.
    """
    if not text or not text.strip():
        raise EvaluationError(ErrorReason.malformed_response, "Empty feedback text")

    strengths: list[str] = []
    improvement_lines: list[str] = []
    closing: list[str] = []
    section = ""

    for line in text.splitlines():
        stripped = line.strip()
        if not stripped:
            continue
        if stripped.startswith("#") or stripped.endswith((":", "**")):
            heading = stripped.lower().strip("*# :")
            if heading.startswith(("strong point", "strength")):
                section = "strengths"
                continue
            if heading.startswith(("areas for improvement", "improvement")):
                section = "improvements"
                continue
        if _SCORE_RE.search(stripped):
            section = "closing"
            continue

        marker = stripped[0]
        body = stripped.lstrip("✓✔•-*· ").strip()
        if marker in _STRENGTH_MARKERS:
            strengths.append(body)
        elif marker == "•" or (marker in _BULLET_MARKERS and section == "improvements"):
            improvement_lines.append(body)
        elif marker in _BULLET_MARKERS and section == "strengths":
            strengths.append(body)
        elif section == "closing":
            closing.append(stripped)

    match = _SCORE_RE.search(text)
    if match:
        score = max(0.0, min(100.0, float(match.group(1))))
    else:
        score = _keyword_score(text)
        if score is None:
            raise EvaluationError(
                ErrorReason.malformed_response,
                "Feedback contains neither an accuracy figure nor recognisable praise/corrections",
            )
        logger.info("No accuracy figure in feedback; keyword estimate %.0f", score)

    improvements = []
    for line in improvement_lines:
        improvement = _to_improvement(line, len(improvements))
        if improvement is not None:
            improvements.append(improvement)

    return EvaluationVerdict(
        accuracy_score=score,
        hand_shape_detected=_earliest(_HAND_SHAPE_PATTERNS, text, HandShape.other),
        movement_pattern_detected=_earliest(_MOVEMENT_PATTERNS, text, MovementPattern.other),
        strengths=tuple(strengths),
        improvements=tuple(improvements),
        critical_feedback=improvement_lines[0] if improvement_lines else "",
        encouragement=" ".join(closing),
    )


class TextVerdictAdapter(BaseEvaluator):
    """Evaluates clips via prose feedback plus keyword classification."""

    def __init__(self, llm: BaseLLM) -> None:
        self._llm = llm

    async def evaluate(self, reference: MediaReference, context: SignContext) -> EvaluationVerdict:
        prompt = build_user_prompt(reference, context)
        try:
            text = await self._llm.generate(prompt, system=TEXT_SYSTEM_PROMPT)
        except TimeoutError as exc:
            raise EvaluationError(ErrorReason.timeout, f"LLM call timed out: {exc}") from exc
        except ConnectionError as exc:
            raise EvaluationError(ErrorReason.network, f"LLM unreachable: {exc}") from exc
        except Exception as exc:
            raise EvaluationError(ErrorReason.server_rejection, f"LLM call failed: {exc}") from exc

        return classify_feedback(text)
