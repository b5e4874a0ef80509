"""Prompt text for LLM-backed sign evaluation."""

from src.core.models import (
    HandShape,
    ImprovementAspect,
    ImprovementPriority,
    MediaReference,
    MovementPattern,
    SignContext,
)


def _choices(enum_cls) -> str:
    return "|".join(member.value for member in enum_cls)


_ROLE = (
    "You are an expert sign language evaluator and instructor for children. "
    "Compare the learner's attempt against the reference material and give "
    "encouraging, specific, actionable feedback. Acknowledge what is correct "
    "before what needs work, and put incorrect hand shapes or movement "
    "patterns ahead of minor stability issues. If something cannot be seen "
    "clearly in the learner's video, say so.\n\n"
    "Judge hand shape, movement pattern, location, palm orientation, facial "
    "expression, stability and speed."
)

SYSTEM_PROMPT = (
    f"{_ROLE}\n\n"
    "Respond with a single JSON object:\n"
    "{\n"
    '  "accuracy_score": <number 0-100>,\n'
    f'  "hand_shape_detected": "<{_choices(HandShape)}>",\n'
    f'  "movement_pattern_detected": "<{_choices(MovementPattern)}>",\n'
    '  "strengths": ["<specific strength>"],\n'
    '  "improvements": [\n'
    "    {\n"
    f'      "aspect": "<{_choices(ImprovementAspect)}>",\n'
    '      "issue": "<what is wrong>",\n'
    '      "suggestion": "<how to fix it>",\n'
    f'      "priority": "<{_choices(ImprovementPriority)}>"\n'
    "    }\n"
    "  ],\n"
    '  "critical_feedback": "<the 1-2 most important things to focus on>",\n'
    '  "encouragement": "<motivating message>"\n'
    "}"
)

TEXT_SYSTEM_PROMPT = (
    f"{_ROLE}\n\n"
    "Structure your answer as plain text:\n"
    "**Strong Points:** one line per strength, each starting with ✓\n"
    "**Areas for Improvement:** one line per issue, each starting with • and "
    "the aspect name followed by a colon (e.g. '• Movement: ...'), most "
    "important first\n"
    "**Overall Accuracy: NN%**\n"
    "Finish with one encouraging sentence."
)


def build_user_prompt(reference: MediaReference, context: SignContext) -> str:
    """Build the user prompt carrying the clip URL and sign context.

    Reference video and images are both optional; whatever is available is
    included.
    """
    parts = [
        "Please evaluate this sign language attempt.",
        f"**Sign to perform:** {context.sign_to_perform}",
        f"**Instructions given to the learner:**\n{context.instructions}",
    ]
    if context.sign_description:
        parts.append(f"**Sign Description:**\n{context.sign_description}")
    if context.reference_media:
        parts.append(
            f"**Reference Sign Video (Accurate Demonstration):**\n{context.reference_media}"
        )
    if context.reference_images:
        lines = [f"Image {i}: {url}" for i, url in enumerate(context.reference_images, start=1)]
        parts.append("**Reference Images (Key Positions):**\n" + "\n".join(lines))
    parts.append(f"**User's Sign Attempt (Video URL):**\n{reference.url}")
    return "\n\n".join(parts)
