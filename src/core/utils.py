"""Shared utility functions for SignSprout."""

import math
import re

_JSON_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences wrapping JSON from LLM responses."""
    text = text.strip()
    if text.startswith("```"):
        text = re.sub(r"^```\w*\n?", "", text)
        text = re.sub(r"\n?```$", "", text)
    return text.strip()


def extract_json_object(text: str) -> str:
    """Return the outermost ``{...}`` span of an LLM reply.

    Models sometimes wrap the JSON in a sentence of prose; the span from the
    first ``{`` to the last ``}`` is kept. Text without braces is returned
    fence-stripped so the caller's ``json.loads`` reports the real error.
    """
    text = strip_code_fences(text)
    match = _JSON_OBJECT_RE.search(text)
    return match.group(0) if match else text


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))
