"""
Pydantic v2 models shared by the practice session, the submission
pipeline and the API layer.

v0.1.0: Verdict, SignContext, MediaReference, Session, Progress, Error
"""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from src.core.exceptions import NextAction

# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    """GET /health response."""

    status: str = "ok"
    version: str = "0.1.0"
    timestamp: datetime


# ---------------------------------------------------------------------------
# Sign taxonomies
# ---------------------------------------------------------------------------


class _LenientEnum(StrEnum):
    """StrEnum that also accepts case-insensitive spellings of its values."""

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            needle = value.strip().lower()
            for member in cls:
                if member.value.lower() == needle:
                    return member
        return None


class HandShape(_LenientEnum):
    """Canonical hand configurations."""

    ily = "ILY"
    flat = "Flat"
    and_hand = "AND"
    clawed = "Clawed"
    bent = "Bent"
    open = "Open"
    curved = "Curved"
    other = "Other"


class MovementPattern(_LenientEnum):
    """Canonical motion types a sign's hands move through."""

    single_direction = "Single Direction"
    opposite = "Opposite"
    double_arrows = "Double Arrows"
    waves = "Waves"
    curved = "Curved"
    circular = "Circular"
    accents = "Accents"
    double_pointed = "Double Pointed"
    double_curved_lines = "Double Curved Lines"
    other = "Other"


class ImprovementAspect(_LenientEnum):
    handshape = "handshape"
    movement = "movement"
    location = "location"
    orientation = "orientation"
    facial_expression = "facial_expression"
    stability = "stability"
    speed = "speed"


class ImprovementPriority(_LenientEnum):
    critical = "critical"
    important = "important"
    minor = "minor"


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------


class Improvement(BaseModel):
    """One actionable correction inside a verdict."""

    model_config = ConfigDict(frozen=True)

    aspect: ImprovementAspect
    issue: str
    suggestion: str
    priority: ImprovementPriority


class EvaluationVerdict(BaseModel):
    """Immutable result of one evaluation call.

    Field names match the evaluation endpoint's JSON contract.
    """

    model_config = ConfigDict(frozen=True)

    accuracy_score: float = Field(ge=0, le=100)
    hand_shape_detected: HandShape
    movement_pattern_detected: MovementPattern
    strengths: tuple[str, ...] = ()
    improvements: tuple[Improvement, ...] = ()
    critical_feedback: str = ""
    encouragement: str = ""

    def passed(self, threshold: float) -> bool:
        """Return True when the score meets ``threshold``."""
        return self.accuracy_score >= threshold


class MediaReference(BaseModel):
    """Durable location of an uploaded clip."""

    url: str
    id: str


class SignContext(BaseModel):
    """Pedagogical context sent alongside a clip for evaluation."""

    sign_to_perform: str
    instructions: str
    sign_description: str | None = None
    reference_media: str | None = None
    reference_images: list[str] = Field(default_factory=list)

    @field_validator("sign_to_perform", "instructions")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must be a non-empty string")
        return value


class PracticalTestItem(BaseModel):
    """A lesson item asking the learner to perform a sign on camera."""

    id: int
    sign_to_perform: str
    instructions: str
    hints: list[str] = Field(default_factory=list)
    reference_media: str | None = None
    reference_images: list[str] = Field(default_factory=list)
    sign_description: str | None = None

    def to_sign_context(self) -> SignContext:
        return SignContext(
            sign_to_perform=self.sign_to_perform,
            instructions=self.instructions,
            sign_description=self.sign_description,
            reference_media=self.reference_media,
            reference_images=list(self.reference_images),
        )


class GateResult(BaseModel):
    """Pass/fail decision derived from a verdict."""

    model_config = ConfigDict(frozen=True)

    passed: bool
    hint: str | None = None


class EvaluateRequest(BaseModel):
    """POST /evaluate request body (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    video_url: str = Field(min_length=1)
    sign_description: str | None = None
    reference_video_url: str | None = None
    reference_images: list[str] | None = None
    sign_to_perform: str | None = None
    instructions: str | None = None


# ---------------------------------------------------------------------------
# Practice session
# ---------------------------------------------------------------------------


class SessionState(StrEnum):
    """States of a practical-test attempt."""

    idle = "idle"
    requesting_permission = "requesting_permission"
    ready = "ready"
    countdown = "countdown"
    recording = "recording"
    recorded = "recorded"
    evaluating = "evaluating"
    result = "result"
    closed = "closed"


class SessionErrorInfo(BaseModel):
    """User-facing error attached to a session."""

    code: str
    message: str
    next_action: NextAction


class SessionEvent(BaseModel):
    """Notification sent to the optional announcer port on each transition."""

    state: SessionState
    countdown_remaining: int = 0
    elapsed_seconds: int = 0
    error: SessionErrorInfo | None = None


# ---------------------------------------------------------------------------
# Progress
# ---------------------------------------------------------------------------


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TestScore(_CamelModel):
    """Score recorded for a single test item."""

    __test__ = False  # not a pytest class

    lesson_id: int
    score: float
    passed: bool


class CategoryProgress(_CamelModel):
    """Per-category lesson position and test record."""

    last_completed_index: int = -1
    test_scores: list[TestScore] = Field(default_factory=list)
    completion_percentage: int = 0
    last_accessed_date: datetime


class ProgressUpdateRequest(_CamelModel):
    """POST /progress/{category} request body."""

    lesson_index: int
    total_lessons: int
    test_score: TestScore | None = None


# ---------------------------------------------------------------------------
# Error
# ---------------------------------------------------------------------------


class ErrorResponse(BaseModel):
    """Standard error envelope returned by the API."""

    error: str
    detail: str
    code: str
    timestamp: str
