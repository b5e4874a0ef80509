"""
SignSprout exception hierarchy.

All application-specific exceptions inherit from SignSproutError,
enabling centralized error handling in the API middleware layer and a
single ``except`` clause in the practice session.
"""

from datetime import UTC, datetime
from enum import StrEnum


class ErrorReason(StrEnum):
    """Why a remote call failed."""

    invalid_input = "invalid_input"
    timeout = "timeout"
    network = "network"
    server_rejection = "server_rejection"
    malformed_response = "malformed_response"


class NextAction(StrEnum):
    """What the learner can do about an error."""

    grant_permission = "grant_permission"
    retry = "retry"
    resubmit = "resubmit"
    skip = "skip"


class SubmissionStage(StrEnum):
    """Pipeline stage that produced a ``SubmissionError``."""

    upload = "upload"
    evaluate = "evaluate"


class SignSproutError(Exception):
    """Base exception for all SignSprout errors."""

    user_message = "Something went wrong. Please try again."
    next_action = NextAction.retry

    def __init__(
        self,
        detail: str = "An unexpected error occurred",
        code: str = "SIGNSPROUT_ERROR",
        status_code: int = 500,
    ) -> None:
        self.detail = detail
        self.code = code
        self.status_code = status_code
        self.timestamp = datetime.now(UTC).isoformat()
        super().__init__(detail)


class CameraError(SignSproutError):
    """Base class for capture device failures."""


class CameraPermissionDeniedError(CameraError):
    """Raised when the learner (or the OS) refuses camera access."""

    user_message = (
        "Camera permission denied. Please allow camera access to continue "
        "with the practical test."
    )
    next_action = NextAction.grant_permission

    def __init__(self, detail: str = "Camera permission denied") -> None:
        super().__init__(detail=detail, code="PERMISSION_DENIED", status_code=403)


class CameraUnavailableError(CameraError):
    """Raised when no capture device exists or the hardware fails."""

    user_message = "We couldn't find a working camera. Check it is plugged in and try again."
    next_action = NextAction.retry

    def __init__(self, detail: str = "No capture device available") -> None:
        super().__init__(detail=detail, code="DEVICE_UNAVAILABLE", status_code=503)


_REASON_STATUS = {
    ErrorReason.invalid_input: 400,
    ErrorReason.timeout: 504,
    ErrorReason.network: 502,
    ErrorReason.server_rejection: 502,
    ErrorReason.malformed_response: 502,
}


class UploadError(SignSproutError):
    """Raised when a clip cannot be stored by the hosting service."""

    user_message = "Your video couldn't be uploaded. Please submit it again."
    next_action = NextAction.resubmit

    def __init__(
        self,
        reason: ErrorReason,
        detail: str = "Upload failed",
        status_code: int | None = None,
    ) -> None:
        self.reason = ErrorReason(reason)
        super().__init__(
            detail=detail,
            code=f"UPLOAD_{self.reason.upper()}",
            status_code=status_code or _REASON_STATUS[self.reason],
        )


class EvaluationError(SignSproutError):
    """Raised when the evaluation backend fails or returns an unusable verdict."""

    user_message = "We couldn't check your sign this time. Please submit it again."
    next_action = NextAction.resubmit

    def __init__(self, reason: ErrorReason, detail: str = "Evaluation failed") -> None:
        self.reason = ErrorReason(reason)
        super().__init__(
            detail=detail,
            code=f"EVALUATION_{self.reason.upper()}",
            status_code=_REASON_STATUS[self.reason],
        )


class SubmissionError(SignSproutError):
    """Single error surfaced by ``SubmissionPipeline.submit``.

    Wraps the ``UploadError`` or ``EvaluationError`` that stopped the
    pipeline so callers only need to know the stage and the reason.
    """

    next_action = NextAction.resubmit

    def __init__(self, stage: SubmissionStage, reason: ErrorReason, detail: str = "") -> None:
        self.stage = SubmissionStage(stage)
        self.reason = ErrorReason(reason)
        super().__init__(
            detail=detail or f"{self.stage} failed: {self.reason}",
            code=f"SUBMISSION_{self.stage.upper()}_{self.reason.upper()}",
            status_code=_REASON_STATUS[self.reason],
        )

    @property
    def user_message(self) -> str:  # type: ignore[override]
        if self.reason == ErrorReason.timeout:
            return "That took too long. Your video is still here, so you can submit it again."
        if self.stage == SubmissionStage.upload:
            return UploadError.user_message
        return EvaluationError.user_message


class InvalidProgressError(SignSproutError):
    """Raised when a progress update carries impossible lesson indices."""

    def __init__(self, detail: str) -> None:
        super().__init__(detail=detail, code="INVALID_PROGRESS", status_code=422)
