"""
Submission pipeline: upload a clip, then evaluate it.

The two remote calls run strictly in sequence. Each is bounded by a
caller-side timeout, and any failure is reported as one
``SubmissionError`` naming the stage. Nothing is retried or cached here;
resubmitting is the learner's decision.
"""

import asyncio
import logging

from src.core.config import get_settings
from src.core.exceptions import (
    ErrorReason,
    EvaluationError,
    SubmissionError,
    SubmissionStage,
    UploadError,
)
from src.core.models import EvaluationVerdict, MediaReference, SignContext
from src.services.camera.buffer import Clip
from src.services.evaluation.base import BaseEvaluator
from src.services.upload.base import BaseUploader

logger = logging.getLogger(__name__)


class SubmissionPipeline:
    """Runs ``upload`` then ``evaluate`` for one recorded clip.

    Args:
        uploader: Hosting backend.
        evaluator: Evaluation backend.
        upload_timeout: Seconds before an upload is abandoned.
        evaluation_timeout: Seconds before an evaluation is abandoned.
    """

    def __init__(
        self,
        uploader: BaseUploader,
        evaluator: BaseEvaluator,
        upload_timeout: float | None = None,
        evaluation_timeout: float | None = None,
    ) -> None:
        settings = get_settings()
        self._uploader = uploader
        self._evaluator = evaluator
        self._upload_timeout = settings.upload_timeout if upload_timeout is None else upload_timeout
        self._evaluation_timeout = (
            settings.evaluation_timeout if evaluation_timeout is None else evaluation_timeout
        )

    async def upload(self, clip: Clip) -> MediaReference:
        """Store ``clip`` with the hosting backend.

        Raises:
            UploadError: Empty clip, timeout, network failure or rejection.
        """
        if clip.size == 0:
            raise UploadError(ErrorReason.invalid_input, "Clip is empty")
        try:
            return await asyncio.wait_for(
                self._uploader.upload(clip), timeout=self._upload_timeout
            )
        except TimeoutError as exc:
            raise UploadError(
                ErrorReason.timeout, f"Upload exceeded {self._upload_timeout:g}s"
            ) from exc
        except UploadError:
            raise
        except Exception as exc:
            logger.exception("Unexpected uploader failure")
            raise UploadError(ErrorReason.network, f"Upload failed: {exc}") from exc

    async def evaluate(self, reference: MediaReference, context: SignContext) -> EvaluationVerdict:
        """Obtain a verdict for an uploaded clip.

        Raises:
            EvaluationError: Timeout, network failure, rejection or malformed verdict.
        """
        try:
            return await asyncio.wait_for(
                self._evaluator.evaluate(reference, context),
                timeout=self._evaluation_timeout,
            )
        except TimeoutError as exc:
            raise EvaluationError(
                ErrorReason.timeout, f"Evaluation exceeded {self._evaluation_timeout:g}s"
            ) from exc
        except EvaluationError:
            raise
        except Exception as exc:
            logger.exception("Unexpected evaluator failure")
            raise EvaluationError(ErrorReason.network, f"Evaluation failed: {exc}") from exc

    async def submit(self, clip: Clip, context: SignContext) -> EvaluationVerdict:
        """Upload ``clip`` and, only if that succeeds, evaluate it.

        Raises:
            SubmissionError: Carrying the failing stage and reason.
        """
        try:
            reference = await self.upload(clip)
        except UploadError as exc:
            logger.warning("Submission failed at upload (%s): %s", exc.reason, exc.detail)
            raise SubmissionError(SubmissionStage.upload, exc.reason, exc.detail) from exc

        try:
            verdict = await self.evaluate(reference, context)
        except EvaluationError as exc:
            logger.warning("Submission failed at evaluation (%s): %s", exc.reason, exc.detail)
            raise SubmissionError(SubmissionStage.evaluate, exc.reason, exc.detail) from exc

        return verdict
