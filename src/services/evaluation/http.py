"""
HTTP client for a remote evaluation endpoint.

Used by practice sessions running away from the server (e.g. a desktop
webcam client). Posts the clip reference and sign context as JSON and
validates the returned verdict.
"""

import logging

import httpx

from src.core.config import get_settings
from src.core.exceptions import ErrorReason, EvaluationError
from src.core.models import EvaluationVerdict, MediaReference, SignContext
from src.services.evaluation.base import BaseEvaluator, verdict_from_payload

logger = logging.getLogger(__name__)


def _error_text(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        return str(body.get("error") or body.get("detail") or body)
    return str(body)


class HttpEvaluator(BaseEvaluator):
    """Calls ``POST /api/v1/evaluate`` (or any endpoint with the same contract)."""

    def __init__(
        self,
        url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        settings = get_settings()
        self._url = url or settings.evaluation_url
        self._timeout = settings.evaluation_timeout if timeout is None else timeout
        self._client = client or httpx.AsyncClient(timeout=self._timeout)

    async def aclose(self) -> None:
        await self._client.aclose()

    @staticmethod
    def _payload(reference: MediaReference, context: SignContext) -> dict:
        body: dict = {
            "videoUrl": reference.url,
            "signToPerform": context.sign_to_perform,
            "instructions": context.instructions,
            "signDescription": context.sign_description or context.instructions,
        }
        if context.reference_media:
            body["referenceVideoUrl"] = context.reference_media
        if context.reference_images:
            body["referenceImages"] = list(context.reference_images)
        return body

    async def evaluate(self, reference: MediaReference, context: SignContext) -> EvaluationVerdict:
        try:
            resp = await self._client.post(self._url, json=self._payload(reference, context))
            resp.raise_for_status()
        except httpx.TimeoutException as exc:
            logger.warning("Evaluation request timed out: %s", exc)
            raise EvaluationError(ErrorReason.timeout, "Evaluation request timed out") from None
        except httpx.HTTPStatusError as exc:
            detail = _error_text(exc.response)
            logger.warning("Evaluation rejected (%s): %s", exc.response.status_code, detail)
            raise EvaluationError(ErrorReason.server_rejection, detail) from None
        except httpx.HTTPError as exc:
            logger.warning("Evaluation network error: %s", exc)
            raise EvaluationError(ErrorReason.network, f"Network error: {exc}") from None

        try:
            payload = resp.json()
        except ValueError as exc:
            raise EvaluationError(
                ErrorReason.malformed_response, "Evaluation response is not JSON"
            ) from exc

        if isinstance(payload, dict) and "error" in payload:
            raise EvaluationError(ErrorReason.server_rejection, str(payload["error"]))
        return verdict_from_payload(payload)
