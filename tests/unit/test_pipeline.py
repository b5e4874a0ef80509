"""Tests for SubmissionPipeline: upload strictly before evaluate, typed failures."""

import asyncio

import pytest

from src.core.exceptions import (
    ErrorReason,
    EvaluationError,
    SubmissionError,
    SubmissionStage,
    UploadError,
)
from src.core.models import SignContext
from src.services.camera.buffer import Clip
from src.services.pipeline import SubmissionPipeline


@pytest.fixture
def clip():
    return Clip(data=b"webm-bytes", mime_type="video/webm", duration_seconds=5)


@pytest.fixture
def context():
    return SignContext(sign_to_perform="HELLO", instructions="Salute outward.")


@pytest.fixture
def pipeline(mock_uploader, mock_evaluator):
    return SubmissionPipeline(
        mock_uploader, mock_evaluator, upload_timeout=0.05, evaluation_timeout=0.05
    )


class TestSubmit:
    async def test_uploads_then_evaluates(
        self, pipeline, clip, context, mock_uploader, mock_evaluator, passing_verdict
    ):
        verdict = await pipeline.submit(clip, context)

        assert verdict == passing_verdict
        mock_uploader.upload.assert_awaited_once_with(clip)
        reference = mock_uploader.upload.return_value
        mock_evaluator.evaluate.assert_awaited_once_with(reference, context)

    async def test_upload_failure_never_evaluates(
        self, pipeline, clip, context, mock_uploader, mock_evaluator
    ):
        mock_uploader.upload.side_effect = UploadError(ErrorReason.server_rejection, "quota")

        with pytest.raises(SubmissionError) as exc_info:
            await pipeline.submit(clip, context)

        assert exc_info.value.stage == SubmissionStage.upload
        assert exc_info.value.reason == ErrorReason.server_rejection
        assert exc_info.value.code == "SUBMISSION_UPLOAD_SERVER_REJECTION"
        mock_evaluator.evaluate.assert_not_awaited()

    async def test_evaluation_failure_names_stage(
        self, pipeline, clip, context, mock_evaluator
    ):
        mock_evaluator.evaluate.side_effect = EvaluationError(
            ErrorReason.malformed_response, "not json"
        )

        with pytest.raises(SubmissionError) as exc_info:
            await pipeline.submit(clip, context)

        assert exc_info.value.stage == SubmissionStage.evaluate
        assert exc_info.value.reason == ErrorReason.malformed_response

    async def test_empty_clip_is_invalid_input(self, pipeline, context, mock_uploader):
        empty = Clip(data=b"", mime_type="video/webm", duration_seconds=0)

        with pytest.raises(SubmissionError) as exc_info:
            await pipeline.submit(empty, context)

        assert exc_info.value.reason == ErrorReason.invalid_input
        assert exc_info.value.status_code == 400
        mock_uploader.upload.assert_not_awaited()


class TestTimeouts:
    async def test_upload_timeout(self, pipeline, clip, mock_uploader):
        async def hang(_clip):
            await asyncio.sleep(1)

        mock_uploader.upload.side_effect = hang

        with pytest.raises(UploadError) as exc_info:
            await pipeline.upload(clip)

        assert exc_info.value.reason == ErrorReason.timeout
        assert exc_info.value.status_code == 504

    async def test_evaluation_timeout(self, pipeline, clip, context, mock_evaluator):
        async def hang(*_args):
            await asyncio.sleep(1)

        mock_evaluator.evaluate.side_effect = hang

        with pytest.raises(SubmissionError) as exc_info:
            await pipeline.submit(clip, context)

        assert exc_info.value.stage == SubmissionStage.evaluate
        assert exc_info.value.reason == ErrorReason.timeout
        assert "too long" in exc_info.value.user_message

    async def test_zero_timeout_is_not_replaced_by_default(
        self, clip, mock_uploader, mock_evaluator
    ):
        async def slow(_clip):
            await asyncio.sleep(0.5)

        mock_uploader.upload.side_effect = slow
        pipeline = SubmissionPipeline(mock_uploader, mock_evaluator, upload_timeout=0)

        with pytest.raises(UploadError) as exc_info:
            await asyncio.wait_for(pipeline.upload(clip), timeout=0.25)

        assert exc_info.value.reason == ErrorReason.timeout


class TestUnexpectedErrors:
    async def test_uploader_bug_becomes_network_error(self, pipeline, clip, mock_uploader):
        mock_uploader.upload.side_effect = OSError("socket closed")

        with pytest.raises(UploadError) as exc_info:
            await pipeline.upload(clip)

        assert exc_info.value.reason == ErrorReason.network

    async def test_evaluator_bug_becomes_network_error(
        self, pipeline, context, mock_uploader, mock_evaluator
    ):
        mock_evaluator.evaluate.side_effect = RuntimeError("boom")

        with pytest.raises(EvaluationError) as exc_info:
            await pipeline.evaluate(mock_uploader.upload.return_value, context)

        assert exc_info.value.reason == ErrorReason.network
