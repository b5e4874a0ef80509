"""Unit tests for the OpenCV webcam adapter (``cv2`` mocked)."""

import asyncio
from unittest.mock import MagicMock, patch

import pytest

from src.core.exceptions import CameraPermissionDeniedError, CameraUnavailableError
from src.services.camera.opencv import OpenCVCamera


class _CvError(Exception):
    pass


@pytest.fixture
def capture():
    cap = MagicMock()
    cap.isOpened.return_value = True
    cap.read.return_value = (True, "frame")
    return cap


@pytest.fixture
def mock_cv2(capture):
    with patch("src.services.camera.opencv.cv2") as cv2:
        cv2.error = _CvError
        cv2.VideoCapture.return_value = capture
        buf = MagicMock()
        buf.tobytes.return_value = b"\xff\xd8jpeg\xff\xd9"
        cv2.imencode.return_value = (True, buf)
        yield cv2


class TestOpen:
    async def test_open_sets_resolution(self, mock_cv2, capture):
        camera = OpenCVCamera(index=1, fps=30)

        await camera.open(640, 480)

        assert camera.is_open
        mock_cv2.VideoCapture.assert_called_once_with(1)
        capture.set.assert_any_call(mock_cv2.CAP_PROP_FRAME_WIDTH, 640)
        capture.set.assert_any_call(mock_cv2.CAP_PROP_FRAME_HEIGHT, 480)

    async def test_device_missing(self, mock_cv2, capture):
        capture.isOpened.return_value = False
        camera = OpenCVCamera(index=0)

        with pytest.raises(CameraUnavailableError):
            await camera.open(640, 480)

        assert not camera.is_open
        capture.release.assert_called_once()

    async def test_no_frames_is_permission_denied(self, mock_cv2, capture):
        capture.read.return_value = (False, None)
        camera = OpenCVCamera(index=0)

        with pytest.raises(CameraPermissionDeniedError):
            await camera.open(640, 480)

        assert not camera.is_open

    async def test_driver_error_is_unavailable(self, mock_cv2):
        mock_cv2.VideoCapture.side_effect = _CvError("backend failure")
        camera = OpenCVCamera(index=0)

        with pytest.raises(CameraUnavailableError, match="backend failure"):
            await camera.open(640, 480)


class TestRecording:
    async def test_emits_jpeg_chunks_until_stopped(self, mock_cv2):
        camera = OpenCVCamera(index=0, fps=200)
        chunks: list[bytes] = []
        await camera.open(640, 480)

        await camera.start_recording(chunks.append)
        await asyncio.sleep(0.05)
        await camera.stop_recording()
        count = len(chunks)
        await asyncio.sleep(0.02)

        assert count >= 1
        assert len(chunks) == count
        assert chunks[0] == b"\xff\xd8jpeg\xff\xd9"

    async def test_driver_error_surfaces_on_stop(self, mock_cv2, capture):
        camera = OpenCVCamera(index=0, fps=200)
        await camera.open(640, 480)
        capture.read.side_effect = _CvError("grab failed")

        await camera.start_recording(lambda _chunk: None)
        await asyncio.sleep(0.02)

        with pytest.raises(CameraUnavailableError, match="grab failed"):
            await camera.stop_recording()
        await camera.release()
        assert not camera.is_open
        capture.release.assert_called_once()

    async def test_start_requires_open_device(self, mock_cv2):
        camera = OpenCVCamera(index=0)

        with pytest.raises(CameraUnavailableError):
            await camera.start_recording(lambda _chunk: None)


class TestRelease:
    async def test_release_is_idempotent(self, mock_cv2, capture):
        camera = OpenCVCamera(index=0)
        await camera.open(640, 480)

        await camera.release()
        await camera.release()

        assert not camera.is_open
        capture.release.assert_called_once()

    async def test_release_stops_recording(self, mock_cv2, capture):
        camera = OpenCVCamera(index=0, fps=200)
        await camera.open(640, 480)
        await camera.start_recording(lambda _chunk: None)

        await camera.release()

        assert camera._record_task is None
