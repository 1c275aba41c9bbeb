"""Tests for configuration, the scan services, the controller and camera acquisition."""

import json
import sys

import cv2
import numpy as np
import pytest

from core.camera.opencv_camera import OpenCVCamera
from core.image.pixel_buffer import InvalidImageError
from core.interfaces.camera_interface import (
    ICameraCapture,
    CameraError,
    CameraErrorReason,
    CAMERA_ERROR_MESSAGES
)
from core.strategy import ScanStatus
from services.impl.config_service import ConfigService
from services.impl.live_scan_service import LiveScanService
from services.impl.still_image_scan_service import StillImageScanService
from services.scan_controller import ScanController, NOT_FOUND_GUIDANCE


def _isWhite(buffer) -> bool:
    return int(buffer.samples[0, 0, 0]) == 255


def _frame(value: int) -> np.ndarray:
    return np.full((24, 32, 3), value, dtype=np.uint8)


class FakeCamera(ICameraCapture):
    """Capture double serving scripted frames."""

    def __init__(self, frames=None, failure=None, loopFrame=None):
        self._frames = list(frames or [])
        self._failure = failure
        self._loopFrame = loopFrame
        self.opened = False
        self.openCalls = 0
        self.releaseCalls = 0

    def open(self, cameraIndex, width=640, height=640):
        self.opened = self._failure is None
        return self.opened

    def openPreferred(self, preferredIndex, width=640, height=640):
        self.openCalls += 1
        if self._failure is not None:
            raise CameraError(self._failure, "fake failure")
        self.opened = True
        return preferredIndex

    def read(self):
        if self._frames:
            frame = self._frames.pop(0)
            return (frame is not None, frame)
        if self._loopFrame is not None:
            return (True, self._loopFrame)
        return (False, None)

    def release(self):
        self.releaseCalls += 1
        self.opened = False

    def isOpened(self):
        return self.opened


@pytest.fixture
def configFile(tmp_path):
    """Factory writing a config file with the robust engine disabled."""
    def write(restartAfterNotFound=True, debugEnabled=False):
        config = {
            "fast_decoder": {"backend": "opencv", "invertPolicy": "attemptBoth"},
            "robust_decoder": {"enabled": False, "tryHarder": True, "scales": [1.0, 0.5]},
            "orchestrator": {"includeSupplementary": True, "logProgress": False},
            "live_scan": {
                "cameraIndex": 1,
                "frameWidth": 320,
                "frameHeight": 240,
                "maxCameraSearch": 3,
                "frameIntervalMs": 0,
                "restartAfterNotFound": restartAfterNotFound
            },
            "debug": {"enabled": debugEnabled, "basePath": str(tmp_path / "debug")}
        }
        path = tmp_path / "application_config.json"
        path.write_text(json.dumps(config), encoding="utf-8")
        return str(path)
    return write


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# ConfigService
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def test_config_dot_notation_and_getters(configFile):
    config = ConfigService(configFile())

    assert config.get("live_scan.cameraIndex") == 1
    assert config.get("live_scan.missing", "fallback") == "fallback"
    assert config.get("fast_decoder.backend.nested", 7) == 7
    assert config.getFastDecoderBackend() == "opencv"
    assert config.isRobustDecoderEnabled() is False
    assert config.getRobustScales() == [1.0, 0.5]
    assert config.isSupplementaryStrategiesEnabled() is True
    assert config.getFrameIntervalMs() == 0
    assert config.getSectionConfig("orchestrator") == {"includeSupplementary": True, "logProgress": False}
    assert config.getSectionConfig("absent") == {}


def test_config_defaults_for_missing_sections(tmp_path):
    path = tmp_path / "empty.json"
    path.write_text("{}", encoding="utf-8")
    config = ConfigService(str(path))

    assert config.getFastDecoderBackend() == "pyzbar"
    assert config.getFastDecoderInvertPolicy() == "attemptBoth"
    assert config.getRobustScales() == [1.0, 0.75, 0.5, 1.5, 2.0]
    assert config.getCameraIndex() == 0
    assert config.getMaxCameraSearch() == 2
    assert config.isRestartAfterNotFound() is True
    assert config.isDebugEnabled() is False
    assert config.getDebugBasePath() == "output/debug"


@pytest.mark.parametrize("content", [None, "{not json", "[1, 2]"])
def test_config_load_failures_raise(tmp_path, content):
    path = tmp_path / "broken.json"
    if content is not None:
        path.write_text(content, encoding="utf-8")
    with pytest.raises(RuntimeError):
        ConfigService(str(path))


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# StillImageScanService
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def test_still_scan_accepts_every_image_source(tmp_path, makeGrayBuffer, scriptedDecoder):
    service = StillImageScanService(fastDecoder=scriptedDecoder(_isWhite), robustEnabled=False)
    imagePath = tmp_path / "white.png"
    cv2.imwrite(str(imagePath), _frame(255))

    for source in (makeGrayBuffer(np.full((8, 8), 255)), _frame(255), imagePath, str(imagePath)):
        outcome = service.scanImage(source)
        assert outcome.status is ScanStatus.SUCCESS
        assert outcome.strategyName == "Original"


def test_still_scan_rejects_unsupported_input(scriptedDecoder):
    service = StillImageScanService(fastDecoder=scriptedDecoder(_isWhite), robustEnabled=False)
    with pytest.raises(InvalidImageError):
        service.scanImage(42)
    with pytest.raises(InvalidImageError):
        service.scanImage("does/not/exist.png")


def test_still_scan_supplementary_strategies_extend_the_list(neverDecoder):
    service = StillImageScanService(
        fastDecoder=neverDecoder,
        robustEnabled=False,
        includeSupplementary=True
    )
    outcome = service.scanImage(_frame(100))

    assert outcome.status is ScanStatus.NOT_FOUND
    assert len(outcome.attempts) == 16
    assert service.orchestrator.prepassEnabled is False


def test_still_scan_writes_debug_output(tmp_path, neverDecoder, scriptedDecoder):
    robust = scriptedDecoder(lambda buffer: False, name="robust")
    service = StillImageScanService(
        fastDecoder=neverDecoder,
        robustDecoder=robust,
        robustScales=(1.0,),
        debugBasePath=str(tmp_path),
        debugEnabled=True
    )
    service.scanImage(_frame(90))

    serviceDir = tmp_path / "still_scan"
    outcomes = list(serviceDir.glob("outcome_*.json"))
    assert len(outcomes) == 1

    data = json.loads(outcomes[0].read_text(encoding="utf-8"))
    assert data["status"] == "not_found"
    assert data["attemptCount"] == 14
    assert data["attempts"][0]["phase"] == "robust_prepass"

    inputs = list((serviceDir / "inputs").glob("*.png"))
    assert len(inputs) == 14


def test_still_scan_cancellation(neverDecoder):
    service = StillImageScanService(fastDecoder=neverDecoder, robustEnabled=False)
    outcome = service.scanImage(_frame(10), shouldCancel=lambda: True)
    assert outcome.status is ScanStatus.CANCELLED
    assert neverDecoder.calls == []


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# LiveScanService
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def _liveService(camera, decoder):
    return LiveScanService(cameraIndex=0, frameIntervalMs=0, camera=camera, decoder=decoder)


def test_live_scan_skips_bad_frames_and_stops_on_first_code(scriptedDecoder):
    camera = FakeCamera(frames=[None, _frame(0), _frame(255)])
    decoder = scriptedDecoder(_isWhite, text="LIVE")
    service = _liveService(camera, decoder)

    assert service.run() == "LIVE"
    assert service.getFrameCount() == 2
    assert len(decoder.calls) == 2
    assert service.isActive() is False
    assert camera.opened is False
    assert camera.releaseCalls == 1


def test_live_scan_tick_decodes_one_frame(scriptedDecoder):
    camera = FakeCamera(frames=[_frame(0), _frame(255)])
    service = _liveService(camera, scriptedDecoder(_isWhite))

    assert service.tick() is None
    assert service.start() == 0
    assert service.tick() is None
    assert service.isActive()
    assert service.tick() == "HELLO"
    assert service.isActive() is False


def test_live_scan_gives_up_after_max_frames(neverDecoder):
    camera = FakeCamera(loopFrame=_frame(128))
    service = _liveService(camera, neverDecoder)

    assert service.run(maxFrames=4) is None
    assert len(neverDecoder.calls) == 4
    assert service.isActive() is False
    assert camera.opened is False


def test_live_scan_survives_decoder_failures(raisingDecoder):
    camera = FakeCamera(loopFrame=_frame(128))
    service = _liveService(camera, raisingDecoder)

    assert service.run(maxFrames=3) is None
    assert raisingDecoder.calls == 3


def test_live_scan_restart_releases_previous_session(neverDecoder):
    camera = FakeCamera(loopFrame=_frame(128))
    service = _liveService(camera, neverDecoder)

    service.start()
    service.start()
    assert camera.openCalls == 2
    assert camera.releaseCalls == 1

    service.stop()
    service.stop()
    assert camera.releaseCalls == 2


def test_live_scan_camera_error_propagates(neverDecoder):
    service = _liveService(FakeCamera(failure=CameraErrorReason.PERMISSION_DENIED), neverDecoder)

    with pytest.raises(CameraError) as excInfo:
        service.start()
    assert excInfo.value.reason is CameraErrorReason.PERMISSION_DENIED
    assert service.isActive() is False


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# ScanController
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def test_controller_image_scan_stops_live_session(configFile, scriptedDecoder, neverDecoder):
    camera = FakeCamera(loopFrame=_frame(0))
    controller = ScanController(
        configFile(),
        camera=camera,
        fastDecoder=scriptedDecoder(_isWhite, text="https://example.com/menu"),
        liveDecoder=neverDecoder
    )

    assert controller.startLiveScan() == 1
    assert controller.isLiveScanActive()

    report = controller.scanImage(_frame(255))

    assert report.found
    assert report.message == "https://example.com/menu"
    assert report.liveRestarted is False
    assert controller.isLiveScanActive() is False
    assert report.toDict()["strategyName"] == "Original"


def test_controller_not_found_resumes_live_scan(configFile, neverDecoder, scriptedDecoder):
    camera = FakeCamera(loopFrame=_frame(0))
    controller = ScanController(
        configFile(restartAfterNotFound=True),
        camera=camera,
        fastDecoder=neverDecoder,
        liveDecoder=scriptedDecoder(_isWhite)
    )

    report = controller.scanImage(_frame(100))

    assert report.outcome.status is ScanStatus.NOT_FOUND
    assert report.message == NOT_FOUND_GUIDANCE
    assert "https://zxing.org/w/decode.jspx" in report.message
    assert report.liveRestarted is True
    assert controller.isLiveScanActive()
    # Default strategies plus the supplementary ones enabled in the config
    assert len(report.outcome.attempts) == 16

    controller.shutdown()
    assert controller.isLiveScanActive() is False


def test_controller_not_found_without_restart(configFile, neverDecoder):
    controller = ScanController(
        configFile(restartAfterNotFound=False),
        camera=FakeCamera(),
        fastDecoder=neverDecoder,
        liveDecoder=neverDecoder
    )

    report = controller.scanImage(_frame(100))

    assert report.liveRestarted is False
    assert controller.isLiveScanActive() is False
    assert report.toDict()["status"] == "not_found"


def test_controller_restart_failure_is_reported_not_raised(configFile, neverDecoder):
    controller = ScanController(
        configFile(),
        camera=FakeCamera(failure=CameraErrorReason.NO_DEVICE),
        fastDecoder=neverDecoder,
        liveDecoder=neverDecoder
    )

    report = controller.scanImage(_frame(100))

    assert report.message == NOT_FOUND_GUIDANCE
    assert report.liveRestarted is False


def test_controller_debug_toggle(configFile, neverDecoder):
    controller = ScanController(
        configFile(),
        camera=FakeCamera(),
        fastDecoder=neverDecoder,
        liveDecoder=neverDecoder
    )

    controller.setDebugEnabled(True)
    assert controller.isDebugEnabled()
    assert controller.liveScanService.isDebugEnabled()
    assert controller.stillImageScanService.isDebugEnabled()


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# OpenCVCamera acquisition
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def _fakeVideoCapture(openable=(), error=None):
    class FakeVideoCapture:
        def __init__(self, index):
            if error is not None:
                raise RuntimeError(error)
            self._index = index
            self._opened = index in openable

        def isOpened(self):
            return self._opened

        def set(self, prop, value):
            return True

        def read(self):
            return (self._opened, _frame(0) if self._opened else None)

        def release(self):
            self._opened = False

    return FakeVideoCapture


def test_camera_falls_back_to_next_index(monkeypatch):
    monkeypatch.setattr(cv2, "VideoCapture", _fakeVideoCapture(openable={1}))
    camera = OpenCVCamera(maxCameraSearch=3)

    assert camera.openPreferred(0) == 1
    assert camera.isOpened()

    camera.release()
    assert camera.isOpened() is False


def test_camera_preferred_index_wins(monkeypatch):
    monkeypatch.setattr(cv2, "VideoCapture", _fakeVideoCapture(openable={0, 2}))
    assert OpenCVCamera(maxCameraSearch=3).openPreferred(2) == 2


def test_camera_without_devices_is_no_device(monkeypatch):
    monkeypatch.setattr(cv2, "VideoCapture", _fakeVideoCapture())
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.setattr("core.camera.opencv_camera.os.path.exists", lambda path: False)

    with pytest.raises(CameraError) as excInfo:
        OpenCVCamera(maxCameraSearch=2).openPreferred(0)
    assert excInfo.value.reason is CameraErrorReason.NO_DEVICE
    assert str(excInfo.value) == CAMERA_ERROR_MESSAGES[CameraErrorReason.NO_DEVICE]


def test_camera_inaccessible_devices_are_permission_denied(monkeypatch):
    monkeypatch.setattr(cv2, "VideoCapture", _fakeVideoCapture())
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.setattr("core.camera.opencv_camera.os.path.exists", lambda path: True)
    monkeypatch.setattr("core.camera.opencv_camera.os.access", lambda path, mode: False)

    with pytest.raises(CameraError) as excInfo:
        OpenCVCamera(maxCameraSearch=2).openPreferred(0)
    assert excInfo.value.reason is CameraErrorReason.PERMISSION_DENIED


def test_camera_permission_error_text_is_classified(monkeypatch):
    monkeypatch.setattr(cv2, "VideoCapture", _fakeVideoCapture(error="Permission denied by OS"))

    with pytest.raises(CameraError) as excInfo:
        OpenCVCamera(maxCameraSearch=1).openPreferred(0)
    assert excInfo.value.reason is CameraErrorReason.PERMISSION_DENIED
    assert "Permission denied" in excInfo.value.detail


def test_camera_error_messages_differ_per_reason():
    messages = {CameraError(reason).userMessage for reason in CameraErrorReason}
    assert len(messages) == len(CameraErrorReason)
