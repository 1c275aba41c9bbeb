"""
Live Scan Service Implementation.

Per-frame QR scanning of a camera stream with the fast engine.
Creates and manages OpenCV camera from core layer.

Follows:
- SRP: Only handles live camera scanning
- DIP: Depends on ICameraCapture and IQrDecoder abstractions
"""

import threading
import time
from typing import Optional

from core.interfaces.camera_interface import ICameraCapture, CameraError
from core.interfaces.qr_decoder_interface import IQrDecoder, InvertPolicy
from core.camera.opencv_camera import OpenCVCamera
from core.image.pixel_buffer import PixelBuffer, InvalidImageError
from core.qr import createQrDecoder
from services.interfaces.scan_service_interface import ILiveScanService
from services.interfaces.base_service_interface import BaseService


class LiveScanService(ILiveScanService, BaseService):
    """
    Live Scan Service Implementation.

    Every frame is decoded once, unfiltered and without inversion; the
    multi-strategy rescue is reserved for still images. The first decoded
    code ends the session and releases the camera.

    stop() may be called from another thread while run() is looping.
    """

    SERVICE_NAME = "live_scan"

    def __init__(
        self,
        # Camera params
        cameraIndex: int = 0,
        frameWidth: int = 640,
        frameHeight: int = 480,
        maxCameraSearch: int = 2,
        frameIntervalMs: int = 30,

        # Fast engine params
        fastBackend: str = "pyzbar",

        # Pre-built components (override the params above)
        camera: Optional[ICameraCapture] = None,
        decoder: Optional[IQrDecoder] = None,

        # Debug settings
        debugBasePath: str = "output/debug",
        debugEnabled: bool = False
    ):
        """
        Initialize LiveScanService.

        Args:
            cameraIndex: Preferred camera index.
            frameWidth: Desired frame width.
            frameHeight: Desired frame height.
            maxCameraSearch: Camera indices tried when falling back.
            frameIntervalMs: Delay between frames in run().
            fastBackend: Fast engine backend ("pyzbar" or "opencv").
            camera: Use this capture device instead of OpenCVCamera.
            decoder: Use this engine instead of creating one.
            debugBasePath: Base path for debug output.
            debugEnabled: Whether to save debug output.
        """
        BaseService.__init__(
            self,
            serviceName=self.SERVICE_NAME,
            debugBasePath=debugBasePath,
            debugEnabled=debugEnabled
        )

        self._camera: ICameraCapture = camera or OpenCVCamera(maxCameraSearch=maxCameraSearch)
        self._decoder: IQrDecoder = decoder or createQrDecoder(
            backend=fastBackend,
            invertPolicy=InvertPolicy.DONT_INVERT
        )

        self._cameraIndex = cameraIndex
        self._frameWidth = frameWidth
        self._frameHeight = frameHeight
        self._frameIntervalMs = frameIntervalMs

        self._openedIndex: Optional[int] = None
        self._stopEvent = threading.Event()
        self._lock = threading.Lock()
        self._frameCount = 0

        self._logger.info(
            f"LiveScanService initialized "
            f"(camera={cameraIndex}, frameSize={frameWidth}x{frameHeight}, "
            f"decoder={self._decoder.backendName})"
        )

    def start(self) -> int:
        """Acquire the camera. A running session is restarted."""
        with self._lock:
            if self._openedIndex is not None:
                self._releaseLocked()

            try:
                index = self._camera.openPreferred(
                    self._cameraIndex, self._frameWidth, self._frameHeight
                )
            except CameraError as e:
                self._logger.error(f"Live scan could not start: {e.userMessage}")
                raise

            self._openedIndex = index
            self._frameCount = 0
            self._stopEvent.clear()

        self._logger.info(f"Live scan started on camera {index}")
        return index

    def tick(self) -> Optional[str]:
        """
        Capture and decode one frame.

        Frames that cannot be read or decoded are skipped.
        """
        if not self.isActive():
            return None

        startTime = time.time()
        success, frame = self._camera.read()
        if not success or frame is None:
            self._logger.debug("Frame not ready, skipping")
            return None

        self._frameCount += 1

        try:
            result = self._decoder.decode(PixelBuffer.fromBgr(frame))
        except InvalidImageError as e:
            self._logger.debug(f"Unreadable frame skipped: {e}")
            return None
        except Exception as e:
            self._logger.error(f"Frame decode failed: {e}")
            return None

        if result is None:
            return None

        scanId = self._newScanId("frame")
        self._logTiming(scanId, self._measureTime(startTime))
        self._logger.info(f"[{scanId}] QR detected after {self._frameCount} frame(s): {result.text}")
        self._saveDebugImage(scanId, frame, prefix="found")
        self._saveDebugJson(scanId, {
            "frameId": scanId,
            "text": result.text,
            "polygon": result.polygon,
            "rect": result.rect,
            "backend": result.backend,
            "frameCount": self._frameCount
        }, prefix="qr")

        self.stop()
        return result.text

    def run(self, maxFrames: Optional[int] = None) -> Optional[str]:
        """
        Scan frames until a code is found, stop() is called or maxFrames
        frames were read. Starts the session if needed.
        """
        if not self.isActive():
            self.start()

        framesSeen = 0
        try:
            while self.isActive() and not self._stopEvent.is_set():
                text = self.tick()
                if text is not None:
                    return text

                framesSeen += 1
                if maxFrames is not None and framesSeen >= maxFrames:
                    self._logger.info(f"No QR code after {framesSeen} frame(s)")
                    break

                if self._stopEvent.wait(self._frameIntervalMs / 1000.0):
                    break
        finally:
            self.stop()

        return None

    def stop(self) -> None:
        """Cancel the loop and release the camera. Safe to call repeatedly."""
        self._stopEvent.set()
        with self._lock:
            if self._openedIndex is not None:
                self._releaseLocked()
                self._logger.info("Live scan stopped")

    def _releaseLocked(self) -> None:
        self._camera.release()
        self._openedIndex = None

    def isActive(self) -> bool:
        return self._openedIndex is not None

    def getOpenedCameraIndex(self) -> Optional[int]:
        return self._openedIndex

    def getFrameCount(self) -> int:
        """Frames read in the current (or last) session."""
        return self._frameCount
