"""
OpenCV Camera Implementation

Implements ICameraCapture using OpenCV's VideoCapture.
Follows SRP: Only handles camera capture operations.
"""

import logging
import os
import sys
from typing import List, Tuple, Optional
import numpy as np
import cv2

from core.interfaces.camera_interface import (
    ICameraCapture,
    CameraError,
    CameraErrorReason
)


logger = logging.getLogger(__name__)


class OpenCVCamera(ICameraCapture):
    """
    Camera capture implementation using OpenCV VideoCapture.

    Supports USB cameras, built-in cameras, and other devices
    accessible through OpenCV's VideoCapture interface.
    """

    def __init__(self, maxCameraSearch: int = 10):
        """
        Initialize OpenCVCamera.

        Args:
            maxCameraSearch: Number of camera indices tried when falling
                back from the preferred one.
        """
        self._capture: Optional[cv2.VideoCapture] = None
        self._cameraIndex: int = -1
        self._maxCameraSearch = maxCameraSearch
        self._lastError: Optional[str] = None

    def open(self, cameraIndex: int, width: int = 640, height: int = 640) -> bool:
        """
        Open a camera device by its index.

        Args:
            cameraIndex: The index of the camera to open.
            width: Desired frame width.
            height: Desired frame height.

        Returns:
            bool: True if camera opened successfully.
        """
        if self._capture is not None:
            self.release()

        try:
            self._capture = cv2.VideoCapture(cameraIndex)

            if self._capture.isOpened():
                self._cameraIndex = cameraIndex
                self._lastError = None

                self._capture.set(cv2.CAP_PROP_FRAME_WIDTH, width)
                self._capture.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
                self._capture.set(cv2.CAP_PROP_BUFFERSIZE, 1)

                logger.info(f"Camera {cameraIndex} opened successfully ({width}x{height})")
                return True
            else:
                logger.warning(f"Failed to open camera {cameraIndex}")
                self._capture = None
                return False

        except Exception as e:
            logger.error(f"Error opening camera {cameraIndex}: {e}")
            self._lastError = str(e)
            self._capture = None
            return False

    def openPreferred(self, preferredIndex: int, width: int = 640, height: int = 640) -> int:
        """
        Open the preferred camera, then any other index up to maxCameraSearch.

        Raises:
            CameraError: Classified as PERMISSION_DENIED, NO_DEVICE or UNKNOWN.
        """
        candidates = [preferredIndex] + [
            index for index in range(self._maxCameraSearch) if index != preferredIndex
        ]

        for index in candidates:
            if self.open(index, width, height):
                if index != preferredIndex:
                    logger.info(f"Preferred camera {preferredIndex} unavailable, using camera {index}")
                return index

        reason = self._classifyFailure(candidates)
        detail = self._lastError or f"no camera opened among indices {candidates}"
        logger.error(f"Camera acquisition failed ({reason.value}): {detail}")
        raise CameraError(reason, detail)

    def _classifyFailure(self, candidates: List[int]) -> CameraErrorReason:
        """Best-effort reason for a failed acquisition."""
        if self._lastError and "permission" in self._lastError.lower():
            return CameraErrorReason.PERMISSION_DENIED

        if sys.platform.startswith("linux"):
            devices = [f"/dev/video{index}" for index in candidates]
            present = [device for device in devices if os.path.exists(device)]
            if not present:
                return CameraErrorReason.NO_DEVICE
            if not any(os.access(device, os.R_OK | os.W_OK) for device in present):
                return CameraErrorReason.PERMISSION_DENIED
            return CameraErrorReason.UNKNOWN

        if self._lastError:
            return CameraErrorReason.UNKNOWN
        return CameraErrorReason.NO_DEVICE

    def read(self) -> Tuple[bool, Optional[np.ndarray]]:
        """
        Read a frame from the opened camera.

        Returns:
            Tuple[bool, Optional[np.ndarray]]: Success flag and frame.
        """
        if self._capture is None or not self._capture.isOpened():
            return (False, None)

        try:
            ret, frame = self._capture.read()
            return (ret, frame if ret else None)
        except Exception as e:
            logger.error(f"Error reading frame: {e}")
            return (False, None)

    def release(self) -> None:
        """
        Release the camera device and free resources.
        """
        if self._capture is not None:
            try:
                self._capture.release()
                logger.info(f"Camera {self._cameraIndex} released")
            except Exception as e:
                logger.error(f"Error releasing camera: {e}")
            finally:
                self._capture = None
                self._cameraIndex = -1

    def isOpened(self) -> bool:
        return self._capture is not None and self._capture.isOpened()
