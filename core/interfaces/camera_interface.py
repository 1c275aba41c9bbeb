"""
Camera Interface Module

Defines the abstract interface for camera capture operations used by
live scanning, and the error raised when no device can be acquired.
Follows ISP (Interface Segregation Principle): Only contains camera-related methods.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Tuple, Optional
import numpy as np


class CameraErrorReason(Enum):
    """Why a camera could not be acquired."""
    PERMISSION_DENIED = "permission_denied"
    NO_DEVICE = "no_device"
    UNKNOWN = "unknown"


CAMERA_ERROR_MESSAGES = {
    CameraErrorReason.PERMISSION_DENIED: (
        "Camera access was denied. Grant this process access to the video "
        "device and try again."
    ),
    CameraErrorReason.NO_DEVICE: (
        "No camera was found. Connect a camera or scan an image file instead."
    ),
    CameraErrorReason.UNKNOWN: (
        "The camera could not be started. Close other applications using it "
        "and try again."
    ),
}


class CameraError(RuntimeError):
    """
    Raised when a camera device cannot be acquired.

    Attributes:
        reason: Classified failure reason.
        detail: Low-level detail for logs.
    """

    def __init__(self, reason: CameraErrorReason, detail: str = ""):
        self.reason = reason
        self.detail = detail
        super().__init__(CAMERA_ERROR_MESSAGES[reason])

    @property
    def userMessage(self) -> str:
        return CAMERA_ERROR_MESSAGES[self.reason]


class ICameraCapture(ABC):
    """
    Abstract interface for camera capture operations.

    Implementations produce BGR frames from a local video device.

    Follows ISP: Only contains methods related to camera capture.
    """

    @abstractmethod
    def open(self, cameraIndex: int, width: int = 640, height: int = 640) -> bool:
        """
        Open a camera device by its index.

        Args:
            cameraIndex: The index of the camera to open.
            width: Desired frame width.
            height: Desired frame height.

        Returns:
            bool: True if camera opened successfully, False otherwise.
        """
        pass

    @abstractmethod
    def openPreferred(self, preferredIndex: int, width: int = 640, height: int = 640) -> int:
        """
        Open the preferred camera, falling back to any other camera.

        Args:
            preferredIndex: Index tried first.
            width: Desired frame width.
            height: Desired frame height.

        Returns:
            int: Index of the camera actually opened.

        Raises:
            CameraError: If no camera could be opened.
        """
        pass

    @abstractmethod
    def read(self) -> Tuple[bool, Optional[np.ndarray]]:
        """
        Read a frame from the opened camera.

        Returns:
            Tuple[bool, Optional[np.ndarray]]:
                - First element: True if frame read successfully, False otherwise.
                - Second element: The frame as numpy array (BGR format), or None if failed.
        """
        pass

    @abstractmethod
    def release(self) -> None:
        """
        Release the camera device and free resources.
        """
        pass

    @abstractmethod
    def isOpened(self) -> bool:
        """
        Check if a camera is currently opened.

        Returns:
            bool: True if camera is opened, False otherwise.
        """
        pass
