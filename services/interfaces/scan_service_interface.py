"""
Scan Service Interface Module.

Defines the interfaces for the two scan modes:
- Live scanning: per-frame fast decoding of camera frames
- Still image scanning: the full multi-strategy rescue on one image

Follows:
- SRP: Each interface covers one scan mode
- ISP: Minimal interfaces for each mode
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Optional, Union

import numpy as np

from core.image.pixel_buffer import PixelBuffer
from core.strategy.strategy_orchestrator import DetectionOutcome, ScanProgress


ImageSource = Union[PixelBuffer, np.ndarray, str, Path]


class ILiveScanService(ABC):
    """
    Interface for live camera scanning.

    A session owns the camera device from start() until stop() or until
    a code is found.
    """

    @abstractmethod
    def start(self) -> int:
        """
        Acquire the camera and begin a session.

        Returns:
            int: Index of the camera actually opened.

        Raises:
            CameraError: If no camera could be acquired.
        """
        pass

    @abstractmethod
    def tick(self) -> Optional[str]:
        """
        Process one frame.

        Returns:
            Optional[str]: Decoded text when a code was found (the session
                is stopped), None otherwise.
        """
        pass

    @abstractmethod
    def run(self, maxFrames: Optional[int] = None) -> Optional[str]:
        """
        Blocking per-frame loop.

        Args:
            maxFrames: Stop after this many frames (None: until found or stopped).

        Returns:
            Optional[str]: Decoded text, or None if stopped first.
        """
        pass

    @abstractmethod
    def stop(self) -> None:
        """Cancel the loop and release the camera."""
        pass

    @abstractmethod
    def isActive(self) -> bool:
        pass


class IStillImageScanService(ABC):
    """Interface for multi-strategy scanning of a still image."""

    @abstractmethod
    def scanImage(
        self,
        image: ImageSource,
        onProgress: Optional[Callable[[ScanProgress], None]] = None,
        shouldCancel: Optional[Callable[[], bool]] = None
    ) -> DetectionOutcome:
        """
        Find and decode a QR code in a still image.

        Args:
            image: PixelBuffer, BGR ndarray, or path to an image file.
            onProgress: Progress callback, called before every attempt.
            shouldCancel: Polled before every attempt.

        Returns:
            DetectionOutcome: SUCCESS with text, NOT_FOUND or CANCELLED.

        Raises:
            InvalidImageError: If the image is malformed or unreadable.
        """
        pass
