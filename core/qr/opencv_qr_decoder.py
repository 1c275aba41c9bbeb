"""
OpenCV QR Decoder Implementation.

Alternative fast engine built on cv2.QRCodeDetector, for installs
where the ZBar shared library is not available.

Follows the Single Responsibility Principle (SRP) from SOLID.
"""

import logging
from typing import Optional

import cv2

from core.image.pixel_buffer import PixelBuffer
from core.interfaces.qr_decoder_interface import (
    IQrDecoder,
    InvertPolicy,
    QrDetectionResult,
    boundingRect
)


class OpencvQrDecoder(IQrDecoder):
    """QR code decoder using OpenCV's built-in QRCodeDetector."""

    def __init__(
        self,
        invertPolicy: InvertPolicy = InvertPolicy.ATTEMPT_BOTH,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize OpencvQrDecoder.

        Args:
            invertPolicy: Which polarities to search.
            logger: Logger instance for debug output
        """
        self._invertPolicy = invertPolicy
        self._detector = cv2.QRCodeDetector()
        self._logger = logger or logging.getLogger(__name__)

    @property
    def backendName(self) -> str:
        return "opencv"

    @property
    def invertPolicy(self) -> InvertPolicy:
        """Get the polarity search policy."""
        return self._invertPolicy

    def decode(self, buffer: PixelBuffer) -> Optional[QrDetectionResult]:
        """
        Decode the first QR code in a buffer.

        Args:
            buffer: RGBA pixel buffer.

        Returns:
            QrDetectionResult if a QR code was found, None otherwise.
        """
        gray = buffer.toGray()

        for image, inverted in self._invertPolicy.passes(gray):
            text, points, _ = self._detector.detectAndDecode(image)
            if not text:
                continue

            polygon = []
            if points is not None:
                polygon = [(int(x), int(y)) for x, y in points.reshape(-1, 2)]

            self._logger.debug(f"QR code decoded (inverted={inverted}): {text}")
            return QrDetectionResult(
                text=text,
                polygon=polygon,
                rect=boundingRect(polygon),
                backend=self.backendName,
                inverted=inverted
            )

        self._logger.debug("No QR code detected in image")
        return None
