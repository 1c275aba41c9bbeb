"""
ZXing QR Code Decoder Implementation.

Robust engine: QR decoding with the zxing-cpp library.
zxing-cpp is a high-performance C++ implementation with Python bindings.

With try-harder enabled the engine searches rotated and downscaled
variants internally and re-reads the inverted image when nothing is
found. The orchestrator additionally retries it across a fixed set of
scale factors.

Follows the Single Responsibility Principle (SRP) from SOLID.
"""

import logging
from typing import Optional

import numpy as np

from core.image.pixel_buffer import PixelBuffer
from core.interfaces.qr_decoder_interface import (
    IQrDecoder,
    QrDetectionResult,
    boundingRect
)


class ZxingQrDecoder(IQrDecoder):
    """
    QR code decoder using zxing-cpp library.

    Returns the first valid QR code found in the image.
    """

    def __init__(
        self,
        tryHarder: bool = True,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize ZxingQrDecoder.

        Args:
            tryHarder: Enable exhaustive search (rotation, downscaling,
                inverted polarity). Slower but tolerant of distortion.
            logger: Logger instance for debug output
        """
        self._tryHarder = tryHarder
        self._logger = logger or logging.getLogger(__name__)
        self._zxingcpp = None

        self._logger.info(f"ZxingQrDecoder initialized (tryHarder={tryHarder})")

    @property
    def backendName(self) -> str:
        return "zxing"

    @property
    def tryHarder(self) -> bool:
        """Check whether try-harder mode is enabled."""
        return self._tryHarder

    def _ensureZxing(self) -> None:
        """Lazily import zxing-cpp module."""
        if self._zxingcpp is None:
            try:
                import zxingcpp
                self._zxingcpp = zxingcpp
                self._logger.info("zxing-cpp module loaded successfully")
            except ImportError as e:
                self._logger.error(
                    f"Failed to import zxing-cpp. "
                    f"Please install: pip install zxing-cpp. Error: {e}"
                )
                raise

    def decode(self, buffer: PixelBuffer) -> Optional[QrDetectionResult]:
        """
        Decode the first QR code in a buffer.

        Args:
            buffer: RGBA pixel buffer.

        Returns:
            QrDetectionResult if a QR code was found, None otherwise.
        """
        self._ensureZxing()

        gray = buffer.toGray()
        result = self._read(gray, inverted=False)
        if result is None and self._tryHarder:
            result = self._read(255 - gray, inverted=True)

        if result is None:
            self._logger.debug("No QR code detected")
        return result

    def _read(self, gray: np.ndarray, inverted: bool) -> Optional[QrDetectionResult]:
        """Run one zxing-cpp read over a grayscale image."""
        barcodes = self._zxingcpp.read_barcodes(
            np.ascontiguousarray(gray),
            formats=self._zxingcpp.BarcodeFormat.QRCode,
            try_rotate=self._tryHarder,
            try_downscale=self._tryHarder
        )

        # Take the first valid QR code
        for barcode in barcodes:
            if not barcode.valid:
                continue

            position = barcode.position
            polygon = [
                (position.top_left.x, position.top_left.y),
                (position.top_right.x, position.top_right.y),
                (position.bottom_right.x, position.bottom_right.y),
                (position.bottom_left.x, position.bottom_left.y)
            ]

            self._logger.debug(f"QR code decoded (inverted={inverted}): {barcode.text}")
            return QrDetectionResult(
                text=barcode.text,
                polygon=polygon,
                rect=boundingRect(polygon),
                backend=self.backendName,
                inverted=inverted
            )

        return None
