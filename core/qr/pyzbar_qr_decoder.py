"""
Pyzbar QR Decoder Implementation.

Fast engine: single-pass QR decode with the pyzbar (ZBar) library,
with a configurable polarity search.

Follows the Single Responsibility Principle (SRP) and
Dependency Inversion Principle (DIP) from SOLID.
"""

import logging
from typing import Optional, List

from pyzbar.pyzbar import decode, ZBarSymbol, Decoded

from core.image.pixel_buffer import PixelBuffer
from core.interfaces.qr_decoder_interface import (
    IQrDecoder,
    InvertPolicy,
    QrDetectionResult
)


class PyzbarQrDecoder(IQrDecoder):
    """
    QR code decoder using the pyzbar library.

    Live scanning uses InvertPolicy.DONT_INVERT for speed; still images
    use InvertPolicy.ATTEMPT_BOTH.
    """

    def __init__(
        self,
        invertPolicy: InvertPolicy = InvertPolicy.ATTEMPT_BOTH,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize PyzbarQrDecoder.

        Args:
            invertPolicy: Which polarities to search.
            logger: Logger instance for debug output
        """
        self._invertPolicy = invertPolicy
        self._symbolTypes = [ZBarSymbol.QRCODE]
        self._logger = logger or logging.getLogger(__name__)

    @property
    def backendName(self) -> str:
        return "pyzbar"

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
            results: List[Decoded] = decode(image, symbols=self._symbolTypes)
            if not results:
                continue

            # Take the first QR code found
            qr = results[0]
            text = qr.data.decode('utf-8', errors='replace')
            polygon = [(p.x, p.y) for p in qr.polygon]

            self._logger.debug(f"QR code decoded (inverted={inverted}): {text}")
            return QrDetectionResult(
                text=text,
                polygon=polygon,
                rect=(qr.rect.left, qr.rect.top, qr.rect.width, qr.rect.height),
                backend=self.backendName,
                inverted=inverted
            )

        self._logger.debug("No QR code detected in image")
        return None
