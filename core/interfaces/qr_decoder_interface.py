"""
QR Decoder Interface Module.

This module defines the interface and data classes for QR code decoding
engines. Engines are black boxes: they receive a PixelBuffer and return
the first decoded payload, or None when no code is found.

Follows the Interface Segregation Principle (ISP) from SOLID.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

import numpy as np

from core.image.pixel_buffer import PixelBuffer


class InvertPolicy(Enum):
    """
    Polarity search of the fast engine.

    - DONT_INVERT: dark modules on light background only (live scanning)
    - ONLY_INVERT: light modules on dark background only
    - ATTEMPT_BOTH: normal first, then inverted (still images)
    - INVERT_FIRST: inverted first, then normal
    """
    DONT_INVERT = "dontInvert"
    ONLY_INVERT = "onlyInvert"
    ATTEMPT_BOTH = "attemptBoth"
    INVERT_FIRST = "invertFirst"

    def passes(self, gray: np.ndarray) -> List[Tuple[np.ndarray, bool]]:
        """
        Images to try, in order, for a grayscale input.

        Args:
            gray: Single-channel uint8 image.

        Returns:
            One or two (image, inverted) pairs.
        """
        if self is InvertPolicy.DONT_INVERT:
            return [(gray, False)]
        inverted = 255 - gray
        if self is InvertPolicy.ONLY_INVERT:
            return [(inverted, True)]
        if self is InvertPolicy.INVERT_FIRST:
            return [(inverted, True), (gray, False)]
        return [(gray, False), (inverted, True)]


@dataclass
class QrDetectionResult:
    """
    Result of a successful decode.

    Attributes:
        text: Decoded QR payload.
        polygon: Corners of the symbol [(x, y), ...] in buffer coordinates.
        rect: Bounding rectangle (left, top, width, height).
        backend: Name of the engine that produced the result.
        inverted: Whether the symbol was found on the inverted image.
    """
    text: str
    polygon: List[Tuple[int, int]] = field(default_factory=list)
    rect: Tuple[int, int, int, int] = (0, 0, 0, 0)
    backend: str = ""
    inverted: bool = False


class IQrDecoder(ABC):
    """
    Interface for QR decoding engines.

    Implementations return the first QR code found. "No code" is a normal
    outcome (None). Library failures propagate as exceptions and are
    handled per attempt by the caller.
    """

    @property
    @abstractmethod
    def backendName(self) -> str:
        """Short engine name for logs and results."""
        pass

    @abstractmethod
    def decode(self, buffer: PixelBuffer) -> Optional[QrDetectionResult]:
        """
        Decode a QR code from a pixel buffer.

        Args:
            buffer: RGBA pixel buffer.

        Returns:
            QrDetectionResult if a QR code was decoded, None otherwise.
        """
        pass


def boundingRect(polygon: List[Tuple[int, int]]) -> Tuple[int, int, int, int]:
    """Bounding rectangle (left, top, width, height) of a polygon."""
    if not polygon:
        return (0, 0, 0, 0)
    xs = [p[0] for p in polygon]
    ys = [p[1] for p in polygon]
    return (min(xs), min(ys), max(xs) - min(xs), max(ys) - min(ys))
