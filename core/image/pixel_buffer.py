"""
Pixel Buffer Module.

Defines the RGBA raster passed between every stage of the scan pipeline
(resampler → filter kernels → decoder) and the still-image loader that
turns an image file into one.

Layout: numpy uint8 array of shape (height, width, 4), channels R, G, B, A.
Grayscale images are stored with R == G == B, not as a separate format.

Follows SRP: Only handles raster storage, validation and conversion.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Union

import cv2
import numpy as np


logger = logging.getLogger(__name__)

CHANNELS = 4
OPAQUE = 255


class InvalidImageError(ValueError):
    """Raised for malformed, zero-area or unreadable input images."""


@dataclass
class PixelBuffer:
    """
    In-memory RGBA raster with known width and height.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        samples: uint8 array of shape (height, width, 4), RGBA order.
    """
    width: int
    height: int
    samples: np.ndarray

    def validate(self) -> "PixelBuffer":
        """
        Check buffer invariants.

        Returns:
            The buffer itself, for chaining.

        Raises:
            InvalidImageError: If dimensions or sample layout are invalid.
        """
        if self.width <= 0 or self.height <= 0:
            raise InvalidImageError(
                f"Zero-area pixel buffer: {self.width}x{self.height}"
            )
        if not isinstance(self.samples, np.ndarray) or self.samples.dtype != np.uint8:
            raise InvalidImageError("Pixel buffer samples must be a uint8 numpy array")
        if self.samples.size != self.width * self.height * CHANNELS:
            raise InvalidImageError(
                f"Pixel buffer holds {self.samples.size} samples, "
                f"expected {self.width * self.height * CHANNELS} "
                f"for {self.width}x{self.height} RGBA"
            )
        if self.samples.shape != (self.height, self.width, CHANNELS):
            raise InvalidImageError(
                f"Pixel buffer shape {self.samples.shape} does not match "
                f"({self.height}, {self.width}, {CHANNELS})"
            )
        return self

    @property
    def pixelCount(self) -> int:
        """Number of pixels in the buffer."""
        return self.width * self.height

    def copy(self) -> "PixelBuffer":
        """Deep copy of the buffer."""
        return PixelBuffer(self.width, self.height, self.samples.copy())

    def toGray(self) -> np.ndarray:
        """
        Get a single-channel view for decoders.

        Returns the R channel when the buffer is already grayscale,
        otherwise the BT.601 luma computed by OpenCV.
        """
        rgb = self.samples[:, :, :3]
        red = rgb[:, :, 0]
        if np.array_equal(red, rgb[:, :, 1]) and np.array_equal(red, rgb[:, :, 2]):
            return np.ascontiguousarray(red)
        return cv2.cvtColor(np.ascontiguousarray(rgb), cv2.COLOR_RGB2GRAY)

    def toBgr(self) -> np.ndarray:
        """Convert to an OpenCV BGR image (alpha dropped)."""
        return cv2.cvtColor(self.samples, cv2.COLOR_RGBA2BGR)

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Constructors
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    @classmethod
    def blank(cls, width: int, height: int, value: int = 0) -> "PixelBuffer":
        """Create an opaque buffer filled with a single gray value."""
        samples = np.full((height, width, CHANNELS), value, dtype=np.uint8)
        samples[:, :, 3] = OPAQUE
        return cls(width, height, samples).validate()

    @classmethod
    def fromRgba(cls, array: np.ndarray) -> "PixelBuffer":
        """
        Wrap an RGBA array.

        Args:
            array: uint8 array of shape (height, width, 4).

        Raises:
            InvalidImageError: If the array is not a valid RGBA raster.
        """
        if array is None or array.ndim != 3 or array.shape[2] != CHANNELS:
            raise InvalidImageError("Expected an RGBA array of shape (height, width, 4)")
        height, width = array.shape[:2]
        return cls(width, height, np.ascontiguousarray(array)).validate()

    @classmethod
    def fromBgr(cls, image: np.ndarray) -> "PixelBuffer":
        """
        Convert an OpenCV image (BGR, BGRA or grayscale) to a pixel buffer.

        Args:
            image: OpenCV image array.

        Raises:
            InvalidImageError: If the image is None, empty or has an
                unsupported channel count.
        """
        if image is None or image.size == 0:
            raise InvalidImageError("Input image is None or empty")

        if image.dtype == np.uint16:
            image = (image >> 8).astype(np.uint8)
        elif image.dtype != np.uint8:
            raise InvalidImageError(f"Unsupported sample type: {image.dtype}")

        if image.ndim == 2:
            rgba = cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
        elif image.shape[2] == 3:
            rgba = cv2.cvtColor(image, cv2.COLOR_BGR2RGBA)
        elif image.shape[2] == 4:
            rgba = cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)
        else:
            raise InvalidImageError(f"Unsupported channel count: {image.shape[2]}")

        return cls.fromRgba(rgba)


def loadImageFile(path: Union[str, Path]) -> PixelBuffer:
    """
    Decode a still image file into a pixel buffer.

    Args:
        path: Path to a PNG/JPEG/BMP/... file readable by OpenCV.

    Returns:
        PixelBuffer with the decoded image.

    Raises:
        InvalidImageError: If the file does not exist or cannot be decoded.
    """
    filePath = Path(path)
    if not filePath.is_file():
        raise InvalidImageError(f"Image file not found: {filePath}")

    image = cv2.imread(str(filePath), cv2.IMREAD_UNCHANGED)
    if image is None:
        raise InvalidImageError(f"Could not decode image file: {filePath}")

    buffer = PixelBuffer.fromBgr(image)
    logger.debug(f"Loaded {filePath.name}: {buffer.width}x{buffer.height}")
    return buffer
