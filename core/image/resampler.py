"""
Geometric Resampler Module.

Rescales a source pixel buffer by an arbitrary factor before filtering.
Every scan strategy resamples fresh from the original source image.

Follows SRP: Only handles geometric rescaling.
"""

import logging
import math

import cv2
import numpy as np

from core.image.pixel_buffer import PixelBuffer


logger = logging.getLogger(__name__)


class InvalidScaleError(ValueError):
    """Raised when a scale factor would produce an empty or invalid buffer."""


class GeometricResampler:
    """
    Rescales pixel buffers with OpenCV.

    Output size is floor(width * scale) x floor(height * scale).
    Scale factors that would produce a zero-width or zero-height buffer
    are rejected instead of being clamped.

    Interpolation:
    - Shrinking: INTER_AREA (averages away texture and moire)
    - Enlarging: INTER_CUBIC
    """

    @staticmethod
    def targetSize(width: int, height: int, scale: float) -> tuple:
        """
        Compute the output size for a scale factor.

        Args:
            width: Source width.
            height: Source height.
            scale: Scale factor (> 0).

        Returns:
            Tuple (newWidth, newHeight).

        Raises:
            InvalidScaleError: If scale is not a positive finite number or
                the result would have a zero dimension.
        """
        if not isinstance(scale, (int, float)) or not math.isfinite(scale) or scale <= 0:
            raise InvalidScaleError(f"Scale factor must be a positive number, got {scale!r}")

        newW = int(math.floor(width * scale))
        newH = int(math.floor(height * scale))
        if newW < 1 or newH < 1:
            raise InvalidScaleError(
                f"Scale {scale} turns {width}x{height} into an empty "
                f"{newW}x{newH} buffer"
            )
        return newW, newH

    def resample(self, buffer: PixelBuffer, scale: float) -> PixelBuffer:
        """
        Produce a rescaled copy of a buffer.

        Args:
            buffer: Source buffer (never modified).
            scale: Scale factor (> 0).

        Returns:
            New PixelBuffer of the target size.

        Raises:
            InvalidScaleError: If the scale is rejected.
        """
        newW, newH = self.targetSize(buffer.width, buffer.height, scale)

        if newW == buffer.width and newH == buffer.height:
            return buffer.copy()

        interpolation = cv2.INTER_CUBIC if scale > 1.0 else cv2.INTER_AREA
        resized = cv2.resize(buffer.samples, (newW, newH), interpolation=interpolation)

        logger.debug(
            f"Resample: {buffer.width}x{buffer.height} → {newW}x{newH} ({scale:.2f}x)"
        )
        return PixelBuffer(newW, newH, np.ascontiguousarray(resized)).validate()
