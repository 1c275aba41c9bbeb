"""
Point Filters Module.

Per-pixel kernels that need no neighborhood:
- grayscale: BT.601 luma written to R, G and B
- enhanceContrast: linear stretch around mid-gray
- fixedThreshold: luma binarization at a caller-supplied value

All kernels return a new PixelBuffer with the same dimensions and an
opaque alpha channel. The input buffer is never modified.
"""

import numpy as np

from core.image.pixel_buffer import PixelBuffer, OPAQUE


# BT.601 luma weights
LUMA_RED = 0.299
LUMA_GREEN = 0.587
LUMA_BLUE = 0.114

CONTRAST_FACTOR = 1.5
CONTRAST_PIVOT = 128


def toByte(values: np.ndarray) -> np.ndarray:
    """
    Convert float samples to 8 bits.

    Clamps to [0, 255] and rounds half to even, the way a clamped
    byte array stores floats.
    """
    return np.rint(np.clip(values, 0, 255)).astype(np.uint8)


def withOpaqueAlpha(buffer: PixelBuffer, samples: np.ndarray) -> PixelBuffer:
    """Wrap new samples in a buffer shaped like `buffer`, alpha forced opaque."""
    samples[:, :, 3] = OPAQUE
    return PixelBuffer(buffer.width, buffer.height, samples)


def computeLuma(buffer: PixelBuffer) -> np.ndarray:
    """
    Compute BT.601 luma from the RGB channels.

    Returns:
        float64 array of shape (height, width).
    """
    rgb = buffer.samples[:, :, :3].astype(np.float64)
    return LUMA_RED * rgb[:, :, 0] + LUMA_GREEN * rgb[:, :, 1] + LUMA_BLUE * rgb[:, :, 2]


def grayscale(buffer: PixelBuffer) -> PixelBuffer:
    """
    Convert to grayscale.

    gray = 0.299R + 0.587G + 0.114B, written into all three color channels.
    """
    buffer.validate()
    gray = toByte(computeLuma(buffer))

    samples = np.empty_like(buffer.samples)
    samples[:, :, 0] = gray
    samples[:, :, 1] = gray
    samples[:, :, 2] = gray
    return withOpaqueAlpha(buffer, samples)


def enhanceContrast(buffer: PixelBuffer, factor: float = CONTRAST_FACTOR) -> PixelBuffer:
    """
    Stretch contrast per color channel.

    out = clamp(0, 255, factor * (in - 128) + 128)
    """
    buffer.validate()
    rgb = buffer.samples[:, :, :3].astype(np.float64)

    samples = np.empty_like(buffer.samples)
    samples[:, :, :3] = toByte(factor * (rgb - CONTRAST_PIVOT) + CONTRAST_PIVOT)
    return withOpaqueAlpha(buffer, samples)


def fixedThreshold(buffer: PixelBuffer, threshold: int) -> PixelBuffer:
    """
    Binarize luma at a fixed value ("shadow crusher").

    Luma is always recomputed from RGB, so the input does not need to be
    grayscale. Pixels strictly brighter than the threshold become white.

    Args:
        buffer: Input buffer.
        threshold: Luma cut-off (0-255).
    """
    buffer.validate()
    binary = np.where(computeLuma(buffer) > threshold, 255, 0).astype(np.uint8)

    samples = np.empty_like(buffer.samples)
    samples[:, :, 0] = binary
    samples[:, :, 1] = binary
    samples[:, :, 2] = binary
    return withOpaqueAlpha(buffer, samples)
