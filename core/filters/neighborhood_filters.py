"""
Neighborhood Filters Module.

Window-based kernels: sharpen, Gaussian blur, median, bilateral and
Sobel edge magnitude.

Border policy: the outer ring of pixels (width 1, width 2 for the
bilateral filter) is copied from the input unprocessed. There is no
edge replication or reflection. QR finder patterns rarely touch the
image edge, so the ring is left as-is on purpose. Images too small to
hold a single full window come back unchanged apart from alpha.
"""

import math

import cv2
import numpy as np

from core.image.pixel_buffer import PixelBuffer
from core.filters.point_filters import toByte, withOpaqueAlpha


SHARPEN_KERNEL = np.array([
    [0, -1, 0],
    [-1, 5, -1],
    [0, -1, 0],
])

GAUSSIAN_KERNEL = np.array([
    [1, 2, 1],
    [2, 4, 2],
    [1, 2, 1],
])
GAUSSIAN_KERNEL_SUM = 16

SOBEL_X = np.array([
    [-1, 0, 1],
    [-2, 0, 2],
    [-1, 0, 1],
])
SOBEL_Y = np.array([
    [-1, -2, -1],
    [0, 0, 0],
    [1, 2, 1],
])

BILATERAL_DIAMETER = 5
BILATERAL_SIGMA_COLOR = 50.0
BILATERAL_SIGMA_SPACE = 50.0


def _shifted(source: np.ndarray, radius: int, dy: int, dx: int) -> np.ndarray:
    """
    View of `source` covering the interior, offset by (dy, dx).

    For an interior pixel (y, x), the returned view holds
    source[y + dy, x + dx] at position (y - radius, x - radius).
    """
    height, width = source.shape[:2]
    return source[radius + dy:height - radius + dy, radius + dx:width - radius + dx]


def _fitsWindow(buffer: PixelBuffer, radius: int) -> bool:
    return buffer.width > 2 * radius and buffer.height > 2 * radius


def _convolve3x3(source: np.ndarray, kernel: np.ndarray) -> np.ndarray:
    """
    Correlate `source` with a 3x3 kernel and return the interior only.

    cv2.filter2D correlates (no kernel flip). The border mode only
    affects the ring, which callers discard.
    """
    filtered = cv2.filter2D(
        source.astype(np.float32),
        cv2.CV_32F,
        kernel.astype(np.float32),
        borderType=cv2.BORDER_REPLICATE
    )
    return filtered[1:-1, 1:-1]


def sharpen(buffer: PixelBuffer) -> PixelBuffer:
    """Sharpen each color channel with the 3x3 kernel [0,-1,0,-1,5,-1,0,-1,0]."""
    buffer.validate()
    samples = buffer.samples.copy()
    if not _fitsWindow(buffer, 1):
        return withOpaqueAlpha(buffer, samples)

    rgb = buffer.samples[:, :, :3].astype(np.int32)
    samples[1:-1, 1:-1, :3] = toByte(_convolve3x3(rgb, SHARPEN_KERNEL))
    return withOpaqueAlpha(buffer, samples)


def gaussianBlur(buffer: PixelBuffer) -> PixelBuffer:
    """Blur each color channel with the 3x3 kernel [1,2,1,2,4,2,1,2,1] / 16."""
    buffer.validate()
    samples = buffer.samples.copy()
    if not _fitsWindow(buffer, 1):
        return withOpaqueAlpha(buffer, samples)

    rgb = buffer.samples[:, :, :3].astype(np.int32)
    blurred = _convolve3x3(rgb, GAUSSIAN_KERNEL) / GAUSSIAN_KERNEL_SUM
    samples[1:-1, 1:-1, :3] = toByte(blurred)
    return withOpaqueAlpha(buffer, samples)


def medianFilter(buffer: PixelBuffer) -> PixelBuffer:
    """Replace each color sample with the median of its 3x3 neighborhood."""
    buffer.validate()
    samples = buffer.samples.copy()
    if not _fitsWindow(buffer, 1):
        return withOpaqueAlpha(buffer, samples)

    rgb = np.ascontiguousarray(buffer.samples[:, :, :3])
    samples[1:-1, 1:-1, :3] = cv2.medianBlur(rgb, 3)[1:-1, 1:-1]
    return withOpaqueAlpha(buffer, samples)


def bilateralFilter(
    buffer: PixelBuffer,
    diameter: int = BILATERAL_DIAMETER,
    sigmaColor: float = BILATERAL_SIGMA_COLOR,
    sigmaSpace: float = BILATERAL_SIGMA_SPACE
) -> PixelBuffer:
    """
    Edge-preserving smoothing.

    For each interior pixel, neighbors in a diameter x diameter window are
    averaged with weight

        w = exp(-dist² / (2·sigmaSpace²)) · exp(-colorDiff² / (2·sigmaColor²))

    where colorDiff is taken on the first channel (the image is expected
    to be grayscale) and the weights are applied to R, G and B.
    """
    buffer.validate()
    radius = diameter // 2
    samples = buffer.samples.copy()
    if not _fitsWindow(buffer, radius):
        return withOpaqueAlpha(buffer, samples)

    rgb = buffer.samples[:, :, :3].astype(np.float64)
    center = _shifted(rgb, radius, 0, 0)[:, :, 0]

    weightedSum = np.zeros(_shifted(rgb, radius, 0, 0).shape, dtype=np.float64)
    weightTotal = np.zeros(center.shape, dtype=np.float64)

    for dy in range(-radius, radius + 1):
        for dx in range(-radius, radius + 1):
            spatialWeight = math.exp(-(dx * dx + dy * dy) / (2 * sigmaSpace * sigmaSpace))
            neighbor = _shifted(rgb, radius, dy, dx)
            colorDiff = neighbor[:, :, 0] - center
            weight = spatialWeight * np.exp(-(colorDiff * colorDiff) / (2 * sigmaColor * sigmaColor))

            weightedSum += neighbor * weight[:, :, np.newaxis]
            weightTotal += weight

    # The center pixel always contributes weight 1, so weightTotal > 0
    filtered = weightedSum / weightTotal[:, :, np.newaxis]
    samples[radius:-radius, radius:-radius, :3] = toByte(filtered)
    return withOpaqueAlpha(buffer, samples)


def sobelEdges(buffer: PixelBuffer) -> PixelBuffer:
    """
    Sobel gradient magnitude sqrt(Gx² + Gy²) on the first channel.

    The magnitude is clamped to 8 bits and written to R, G and B.
    """
    buffer.validate()
    samples = buffer.samples.copy()
    if not _fitsWindow(buffer, 1):
        return withOpaqueAlpha(buffer, samples)

    gray = buffer.samples[:, :, 0].astype(np.int32)
    gx = _convolve3x3(gray, SOBEL_X).astype(np.float64)
    gy = _convolve3x3(gray, SOBEL_Y).astype(np.float64)
    magnitude = toByte(np.sqrt(gx * gx + gy * gy))

    for channel in range(3):
        samples[1:-1, 1:-1, channel] = magnitude
    return withOpaqueAlpha(buffer, samples)
