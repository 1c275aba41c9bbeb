"""
Threshold Filters Module.

Histogram and local-statistics kernels that read the first channel
(grayscale input expected):
- adaptiveThreshold: local mean threshold
- otsuThreshold: global threshold maximizing between-class variance
- histogramEqualization: CDF remapping of intensities
"""

import logging

import numpy as np

from core.image.pixel_buffer import PixelBuffer
from core.filters.point_filters import withOpaqueAlpha


logger = logging.getLogger(__name__)

ADAPTIVE_BLOCK_SIZE = 11
ADAPTIVE_C = 8

HISTOGRAM_BINS = 256


def _writeGray(buffer: PixelBuffer, gray: np.ndarray) -> PixelBuffer:
    samples = np.empty_like(buffer.samples)
    samples[:, :, 0] = gray
    samples[:, :, 1] = gray
    samples[:, :, 2] = gray
    return withOpaqueAlpha(buffer, samples)


def computeHistogram(gray: np.ndarray) -> np.ndarray:
    """256-bin intensity histogram of a uint8 array."""
    return np.bincount(gray.ravel(), minlength=HISTOGRAM_BINS)


def adaptiveThreshold(
    buffer: PixelBuffer,
    blockSize: int = ADAPTIVE_BLOCK_SIZE,
    c: int = ADAPTIVE_C
) -> PixelBuffer:
    """
    Binarize against the local mean.

    For each pixel the mean is taken over the square window
    [y - blockSize, y + blockSize] x [x - blockSize, x + blockSize]
    clipped to the image. The pixel becomes white if its value exceeds
    mean - c, black otherwise.

    The window sums come from a summed-area table; the result is the
    same as summing every window directly.
    """
    buffer.validate()
    gray = buffer.samples[:, :, 0].astype(np.int64)
    height, width = gray.shape

    integral = np.zeros((height + 1, width + 1), dtype=np.int64)
    integral[1:, 1:] = gray.cumsum(axis=0).cumsum(axis=1)

    rows = np.arange(height)
    cols = np.arange(width)
    top = np.clip(rows - blockSize, 0, None)
    bottom = np.clip(rows + blockSize, None, height - 1) + 1
    left = np.clip(cols - blockSize, 0, None)
    right = np.clip(cols + blockSize, None, width - 1) + 1

    windowSum = (
        integral[np.ix_(bottom, right)]
        - integral[np.ix_(top, right)]
        - integral[np.ix_(bottom, left)]
        + integral[np.ix_(top, left)]
    )
    count = (bottom - top)[:, np.newaxis] * (right - left)[np.newaxis, :]

    # value > sum / count - c, kept in integers
    white = (gray + c) * count > windowSum
    return _writeGray(buffer, np.where(white, 255, 0).astype(np.uint8))


def computeOtsuThreshold(histogram: np.ndarray) -> int:
    """
    Find the Otsu threshold of a 256-bin histogram.

    Scans t = 0..255 and keeps the first t with the largest between-class
    variance wB · wF · (mB - mF)².

    Returns:
        Threshold t; pixels strictly greater than t are foreground.
    """
    total = int(histogram.sum())
    weightedTotal = float(np.dot(np.arange(HISTOGRAM_BINS), histogram))

    sumBackground = 0.0
    weightBackground = 0
    maxVariance = 0.0
    threshold = 0

    for t in range(HISTOGRAM_BINS):
        weightBackground += int(histogram[t])
        if weightBackground == 0:
            continue

        weightForeground = total - weightBackground
        if weightForeground == 0:
            break

        sumBackground += t * int(histogram[t])
        meanBackground = sumBackground / weightBackground
        meanForeground = (weightedTotal - sumBackground) / weightForeground

        variance = (
            weightBackground * weightForeground
            * (meanBackground - meanForeground) * (meanBackground - meanForeground)
        )
        if variance > maxVariance:
            maxVariance = variance
            threshold = t

    return threshold


def otsuThreshold(buffer: PixelBuffer) -> PixelBuffer:
    """Binarize at the automatically selected Otsu threshold."""
    buffer.validate()
    gray = buffer.samples[:, :, 0]
    threshold = computeOtsuThreshold(computeHistogram(gray))
    logger.debug(f"Otsu threshold: {threshold}")
    return _writeGray(buffer, np.where(gray > threshold, 255, 0).astype(np.uint8))


def histogramEqualization(buffer: PixelBuffer) -> PixelBuffer:
    """
    Spread intensities through the cumulative distribution.

    Each value v maps to round((cdf[v] - cdfMin) / (total - cdfMin) * 255),
    cdfMin being the first non-zero CDF entry. A flat image (every pixel
    the same value, total == cdfMin) is returned unchanged.
    """
    buffer.validate()
    gray = buffer.samples[:, :, 0]
    total = buffer.pixelCount

    cdf = np.cumsum(computeHistogram(gray))
    cdfMin = int(cdf[np.flatnonzero(cdf)[0]])

    if total == cdfMin:
        logger.debug("Histogram equalization skipped: flat image")
        return withOpaqueAlpha(buffer, buffer.samples.copy())

    scaled = (cdf - cdfMin) / (total - cdfMin) * 255
    # Round half up, then clamp
    lookupTable = np.clip(np.floor(scaled + 0.5), 0, 255).astype(np.uint8)
    return _writeGray(buffer, lookupTable[gray])
