"""
Filter Kernels module.

Pure transforms over a PixelBuffer used to rescue degraded QR photos:
- Point filters: grayscale, contrast stretch, fixed threshold
- Neighborhood filters: sharpen, Gaussian blur, median, bilateral, Sobel
- Threshold filters: adaptive threshold, Otsu, histogram equalization
- FilterStep / applyFilterChain: kernels described as data
"""

from core.filters.point_filters import grayscale, enhanceContrast, fixedThreshold
from core.filters.neighborhood_filters import (
    sharpen,
    gaussianBlur,
    medianFilter,
    bilateralFilter,
    sobelEdges
)
from core.filters.threshold_filters import (
    adaptiveThreshold,
    otsuThreshold,
    histogramEqualization,
    computeOtsuThreshold
)
from core.filters.filter_step import FilterKind, FilterStep, applyFilterChain

__all__ = [
    'grayscale',
    'enhanceContrast',
    'fixedThreshold',
    'sharpen',
    'gaussianBlur',
    'medianFilter',
    'bilateralFilter',
    'sobelEdges',
    'adaptiveThreshold',
    'otsuThreshold',
    'histogramEqualization',
    'computeOtsuThreshold',
    'FilterKind',
    'FilterStep',
    'applyFilterChain',
]
