"""
Filter Step Module.

Tagged variant over the filter kernels, used by scan strategies to
describe their preprocessing chain as plain data.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional, Sequence

from core.image.pixel_buffer import PixelBuffer
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
    histogramEqualization
)


logger = logging.getLogger(__name__)


class FilterKind(Enum):
    """The available filter kernels."""
    GRAYSCALE = "grayscale"
    CONTRAST = "contrast"
    SHARPEN = "sharpen"
    GAUSSIAN_BLUR = "gaussian_blur"
    MEDIAN = "median"
    BILATERAL = "bilateral"
    SOBEL = "sobel"
    ADAPTIVE_THRESHOLD = "adaptive_threshold"
    OTSU_THRESHOLD = "otsu_threshold"
    HISTOGRAM_EQUALIZATION = "histogram_equalization"
    FIXED_THRESHOLD = "fixed_threshold"


_KERNELS: Dict[FilterKind, Callable[[PixelBuffer], PixelBuffer]] = {
    FilterKind.GRAYSCALE: grayscale,
    FilterKind.CONTRAST: enhanceContrast,
    FilterKind.SHARPEN: sharpen,
    FilterKind.GAUSSIAN_BLUR: gaussianBlur,
    FilterKind.MEDIAN: medianFilter,
    FilterKind.BILATERAL: bilateralFilter,
    FilterKind.SOBEL: sobelEdges,
    FilterKind.ADAPTIVE_THRESHOLD: adaptiveThreshold,
    FilterKind.OTSU_THRESHOLD: otsuThreshold,
    FilterKind.HISTOGRAM_EQUALIZATION: histogramEqualization,
}


@dataclass(frozen=True)
class FilterStep:
    """
    One step of a filter chain.

    Attributes:
        kind: Which kernel to run.
        threshold: Cut-off value, required for FIXED_THRESHOLD only.
    """
    kind: FilterKind
    threshold: Optional[int] = None

    def __post_init__(self):
        if self.kind is FilterKind.FIXED_THRESHOLD:
            if not isinstance(self.threshold, int) or not 0 <= self.threshold <= 255:
                raise ValueError(
                    f"Fixed threshold needs an integer in [0, 255], got {self.threshold!r}"
                )
        elif self.threshold is not None:
            raise ValueError(f"{self.kind.value} does not take a threshold")

    def apply(self, buffer: PixelBuffer) -> PixelBuffer:
        """Run this step's kernel on a buffer."""
        if self.kind is FilterKind.FIXED_THRESHOLD:
            return fixedThreshold(buffer, self.threshold)
        return _KERNELS[self.kind](buffer)

    def __str__(self) -> str:
        if self.threshold is not None:
            return f"{self.kind.value}({self.threshold})"
        return self.kind.value


def applyFilterChain(buffer: PixelBuffer, steps: Sequence[FilterStep]) -> PixelBuffer:
    """
    Apply filter steps in order.

    Args:
        buffer: Input buffer (not modified).
        steps: Ordered filter steps; an empty chain returns the input.

    Returns:
        Output of the last step.
    """
    result = buffer
    for step in steps:
        result = step.apply(result)
        logger.debug(f"Applied filter: {step}")
    return result
