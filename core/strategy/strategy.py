"""
Scan Strategy Module.

A strategy is one (resample, filter chain, decoder) configuration tried
against the source image. The default list is ordered cheap and likely
first; every entry resamples fresh from the original image, so the
order only decides which strategy is reached first.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from core.filters.filter_step import FilterKind, FilterStep


class DecoderKind(Enum):
    """Which decode engine a strategy uses."""
    FAST = "fast"
    ROBUST = "robust"


@dataclass(frozen=True)
class Strategy:
    """
    Immutable scan strategy descriptor.

    Attributes:
        name: Diagnostic name, shown in logs and progress.
        scale: Resample factor applied to the original image (> 0).
        filterChain: Filter steps applied after resampling, in order.
        decoder: Engine used for the decode attempt.
    """
    name: str
    scale: float = 1.0
    filterChain: Tuple[FilterStep, ...] = ()
    decoder: DecoderKind = DecoderKind.FAST

    def __post_init__(self):
        if not self.name:
            raise ValueError("Strategy name must not be empty")
        if not isinstance(self.scale, (int, float)) or not math.isfinite(self.scale) or self.scale <= 0:
            raise ValueError(f"Strategy '{self.name}': scale must be > 0, got {self.scale!r}")
        object.__setattr__(self, "filterChain", tuple(self.filterChain))

    def describe(self) -> str:
        """One-line summary for logs."""
        chain = " → ".join(str(step) for step in self.filterChain) or "none"
        return f"{self.name} (scale={self.scale}, filters={chain}, decoder={self.decoder.value})"


GRAYSCALE = FilterStep(FilterKind.GRAYSCALE)
CONTRAST = FilterStep(FilterKind.CONTRAST)
GAUSSIAN_BLUR = FilterStep(FilterKind.GAUSSIAN_BLUR)
MEDIAN = FilterStep(FilterKind.MEDIAN)
OTSU = FilterStep(FilterKind.OTSU_THRESHOLD)
EQUALIZE = FilterStep(FilterKind.HISTOGRAM_EQUALIZATION)


def _fixedThreshold(value: int) -> FilterStep:
    return FilterStep(FilterKind.FIXED_THRESHOLD, threshold=value)


# Scale factors for the robust engine pre-pass (no filtering)
ROBUST_PREPASS_SCALES: Tuple[float, ...] = (1.0, 0.75, 0.5, 1.5, 2.0)

DEFAULT_STRATEGIES: Tuple[Strategy, ...] = (
    # Basic
    Strategy("Original", 1.0),

    # Shadow crushers: bleach shadows and printed textures away
    Strategy("Shadow Crusher (Bright - 180)", 1.0, (_fixedThreshold(180),)),
    Strategy("Shadow Crusher (Super Bright - 210)", 1.0, (_fixedThreshold(210),)),
    Strategy("Shadow Crusher (Dark - 140)", 1.0, (_fixedThreshold(140),)),

    # Downscaling melts background texture and screen moire
    Strategy("Crush Texture (Scale 50%)", 0.5, (GRAYSCALE, CONTRAST)),
    Strategy("Crush Texture (Scale 25%)", 0.25, (GRAYSCALE, CONTRAST)),
    Strategy("Crush Texture (Scale 75%)", 0.75, (GRAYSCALE, CONTRAST)),

    # Denoising
    Strategy("Denoise (Blur) + Otsu", 1.0, (GRAYSCALE, GAUSSIAN_BLUR, OTSU)),
    Strategy("Median Filter (Grain Removal)", 1.0, (GRAYSCALE, MEDIAN)),

    # Standard enhancements
    Strategy("Otsu Threshold", 1.0, (GRAYSCALE, OTSU)),
    Strategy("Histogram Equalization", 1.0, (GRAYSCALE, EQUALIZE)),

    # Upscaling for very small codes
    Strategy("Upscale 150%", 1.5, (GRAYSCALE, CONTRAST)),
    Strategy("Upscale 200%", 2.0, (GRAYSCALE, CONTRAST)),
)

# Opt-in strategies appended after the default list. They run the
# remaining kernels and cost more time per image.
SUPPLEMENTARY_STRATEGIES: Tuple[Strategy, ...] = (
    Strategy(
        "Adaptive Threshold",
        1.0,
        (GRAYSCALE, FilterStep(FilterKind.ADAPTIVE_THRESHOLD))
    ),
    Strategy(
        "Bilateral + Sharpen",
        1.0,
        (GRAYSCALE, FilterStep(FilterKind.BILATERAL), FilterStep(FilterKind.SHARPEN))
    ),
    Strategy(
        "Sobel Edges",
        0.5,
        (GRAYSCALE, FilterStep(FilterKind.SOBEL))
    ),
)
