"""Tests for FilterStep chains and the strategy descriptors."""

import numpy as np
import pytest

from core.filters import FilterKind, FilterStep, applyFilterChain, grayscale, gaussianBlur, otsuThreshold
from core.strategy import (
    DecoderKind,
    Strategy,
    DEFAULT_STRATEGIES,
    SUPPLEMENTARY_STRATEGIES,
    ROBUST_PREPASS_SCALES
)


def test_fixed_threshold_step_requires_a_byte_value():
    with pytest.raises(ValueError):
        FilterStep(FilterKind.FIXED_THRESHOLD)
    with pytest.raises(ValueError):
        FilterStep(FilterKind.FIXED_THRESHOLD, threshold=256)
    with pytest.raises(ValueError):
        FilterStep(FilterKind.FIXED_THRESHOLD, threshold=12.5)
    assert FilterStep(FilterKind.FIXED_THRESHOLD, threshold=0).threshold == 0


def test_other_steps_reject_a_threshold():
    with pytest.raises(ValueError):
        FilterStep(FilterKind.GRAYSCALE, threshold=100)


def test_every_kind_is_applicable(noiseBuffer):
    for kind in FilterKind:
        threshold = 128 if kind is FilterKind.FIXED_THRESHOLD else None
        result = FilterStep(kind, threshold=threshold).apply(noiseBuffer)
        assert result.samples.shape == noiseBuffer.samples.shape


def test_filter_chain_composes_in_order(noiseBuffer):
    chain = [
        FilterStep(FilterKind.GRAYSCALE),
        FilterStep(FilterKind.GAUSSIAN_BLUR),
        FilterStep(FilterKind.OTSU_THRESHOLD),
    ]
    expected = otsuThreshold(gaussianBlur(grayscale(noiseBuffer)))
    assert np.array_equal(applyFilterChain(noiseBuffer, chain).samples, expected.samples)


def test_empty_chain_returns_input(noiseBuffer):
    assert applyFilterChain(noiseBuffer, []) is noiseBuffer


def test_step_string_form():
    assert str(FilterStep(FilterKind.FIXED_THRESHOLD, threshold=180)) == "fixed_threshold(180)"
    assert str(FilterStep(FilterKind.MEDIAN)) == "median"


def test_default_strategy_order():
    names = [strategy.name for strategy in DEFAULT_STRATEGIES]
    assert names == [
        "Original",
        "Shadow Crusher (Bright - 180)",
        "Shadow Crusher (Super Bright - 210)",
        "Shadow Crusher (Dark - 140)",
        "Crush Texture (Scale 50%)",
        "Crush Texture (Scale 25%)",
        "Crush Texture (Scale 75%)",
        "Denoise (Blur) + Otsu",
        "Median Filter (Grain Removal)",
        "Otsu Threshold",
        "Histogram Equalization",
        "Upscale 150%",
        "Upscale 200%",
    ]
    assert [strategy.scale for strategy in DEFAULT_STRATEGIES] == [
        1.0, 1.0, 1.0, 1.0, 0.5, 0.25, 0.75, 1.0, 1.0, 1.0, 1.0, 1.5, 2.0
    ]
    assert all(strategy.decoder is DecoderKind.FAST for strategy in DEFAULT_STRATEGIES)


def test_shadow_crusher_thresholds():
    thresholds = [strategy.filterChain[0].threshold for strategy in DEFAULT_STRATEGIES[1:4]]
    assert thresholds == [180, 210, 140]
    assert DEFAULT_STRATEGIES[0].filterChain == ()


def test_robust_prepass_scales():
    assert ROBUST_PREPASS_SCALES == (1.0, 0.75, 0.5, 1.5, 2.0)


def test_strategy_validation():
    with pytest.raises(ValueError):
        Strategy("", 1.0)
    with pytest.raises(ValueError):
        Strategy("zero", 0)
    with pytest.raises(ValueError):
        Strategy("negative", -0.5)

    strategy = Strategy("listed", 1.0, [FilterStep(FilterKind.GRAYSCALE)])
    assert isinstance(strategy.filterChain, tuple)
    assert "grayscale" in strategy.describe()


def test_supplementary_strategies_use_remaining_kernels():
    kinds = {step.kind for strategy in SUPPLEMENTARY_STRATEGIES for step in strategy.filterChain}
    assert {FilterKind.ADAPTIVE_THRESHOLD, FilterKind.BILATERAL, FilterKind.SHARPEN, FilterKind.SOBEL} <= kinds
