"""Tests for the quality -> parameter mapping."""

import math

import numpy as np
import pytest
from engines.tier_planner import plan, jpeg_quality, denoise_sigma
from models.errors import InvalidQuality


def test_best_quality_tier1():
    params = plan(1.0)
    assert params.tier == 1
    assert params.luma_levels == 256
    assert params.chroma_levels == 256
    assert params.subsample_factor == 2
    assert params.blur_sigma == 0.0
    assert params.use_dithering is True
    assert params.rgb_round_multiple == 2
    assert params.denoise_sigma == 0.0


def test_worst_quality_tier2():
    params = plan(0.0)
    assert params.tier == 2
    assert params.luma_levels == 4
    assert params.chroma_levels == 2
    assert params.subsample_factor == 8
    assert params.blur_sigma == pytest.approx(1.3)
    assert params.use_dithering is False
    assert params.rgb_round_multiple == 4
    assert params.denoise_sigma == pytest.approx(0.4)


def test_tier_boundary():
    """0.7 is still Tier 1 and lines up with the start of Tier 2."""
    at = plan(0.7)
    below = plan(0.6999)
    assert at.tier == 1
    assert below.tier == 2
    assert at.luma_levels == 192
    assert at.chroma_levels == 64
    assert at.blur_sigma == pytest.approx(0.7)
    assert below.luma_levels == 192
    assert below.subsample_factor == 2


def test_tier1_midpoint():
    params = plan(0.85)
    assert params.luma_levels == 224
    assert params.chroma_levels == 160
    assert params.blur_sigma == pytest.approx(0.35)


def test_dithering_switches_off_past_tier2_midpoint():
    assert plan(0.5).use_dithering is True     # t ~ 0.29
    assert plan(0.2).use_dithering is False    # t ~ 0.71


@pytest.mark.parametrize("quality,multiple", [(1.0, 2), (0.41, 2), (0.4, 4), (0.0, 4)])
def test_rgb_round_multiple(quality, multiple):
    assert plan(quality).rgb_round_multiple == multiple


@pytest.mark.parametrize("quality,sigma", [(0.61, 0.0), (0.6, 0.4), (0.1, 0.4)])
def test_denoise_threshold(quality, sigma):
    assert denoise_sigma(quality) == sigma
    assert plan(quality).denoise_sigma == sigma


def test_levels_non_increasing_as_quality_drops():
    qualities = np.linspace(1.0, 0.0, 101)
    plans = [plan(q) for q in qualities]
    for a, b in zip(plans, plans[1:]):
        assert b.luma_levels <= a.luma_levels
        assert b.chroma_levels <= a.chroma_levels
        assert b.subsample_factor >= a.subsample_factor
        assert b.luma_levels >= 4 and b.chroma_levels >= 2


@pytest.mark.parametrize("quality,expected", [(0.0, 50), (0.5, 73), (1.0, 95)])
def test_jpeg_quality_mapping(quality, expected):
    assert jpeg_quality(quality) == expected


@pytest.mark.parametrize("quality", [1.5, -0.1, math.nan, math.inf, "abc"])
def test_invalid_quality_rejected(quality):
    with pytest.raises(InvalidQuality):
        plan(quality)
