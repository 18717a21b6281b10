"""Map a scalar quality to concrete filter and quantizer parameters."""

import math

from models.compression_params import validate_quality
from models.tier_params import TierParams
from utils.constants import (
    DENOISE_MAX_QUALITY,
    DENOISE_SIGMA,
    FINE_ROUNDING_MIN_QUALITY,
    JPEG_QUALITY_BASE,
    JPEG_QUALITY_SPAN,
    TIER1_MIN_QUALITY,
    TIER_EPSILON,
)


def _round(value: float) -> int:
    return int(math.floor(value + 0.5))


def _clamp(value, low, high):
    return max(low, min(high, value))


def denoise_sigma(quality: float) -> float:
    """Sigma of the light chroma pre-filter, 0.0 when disabled."""
    return DENOISE_SIGMA if quality <= DENOISE_MAX_QUALITY else 0.0


def plan(quality: float) -> TierParams:
    """
    Derive tier parameters from quality in [0, 1] (1 = best).

    Tier 1 (quality >= 0.7) stays close to lossless: full-ish level counts,
    2x chroma subsampling and a blur that grows from 0 to 0.7 as quality
    drops. Tier 2 trades visible artifacts for size: levels fall to 4/2,
    subsampling grows to 8x and dithering switches off past the midpoint.
    """
    quality = validate_quality(quality)
    inv = 1.0 - quality
    rgb_multiple = 2 if quality > FINE_ROUNDING_MIN_QUALITY else 4

    if quality >= TIER1_MIN_QUALITY - TIER_EPSILON:
        t = _clamp(inv / (1.0 - TIER1_MIN_QUALITY), 0.0, 1.0)
        return TierParams(
            tier=1,
            luma_levels=256 - _round(t * 64),
            chroma_levels=256 - _round(t * 192),
            subsample_factor=2,
            blur_sigma=t * 0.7,
            use_dithering=True,
            rgb_round_multiple=rgb_multiple,
            denoise_sigma=denoise_sigma(quality),
        )

    t = _clamp((inv - 0.3) / 0.7, 0.0, 1.0)
    return TierParams(
        tier=2,
        luma_levels=max(4, 192 - _round(t * 188)),
        chroma_levels=max(2, 64 - _round(t * 62)),
        subsample_factor=2 + _round(t * 6),
        blur_sigma=0.7 + t * 0.6,
        use_dithering=t < 0.5,
        rgb_round_multiple=rgb_multiple,
        denoise_sigma=denoise_sigma(quality),
    )


def jpeg_quality(quality: float) -> int:
    """Map quality [0, 1] to a JPEG encoder quality in [50, 95]."""
    quality = validate_quality(quality)
    return _clamp(JPEG_QUALITY_BASE + _round(quality * JPEG_QUALITY_SPAN), 1, 100)
