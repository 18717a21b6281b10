"""Level quantization and ordered dithering."""

import numpy as np

from engines.color_space import round_half_away
from models.tier_params import TierParams
from utils.constants import BAYER_4X4


def quantization_step(levels: int) -> float:
    """Grid spacing for `levels` evenly spaced values over [0, 255]."""
    return 255.0 / (max(int(levels), 2) - 1)


def quantize(values, levels: int):
    """Snap values to the nearest point of the `levels`-point grid."""
    step = quantization_step(levels)
    return round_half_away(np.asarray(values, dtype=np.float64) / step) * step


def bayer_thresholds(shape) -> np.ndarray:
    """Tile the 4x4 Bayer matrix over an (h, w) plane, indexed [y % 4, x % 4]."""
    h, w = shape
    reps = (-(-h // 4), -(-w // 4))
    return np.tile(BAYER_4X4, reps)[:h, :w]


def ordered_dither(plane: np.ndarray, levels: int) -> np.ndarray:
    """Add a centered Bayer offset scaled to one quantization step, clamp to [0, 255]."""
    step = quantization_step(levels)
    offsets = (bayer_thresholds(plane.shape) - 0.5) * step
    return np.clip(plane + offsets, 0.0, 255.0)


def quantize_ycbcr(ycbcr: np.ndarray, params: TierParams) -> np.ndarray:
    """Quantize Y with luma levels and Cb/Cr with chroma levels."""
    out = np.empty_like(ycbcr, dtype=np.float64)
    luma = ycbcr[:, :, 0]
    if params.use_dithering:
        luma = ordered_dither(luma, params.luma_levels)

    out[:, :, 0] = quantize(luma, params.luma_levels)
    out[:, :, 1] = quantize(ycbcr[:, :, 1], params.chroma_levels)
    out[:, :, 2] = quantize(ycbcr[:, :, 2], params.chroma_levels)

    if params.use_dithering:
        # Even-valued luma reduces residual banding on the dithered path
        out[:, :, 0] = np.clip(round_half_away(out[:, :, 0] / 2.0) * 2.0, 0.0, 255.0)
    return out
