"""Palette reduction: decide between indexed and truecolor output."""

import logging
from typing import Optional

import numpy as np

from models.palette import Palette
from utils.constants import MAX_PALETTE_COLORS

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_ROWS = 64


def pack_rgb(rgb: np.ndarray) -> np.ndarray:
    """Pack (..., 3) uint8 RGB into (r << 16) | (g << 8) | b."""
    rgb = rgb.astype(np.uint32)
    return (rgb[..., 0] << 16) | (rgb[..., 1] << 8) | rgb[..., 2]


def unpack_rgb(packed: np.ndarray) -> np.ndarray:
    packed = packed.astype(np.uint32)
    return np.stack([(packed >> 16) & 0xFF, (packed >> 8) & 0xFF, packed & 0xFF], axis=-1).astype(np.uint8)


def distinct_colors(
    rgb: np.ndarray,
    limit: int = MAX_PALETTE_COLORS,
    chunk_rows: int = DEFAULT_CHUNK_ROWS
) -> np.ndarray:
    """
    Sorted distinct packed colors, scanning `chunk_rows` rows at a time.

    Stops as soon as the running set grows past `limit`; the returned array
    then holds more than `limit` entries but not necessarily all of them.
    The set only grows, so stopping early never changes the over/under
    `limit` outcome. Per-chunk sets are merged into one sorted set before
    every threshold check.
    """
    packed = pack_rgb(rgb)
    chunk_rows = max(1, chunk_rows)
    seen = np.empty(0, dtype=np.uint32)
    for start in range(0, packed.shape[0], chunk_rows):
        seen = np.union1d(seen, packed[start:start + chunk_rows].ravel())
        if seen.size > limit:
            logger.debug(f"Distinct colors exceeded {limit} by row {start + chunk_rows}")
            break
    return seen


def count_distinct_colors(
    rgb: np.ndarray,
    limit: int = MAX_PALETTE_COLORS,
    chunk_rows: int = DEFAULT_CHUNK_ROWS
) -> int:
    """Distinct color count, exact up to limit + 1."""
    return int(distinct_colors(rgb, limit, chunk_rows).size)


def build_palette(rgb: np.ndarray, limit: int = MAX_PALETTE_COLORS) -> Optional[Palette]:
    """
    Build an indexed palette, or return None when truecolor is required.

    Palette entries are sorted by packed RGB, so the same image always
    gets the same indices.
    """
    if rgb.size == 0:
        return None

    colors = distinct_colors(rgb, limit)
    if colors.size > limit:
        logger.debug(f"More than {limit} colors, truecolor output required")
        return None

    indices = np.searchsorted(colors, pack_rgb(rgb)).astype(np.uint8)
    rgba = np.empty((colors.size, 4), dtype=np.uint8)
    rgba[:, :3] = unpack_rgb(colors)
    rgba[:, 3] = 255
    logger.debug(f"Built palette with {colors.size} colors")
    return Palette(colors=rgba, indices=indices)
