"""Chroma-only Gaussian blur and block subsampling."""

import math

import numpy as np
from scipy.ndimage import convolve1d

from utils.constants import MIN_BLUR_SIGMA

CHROMA_CHANNELS = (1, 2)


def gaussian_kernel(sigma: float) -> np.ndarray:
    """1-D Gaussian of radius ceil(2*sigma), normalized to sum 1."""
    radius = int(math.ceil(sigma * 2))
    offsets = np.arange(-radius, radius + 1, dtype=np.float64)
    kernel = np.exp(-(offsets ** 2) / (2.0 * sigma * sigma))
    return kernel / kernel.sum()


def chroma_blur(ycbcr: np.ndarray, sigma: float) -> np.ndarray:
    """
    Separable Gaussian blur on Cb and Cr; Y is left alone.

    The horizontal pass produces a new plane which the vertical pass then
    reads in full. Samples past the border replicate the edge pixel.
    """
    out = ycbcr.copy()
    if sigma < MIN_BLUR_SIGMA:
        return out

    kernel = gaussian_kernel(sigma)
    for c in CHROMA_CHANNELS:
        horizontal = convolve1d(ycbcr[:, :, c], kernel, axis=1, mode='nearest')
        out[:, :, c] = convolve1d(horizontal, kernel, axis=0, mode='nearest')
    return out


def _block_starts(length: int, factor: int) -> np.ndarray:
    return np.arange(0, length, factor)


def chroma_subsample(ycbcr: np.ndarray, factor: int) -> np.ndarray:
    """
    Replace Cb/Cr in every factor x factor block with the block mean.

    Blocks on the right and bottom edges may be smaller. Dimensions are
    unchanged, so this simulates subsampling on a dense raster.
    """
    out = ycbcr.copy()
    h, w = ycbcr.shape[:2]
    if factor <= 1 or h == 0 or w == 0:
        return out

    rows = _block_starts(h, factor)
    cols = _block_starts(w, factor)
    row_sizes = np.diff(np.append(rows, h))
    col_sizes = np.diff(np.append(cols, w))
    counts = np.outer(row_sizes, col_sizes).astype(np.float64)

    for c in CHROMA_CHANNELS:
        sums = np.add.reduceat(np.add.reduceat(ycbcr[:, :, c], rows, axis=0), cols, axis=1)
        means = sums / counts
        out[:, :, c] = np.repeat(np.repeat(means, row_sizes, axis=0), col_sizes, axis=1)
    return out
