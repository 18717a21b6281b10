"""Static tables and thresholds shared by the engines."""

import numpy as np

# 4x4 Bayer threshold matrix, normalized to [0, 1)
BAYER_4X4 = np.array([
    [0, 8, 2, 10],
    [12, 4, 14, 6],
    [3, 11, 1, 9],
    [15, 7, 13, 5]
], dtype=np.float64) / 16.0
BAYER_4X4.setflags(write=False)

# Quality tiers
TIER1_MIN_QUALITY = 0.7
TIER_EPSILON = 1e-6

# Light chroma denoise applied before the tier filters
DENOISE_MAX_QUALITY = 0.6
DENOISE_SIGMA = 0.4

# RGB rounding granularity switches from 2 to 4 at or below this quality
FINE_ROUNDING_MIN_QUALITY = 0.4

# Blur is skipped below this sigma
MIN_BLUR_SIGMA = 0.1

MAX_PALETTE_COLORS = 256
PNG_COMPRESSION_LEVEL = 9

# quality [0, 1] -> JPEG quality [50, 95]
JPEG_QUALITY_BASE = 50
JPEG_QUALITY_SPAN = 45
