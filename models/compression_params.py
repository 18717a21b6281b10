"""Compression parameters."""

import math
from dataclasses import dataclass

from models.errors import InvalidCompressionLevel, InvalidQuality
from utils.constants import PNG_COMPRESSION_LEVEL


def validate_quality(quality) -> float:
    """Return quality as float, or raise InvalidQuality."""
    try:
        value = float(quality)
    except (TypeError, ValueError):
        raise InvalidQuality(f"Quality must be a number in [0, 1], got {quality!r}") from None
    if not math.isfinite(value) or not (0.0 <= value <= 1.0):
        raise InvalidQuality(f"Quality must be a finite float in [0.0, 1.0], got {quality!r}")
    return value


@dataclass
class CompressionParams:
    """User-facing compression settings.

    quality: 0.0 (smallest output) to 1.0 (best quality).
    """

    quality: float = 0.8
    png_compression_level: int = PNG_COMPRESSION_LEVEL

    def __post_init__(self):
        self.quality = validate_quality(self.quality)
        if not (0 <= self.png_compression_level <= 9):
            raise InvalidCompressionLevel(
                f"PNG compression level must be 0-9, got {self.png_compression_level}"
            )
