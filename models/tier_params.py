"""Concrete filter/quantizer settings derived from a quality value."""

from dataclasses import dataclass


@dataclass(frozen=True)
class TierParams:
    """Parameters consumed by the chroma filter and quantizer."""

    tier: int
    luma_levels: int
    chroma_levels: int
    subsample_factor: int
    blur_sigma: float
    use_dithering: bool
    rgb_round_multiple: int
    denoise_sigma: float = 0.0

    def __post_init__(self):
        if self.luma_levels < 2 or self.chroma_levels < 2:
            raise ValueError("Quantization needs at least 2 levels per channel")
        if self.subsample_factor < 1:
            raise ValueError(f"Subsample factor must be >= 1, got {self.subsample_factor}")

    def describe(self) -> str:
        label = "perceptually lossless" if self.tier == 1 else "visible compression"
        return (
            f"Tier {self.tier} ({label}): luma={self.luma_levels} "
            f"chroma={self.chroma_levels} subsample={self.subsample_factor}x "
            f"blur={self.blur_sigma:.3f} dither={'on' if self.use_dithering else 'off'} "
            f"rgb_round={self.rgb_round_multiple}"
        )
