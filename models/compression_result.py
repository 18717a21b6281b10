"""Compression result with metrics."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from models.tier_params import TierParams


@dataclass
class CompressionResult:
    """Outcome of one pipeline run."""

    output_path: Path
    output_format: str  # 'jpeg', 'png-indexed' or 'png-truecolor'
    width: int
    height: int
    state: str

    tier_params: Optional[TierParams] = None
    palette_size: int = 0
    jpeg_quality: Optional[int] = None

    # Quality metrics
    psnr: float = 0.0
    ssim: float = 0.0

    # Sizes
    input_bytes: int = 0
    output_bytes: int = 0

    elapsed_ms: float = 0.0

    @property
    def reduction_pct(self) -> float:
        if self.input_bytes == 0:
            return 0.0
        return (self.input_bytes - self.output_bytes) / self.input_bytes * 100.0

    def summary(self) -> str:
        lines = [
            f"Output:    {self.output_path} ({self.output_format})",
            f"Image:     {self.width}x{self.height}",
        ]
        if self.tier_params is not None:
            lines.append(f"Params:    {self.tier_params.describe()}")
        if self.palette_size:
            lines.append(f"Palette:   {self.palette_size} colors")
        if self.jpeg_quality is not None:
            lines.append(f"JPEG q:    {self.jpeg_quality}")
        lines.append(f"PSNR:      {self.psnr:.2f} dB")
        lines.append(f"SSIM:      {self.ssim:.4f}")
        if self.input_bytes:
            lines.append(
                f"Size:      {self.input_bytes:,} -> {self.output_bytes:,} bytes "
                f"({self.reduction_pct:.1f}% reduction)"
            )
        else:
            lines.append(f"Size:      {self.output_bytes:,} bytes")
        lines.append(f"Time:      {self.elapsed_ms:.2f} ms")
        return "\n".join(lines)
