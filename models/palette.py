"""Indexed-color palette."""

from dataclasses import dataclass
import numpy as np


@dataclass(frozen=True)
class Palette:
    """RGBA palette plus per-pixel indices.

    colors: (n, 4) uint8, n <= 256, sorted by packed RGB value.
    indices: (h, w) uint8 into colors.
    """

    colors: np.ndarray
    indices: np.ndarray

    def __len__(self) -> int:
        return int(self.colors.shape[0])

    @property
    def width(self) -> int:
        return int(self.indices.shape[1])

    @property
    def height(self) -> int:
        return int(self.indices.shape[0])

    def to_rgb(self) -> np.ndarray:
        return self.colors[self.indices][:, :, :3]
