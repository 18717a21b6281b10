"""Metrics: PSNR, SSIM and stage timing."""

import time
from typing import Dict

import numpy as np
from skimage.metrics import peak_signal_noise_ratio, structural_similarity


def compute_psnr_ssim(original_rgb: np.ndarray, processed_rgb: np.ndarray) -> Dict[str, float]:
    """Compute PSNR and SSIM between two RGB uint8 images."""
    if np.array_equal(original_rgb, processed_rgb):
        return {'psnr': float('inf'), 'ssim': 1.0}

    psnr = peak_signal_noise_ratio(original_rgb, processed_rgb, data_range=255)

    # SSIM needs a 7x7 window; tiny images fall back to the largest odd size that fits
    win = min(7, *original_rgb.shape[:2])
    if win % 2 == 0:
        win -= 1
    if win < 3:
        ssim = float('nan')
    else:
        ssim = structural_similarity(
            original_rgb, processed_rgb, channel_axis=2, data_range=255, win_size=win
        )

    return {
        'psnr': float(psnr),
        'ssim': float(ssim),
    }


class Timer:
    """Accumulates wall-clock time per named stage."""

    def __init__(self):
        self.stages_ms: Dict[str, float] = {}
        self._start = time.perf_counter()

    def measure(self, stage: str, func, *args, **kwargs):
        start = time.perf_counter()
        result = func(*args, **kwargs)
        self.stages_ms[stage] = self.stages_ms.get(stage, 0.0) + (time.perf_counter() - start) * 1000.0
        return result

    @property
    def elapsed_ms(self) -> float:
        return (time.perf_counter() - self._start) * 1000.0
