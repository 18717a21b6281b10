"""Shared utilities."""

from .constants import BAYER_4X4, MAX_PALETTE_COLORS
from .metrics import compute_psnr_ssim, Timer
from .test_images import generate_two_color_pattern, generate_noise, generate_demo_image
from .image_io import ImageCodec, OpenCVCodec, detect_output_format, load_image, save_image

__all__ = [
    'BAYER_4X4',
    'MAX_PALETTE_COLORS',
    'compute_psnr_ssim',
    'Timer',
    'generate_two_color_pattern',
    'generate_noise',
    'generate_demo_image',
    'ImageCodec',
    'OpenCVCodec',
    'detect_output_format',
    'load_image',
    'save_image',
]
