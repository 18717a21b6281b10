"""Pixel transform engines - pure computation, codec access only in the pipeline."""

from .color_space import rgb_to_ycbcr, ycbcr_to_rgb, ycbcr_to_rgb_rounded
from .chroma_filter import gaussian_kernel, chroma_blur, chroma_subsample
from .quantizer import quantize, ordered_dither, quantize_ycbcr
from .tier_planner import plan, jpeg_quality, denoise_sigma
from .palette import build_palette, count_distinct_colors
from .pipeline import PipelineState, PipelineTracker, compress_array, compress_image, denoise_rgb, transform_png

__all__ = [
    'rgb_to_ycbcr',
    'ycbcr_to_rgb',
    'ycbcr_to_rgb_rounded',
    'gaussian_kernel',
    'chroma_blur',
    'chroma_subsample',
    'quantize',
    'ordered_dither',
    'quantize_ycbcr',
    'plan',
    'jpeg_quality',
    'denoise_sigma',
    'build_palette',
    'count_distinct_colors',
    'PipelineState',
    'PipelineTracker',
    'compress_array',
    'compress_image',
    'denoise_rgb',
    'transform_png',
]
