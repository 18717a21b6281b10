"""Main compression pipeline: decode, transform, encode."""

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple

import numpy as np

from engines.chroma_filter import chroma_blur, chroma_subsample
from engines.color_space import rgb_to_ycbcr, ycbcr_to_rgb, ycbcr_to_rgb_rounded
from engines.palette import build_palette
from engines.quantizer import quantize_ycbcr
from engines.tier_planner import denoise_sigma, jpeg_quality, plan
from models.compression_params import CompressionParams
from models.compression_result import CompressionResult
from models.errors import IndexedEncodeFailure
from models.tier_params import TierParams
from utils.image_io import ImageCodec, OpenCVCodec, detect_output_format
from utils.metrics import Timer, compute_psnr_ssim

logger = logging.getLogger(__name__)


class PipelineState(Enum):
    LOADED = 'loaded'
    COLOR_CONVERTED = 'color_converted'
    FILTERED = 'filtered'
    QUANTIZED = 'quantized'
    RECONSTRUCTED = 'reconstructed'
    ENCODED = 'encoded'
    FAILED = 'failed'


class PipelineTracker:
    """Records the current pipeline state and every state visited."""

    def __init__(self):
        self.state = PipelineState.LOADED
        self.history = [self.state]

    def advance(self, state: PipelineState) -> None:
        logger.debug(f"State: {self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)

    def fail(self, message: str) -> None:
        self.advance(PipelineState.FAILED)
        logger.error(message)


def denoise_rgb(image_rgb: np.ndarray, quality: float) -> np.ndarray:
    """Light chroma blur through a YCbCr round-trip, only at quality <= 0.6."""
    sigma = denoise_sigma(quality)
    if sigma <= 0.0:
        return image_rgb.copy()
    logger.debug(f"Chroma denoise (sigma={sigma})")
    return ycbcr_to_rgb(chroma_blur(rgb_to_ycbcr(image_rgb), sigma))


def transform_png(
    image_rgb: np.ndarray,
    quality: float,
    timer: Optional[Timer] = None,
    tracker: Optional[PipelineTracker] = None
) -> Tuple[np.ndarray, TierParams]:
    """Run the perceptual transform; returns the new RGB raster and the parameters used."""
    timer = timer or Timer()
    tracker = tracker or PipelineTracker()

    ycbcr = timer.measure('color_convert', rgb_to_ycbcr, image_rgb)
    tracker.advance(PipelineState.COLOR_CONVERTED)

    params = plan(quality)
    logger.info(params.describe())

    if params.denoise_sigma > 0.0:
        ycbcr = timer.measure('denoise', chroma_blur, ycbcr, params.denoise_sigma)
    if params.blur_sigma > 0.0:
        ycbcr = timer.measure('blur', chroma_blur, ycbcr, params.blur_sigma)
    ycbcr = timer.measure('subsample', chroma_subsample, ycbcr, params.subsample_factor)
    tracker.advance(PipelineState.FILTERED)

    ycbcr = timer.measure('quantize', quantize_ycbcr, ycbcr, params)
    tracker.advance(PipelineState.QUANTIZED)

    rgb = timer.measure('reconstruct', ycbcr_to_rgb_rounded, ycbcr, params.rgb_round_multiple)
    tracker.advance(PipelineState.RECONSTRUCTED)
    return rgb, params


def _encode_png(
    rgb: np.ndarray,
    output_path: Path,
    codec: ImageCodec,
    compression_level: int,
    timer: Timer
) -> Tuple[str, int]:
    palette = timer.measure('palette', build_palette, rgb)
    if palette is not None:
        logger.info(f"Writing indexed PNG ({len(palette)} colors)")
        try:
            timer.measure('encode', codec.encode_png_indexed, palette, output_path)
            return 'png-indexed', len(palette)
        except IndexedEncodeFailure as e:
            logger.warning(f"Indexed PNG encode failed, falling back to truecolor: {e}")

    logger.info("Writing truecolor PNG")
    timer.measure('encode', codec.encode_png_truecolor, rgb, output_path, compression_level)
    return 'png-truecolor', 0


def _make_params(quality, png_compression_level: Optional[int]) -> CompressionParams:
    if png_compression_level is None:
        return CompressionParams(quality=quality)
    return CompressionParams(quality=quality, png_compression_level=png_compression_level)


def compress_array(
    image_rgb: np.ndarray,
    output_path,
    quality: float,
    codec: Optional[ImageCodec] = None,
    png_compression_level: Optional[int] = None,
    input_bytes: int = 0,
    timer: Optional[Timer] = None,
    tracker: Optional[PipelineTracker] = None
) -> CompressionResult:
    """Compress an already decoded RGB raster into `output_path`."""
    params = _make_params(quality, png_compression_level)
    output_path = Path(output_path)
    output_format = detect_output_format(output_path)
    codec = codec or OpenCVCodec()
    timer = timer or Timer()
    tracker = tracker or PipelineTracker()

    h, w = image_rgb.shape[:2]
    result = CompressionResult(
        output_path=output_path,
        output_format=output_format,
        width=w,
        height=h,
        state=tracker.state.value,
        input_bytes=input_bytes,
    )

    try:
        if output_format == 'jpeg':
            logger.info("Using standard JPEG encoder pipeline")
            processed = timer.measure('denoise', denoise_rgb, image_rgb, params.quality)
            tracker.advance(PipelineState.RECONSTRUCTED)
            result.jpeg_quality = jpeg_quality(params.quality)
            logger.info(f"Writing JPEG quality: {result.jpeg_quality}")
            timer.measure('encode', codec.encode_jpeg, processed, output_path, result.jpeg_quality)
        else:
            logger.info("Using custom PNG compression pipeline")
            processed, result.tier_params = transform_png(image_rgb, params.quality, timer, tracker)
            result.output_format, result.palette_size = _encode_png(
                processed, output_path, codec, params.png_compression_level, timer
            )
    except Exception:
        tracker.fail(f"Failed to write image: {output_path}")
        raise

    tracker.advance(PipelineState.ENCODED)
    result.state = tracker.state.value

    metrics = compute_psnr_ssim(image_rgb, processed)
    result.psnr = metrics['psnr']
    result.ssim = metrics['ssim']
    if output_path.exists():
        result.output_bytes = output_path.stat().st_size
    result.elapsed_ms = timer.elapsed_ms
    logger.info(f"Compressed image saved to: {output_path}")
    return result


def compress_image(
    input_path,
    output_path,
    quality: float,
    codec: Optional[ImageCodec] = None,
    png_compression_level: Optional[int] = None,
    tracker: Optional[PipelineTracker] = None
) -> CompressionResult:
    """
    Decode `input_path`, compress, and write `output_path`.

    Quality, PNG compression level and output extension are validated
    before the input is read.
    """
    params = _make_params(quality, png_compression_level)
    detect_output_format(output_path)
    codec = codec or OpenCVCodec()
    timer = Timer()
    tracker = tracker or PipelineTracker()

    try:
        image_rgb = timer.measure('decode', codec.decode, input_path)
    except Exception:
        tracker.fail(f"Failed to load image: {input_path}")
        raise
    logger.info(f"Loaded {image_rgb.shape[1]}x{image_rgb.shape[0]}")

    try:
        input_bytes = os.path.getsize(input_path)
    except OSError:
        input_bytes = 0

    return compress_array(
        image_rgb,
        output_path,
        params.quality,
        codec=codec,
        png_compression_level=params.png_compression_level,
        input_bytes=input_bytes,
        timer=timer,
        tracker=tracker,
    )
