"""Tests for the compression pipeline."""

import numpy as np
import pytest
from engines.pipeline import compress_array, compress_image, denoise_rgb, transform_png, PipelineState, PipelineTracker
from engines.color_space import rgb_to_ycbcr, ycbcr_to_rgb
from models.errors import (
    CompressionError,
    DecodeFailure,
    IndexedEncodeFailure,
    InvalidCompressionLevel,
    InvalidQuality,
    TruecolorEncodeFailure,
    UnsupportedOutputFormat,
)
from utils.image_io import ImageCodec
from utils.test_images import generate_two_color_pattern, generate_noise, generate_gradient


class FakeCodec(ImageCodec):
    """In-memory codec that records every call."""

    def __init__(self, image=None, fail=()):
        self.image = image
        self.fail = set(fail)
        self.calls = []
        self.written = {}

    def decode(self, path):
        self.calls.append('decode')
        if 'decode' in self.fail or self.image is None:
            raise DecodeFailure(f"cannot decode {path}")
        return self.image.copy()

    def encode_jpeg(self, rgb, path, quality):
        self.calls.append('jpeg')
        self.written[path] = ('jpeg', rgb, quality)

    def encode_png_truecolor(self, rgb, path, compression_level):
        self.calls.append('truecolor')
        if 'truecolor' in self.fail:
            raise TruecolorEncodeFailure("truecolor failed")
        self.written[path] = ('truecolor', rgb, compression_level)

    def encode_png_indexed(self, palette, path):
        self.calls.append('indexed')
        if 'indexed' in self.fail:
            raise IndexedEncodeFailure("indexed failed")
        self.written[path] = ('indexed', palette, None)


def test_two_color_image_uses_indexed_png(tmp_path):
    image = generate_two_color_pattern(4)
    codec = FakeCodec(image)
    out = tmp_path / "out.png"

    result = compress_image("in.png", out, 1.0, codec=codec)

    assert codec.calls == ['decode', 'indexed']
    kind, palette, _ = codec.written[out]
    assert kind == 'indexed'
    assert len(palette) == 2
    assert result.output_format == 'png-indexed'
    assert result.palette_size == 2
    assert result.state == PipelineState.ENCODED.value
    # Two-color layout survives: one index per checkerboard parity
    yy, xx = np.mgrid[0:4, 0:4]
    parity = (yy + xx) % 2
    assert len(np.unique(palette.indices[parity == 0])) == 1
    assert len(np.unique(palette.indices[parity == 1])) == 1
    assert palette.indices[0, 0] != palette.indices[0, 1]


def test_noise_image_uses_truecolor_png(tmp_path):
    codec = FakeCodec(generate_noise(64))
    result = compress_image("in.png", tmp_path / "out.png", 0.9, codec=codec)
    assert codec.calls == ['decode', 'truecolor']
    assert result.output_format == 'png-truecolor'
    assert result.palette_size == 0
    assert result.tier_params.tier == 1


def test_indexed_failure_falls_back_to_truecolor(tmp_path):
    codec = FakeCodec(generate_two_color_pattern(4), fail={'indexed'})
    out = tmp_path / "out.png"
    result = compress_image("in.png", out, 1.0, codec=codec)
    assert codec.calls == ['decode', 'indexed', 'truecolor']
    assert codec.written[out][0] == 'truecolor'
    assert result.output_format == 'png-truecolor'


def test_truecolor_failure_is_fatal(tmp_path):
    codec = FakeCodec(generate_noise(32), fail={'truecolor'})
    out = tmp_path / "out.png"
    with pytest.raises(TruecolorEncodeFailure):
        compress_image("in.png", out, 0.5, codec=codec)
    assert not out.exists()


def test_jpeg_path_maps_quality_and_skips_transform(tmp_path):
    image = generate_gradient(32)
    codec = FakeCodec(image)
    out = tmp_path / "out.JPG"
    result = compress_image("in.png", out, 1.0, codec=codec)
    kind, written, quality = codec.written[out]
    assert kind == 'jpeg'
    assert quality == 95
    assert result.jpeg_quality == 95
    assert result.tier_params is None
    # No denoise above quality 0.6
    assert np.array_equal(written, image)


def test_jpeg_path_denoises_at_low_quality(tmp_path):
    image = generate_noise(16)
    codec = FakeCodec(image)
    out = tmp_path / "out.jpeg"
    compress_image("in.png", out, 0.2, codec=codec)
    _, written, quality = codec.written[out]
    assert quality == 59
    assert np.array_equal(written, denoise_rgb(image, 0.2))
    assert not np.array_equal(written, image)


@pytest.mark.parametrize("quality", [1.5, -0.2, float('nan')])
def test_invalid_quality_rejected_before_decode(quality):
    codec = FakeCodec(generate_noise(8))
    with pytest.raises(InvalidQuality):
        compress_image("in.png", "out.png", quality, codec=codec)
    assert codec.calls == []


@pytest.mark.parametrize("name", ["out.gif", "out", "out.png.bak"])
def test_unsupported_format_rejected_before_decode(name):
    codec = FakeCodec(generate_noise(8))
    with pytest.raises(UnsupportedOutputFormat):
        compress_image("in.png", name, 0.5, codec=codec)
    assert codec.calls == []


def test_decode_failure_propagates():
    codec = FakeCodec(None)
    with pytest.raises(DecodeFailure):
        compress_image("missing.png", "out.png", 0.5, codec=codec)


@pytest.mark.parametrize("quality", [1.0, 0.85, 0.7, 0.5, 0.3, 0.0])
def test_transform_keeps_shape_and_dtype(quality):
    image = generate_gradient(37)
    out, params = transform_png(image, quality)
    assert out.shape == image.shape
    assert out.dtype == np.uint8
    on_grid = (out.astype(int) % params.rgb_round_multiple == 0) | (out == 255)
    assert on_grid.all()


def test_transform_is_deterministic():
    image = generate_noise(24, seed=5)
    a, _ = transform_png(image, 0.55)
    b, _ = transform_png(image, 0.55)
    assert np.array_equal(a, b)


def test_lower_quality_reduces_colors():
    image = generate_gradient(64)
    high, _ = transform_png(image, 1.0)
    low, _ = transform_png(image, 0.0)
    count = lambda img: len(np.unique(img.reshape(-1, 3), axis=0))
    assert count(low) < count(high)


def test_denoise_rgb_noop_above_threshold():
    image = generate_noise(8)
    assert np.array_equal(denoise_rgb(image, 0.61), image)


def test_denoise_rgb_keeps_flat_image():
    image = np.full((8, 8, 3), (120, 60, 200), dtype=np.uint8)
    expected = ycbcr_to_rgb(rgb_to_ycbcr(image))
    assert np.array_equal(denoise_rgb(image, 0.2), expected)


def test_compress_array_reports_metrics(tmp_path):
    codec = FakeCodec()
    result = compress_array(generate_gradient(32), tmp_path / "g.png", 0.4, codec=codec)
    assert result.width == 32 and result.height == 32
    assert result.psnr > 20.0
    assert 0.0 < result.ssim <= 1.0
    assert "Tier 2" in result.summary()


@pytest.mark.parametrize("level", [-1, 10])
def test_bad_png_compression_level_rejected_before_decode(level):
    codec = FakeCodec(generate_noise(8))
    with pytest.raises(InvalidCompressionLevel) as excinfo:
        compress_image("in.png", "out.png", 0.5, codec=codec, png_compression_level=level)
    assert isinstance(excinfo.value, CompressionError)
    assert codec.calls == []


def test_png_compression_level_reaches_encoder(tmp_path):
    codec = FakeCodec(generate_noise(32))
    out = tmp_path / "out.png"
    compress_image("in.png", out, 0.9, codec=codec, png_compression_level=3)
    assert codec.written[out][0] == 'truecolor'
    assert codec.written[out][2] == 3


def test_decode_failure_reaches_failed_state(caplog):
    codec = FakeCodec(None)
    tracker = PipelineTracker()
    with caplog.at_level("ERROR", logger="engines.pipeline"):
        with pytest.raises(DecodeFailure):
            compress_image("missing.png", "out.png", 0.5, codec=codec, tracker=tracker)
    assert tracker.state == PipelineState.FAILED
    assert "Failed to load image" in caplog.text


def test_encode_failure_reaches_failed_state(tmp_path):
    codec = FakeCodec(generate_noise(32), fail={'truecolor'})
    tracker = PipelineTracker()
    with pytest.raises(TruecolorEncodeFailure):
        compress_image("in.png", tmp_path / "out.png", 0.5, codec=codec, tracker=tracker)
    assert tracker.history[-1] == PipelineState.FAILED
    assert PipelineState.RECONSTRUCTED in tracker.history


def test_png_path_visits_states_in_order(tmp_path):
    tracker = PipelineTracker()
    compress_image("in.png", tmp_path / "out.png", 1.0,
                   codec=FakeCodec(generate_two_color_pattern(4)), tracker=tracker)
    assert tracker.history == [
        PipelineState.LOADED,
        PipelineState.COLOR_CONVERTED,
        PipelineState.FILTERED,
        PipelineState.QUANTIZED,
        PipelineState.RECONSTRUCTED,
        PipelineState.ENCODED,
    ]
