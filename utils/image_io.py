"""Image I/O: codec interface with an OpenCV + Pillow implementation."""

import io
import logging
from abc import ABC, abstractmethod
from pathlib import Path

import cv2
import numpy as np
from PIL import Image

from models.errors import (
    DecodeFailure,
    IndexedEncodeFailure,
    JPEGEncodeFailure,
    TruecolorEncodeFailure,
    UnsupportedOutputFormat,
)
from models.palette import Palette

logger = logging.getLogger(__name__)

OUTPUT_FORMATS = {
    '.jpg': 'jpeg',
    '.jpeg': 'jpeg',
    '.png': 'png',
}


def detect_output_format(path) -> str:
    """Return 'jpeg' or 'png' from the output extension (case-insensitive)."""
    suffix = Path(path).suffix.lower()
    if suffix not in OUTPUT_FORMATS:
        raise UnsupportedOutputFormat(
            f"Output filename must end with .png or .jpg/.jpeg, got {str(path)!r}"
        )
    return OUTPUT_FORMATS[suffix]


def _write_bytes(data: bytes, path) -> None:
    Path(path).write_bytes(data)


class ImageCodec(ABC):
    """Decoder and encoders the pipeline depends on."""

    @abstractmethod
    def decode(self, path) -> np.ndarray:
        """Load image as (h, w, 3) RGB uint8. Raises DecodeFailure."""

    @abstractmethod
    def encode_jpeg(self, rgb: np.ndarray, path, quality: int) -> None:
        """Raises JPEGEncodeFailure."""

    @abstractmethod
    def encode_png_truecolor(self, rgb: np.ndarray, path, compression_level: int) -> None:
        """Raises TruecolorEncodeFailure."""

    @abstractmethod
    def encode_png_indexed(self, palette: Palette, path) -> None:
        """Raises IndexedEncodeFailure."""


class OpenCVCodec(ImageCodec):
    """
    OpenCV for decode, JPEG and truecolor PNG; Pillow for palette PNG.

    Every encoder builds the complete file in memory first, so nothing is
    written unless encoding succeeded.
    """

    def decode(self, path) -> np.ndarray:
        try:
            raw = np.fromfile(str(path), dtype=np.uint8)
        except OSError as e:
            raise DecodeFailure(f"Could not read image from {path}: {e}") from e
        img = cv2.imdecode(raw, cv2.IMREAD_COLOR) if raw.size else None
        if img is None:
            raise DecodeFailure(f"Could not load image from {path}")
        return cv2.cvtColor(img, cv2.COLOR_BGR2RGB)

    def encode_jpeg(self, rgb: np.ndarray, path, quality: int) -> None:
        bgr = cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR)
        ok, buf = cv2.imencode('.jpg', bgr, [cv2.IMWRITE_JPEG_QUALITY, int(quality)])
        if not ok:
            raise JPEGEncodeFailure(f"JPEG encoding failed for {path}")
        try:
            _write_bytes(buf.tobytes(), path)
        except OSError as e:
            raise JPEGEncodeFailure(f"Could not write {path}: {e}") from e
        logger.debug(f"Wrote JPEG ({len(buf)} bytes, quality {quality})")

    def encode_png_truecolor(self, rgb: np.ndarray, path, compression_level: int) -> None:
        bgr = cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR)
        ok, buf = cv2.imencode('.png', bgr, [cv2.IMWRITE_PNG_COMPRESSION, int(compression_level)])
        if not ok:
            raise TruecolorEncodeFailure(f"PNG encoding failed for {path}")
        try:
            _write_bytes(buf.tobytes(), path)
        except OSError as e:
            raise TruecolorEncodeFailure(f"Could not write {path}: {e}") from e
        logger.debug(f"Wrote truecolor PNG ({len(buf)} bytes)")

    def encode_png_indexed(self, palette: Palette, path) -> None:
        try:
            img = Image.frombytes('P', (palette.width, palette.height), palette.indices.tobytes())
            img.putpalette(palette.colors[:, :3].ravel().tolist())
            buffer = io.BytesIO()
            img.save(buffer, format='PNG', optimize=True)
        except (ValueError, OSError) as e:
            raise IndexedEncodeFailure(f"Indexed PNG encoding failed: {e}") from e
        try:
            _write_bytes(buffer.getvalue(), path)
        except OSError as e:
            raise IndexedEncodeFailure(f"Could not write {path}: {e}") from e
        logger.debug(f"Wrote indexed PNG ({buffer.tell()} bytes, {len(palette)} colors)")


def load_image(path) -> np.ndarray:
    """Load image as RGB uint8."""
    return OpenCVCodec().decode(path)


def save_image(image: np.ndarray, path) -> None:
    """Save RGB image as truecolor PNG or JPEG depending on extension."""
    codec = OpenCVCodec()
    if detect_output_format(path) == 'jpeg':
        codec.encode_jpeg(image, path, 95)
    else:
        codec.encode_png_truecolor(image, path, 9)
