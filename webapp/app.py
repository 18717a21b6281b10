"""
Flask service wrapping the compression pipeline.

Routes:
    POST /compress             multipart upload ('image', 'quality', 'format')
    GET  /download/<filename>  fetch a compressed file until it expires
    GET  /health               liveness and environment info
"""

import logging
import os
import platform
import sys
import threading
import time
import uuid
from pathlib import Path
from typing import Callable, Dict, Optional

from flask import Flask, jsonify, request, send_from_directory
from werkzeug.exceptions import NotFound, RequestEntityTooLarge

from engines.pipeline import compress_image
from models.compression_params import validate_quality
from models.errors import CompressionError, InvalidQuality
from utils.image_io import ImageCodec

logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 50 * 1024 * 1024
OUTPUT_TTL_SECONDS = 10 * 60
DEFAULT_QUALITY = 0.8
DEFAULT_FORMAT = 'jpg'
DEFAULT_PORT = 3000

ALLOWED_UPLOAD_SUFFIXES = {'.png', '.jpg', '.jpeg'}
ALLOWED_FORMATS = {'jpg', 'jpeg', 'png'}


class OutputStore:
    """Tracks compressed files and deletes them once they expire."""

    def __init__(self, directory: Path, ttl: float, clock: Callable[[], float]):
        self.directory = directory
        self.ttl = ttl
        self.clock = clock
        self._expiry: Dict[str, float] = {}
        self._lock = threading.Lock()

    def register(self, path: Path) -> None:
        with self._lock:
            self._expiry[path.name] = self.clock() + self.ttl

    def purge_expired(self) -> None:
        now = self.clock()
        with self._lock:
            expired = [name for name, deadline in self._expiry.items() if deadline <= now]
            for name in expired:
                del self._expiry[name]
        for name in expired:
            try:
                (self.directory / name).unlink(missing_ok=True)
                logger.info(f"Cleaned up: {name}")
            except OSError as e:
                logger.error(f"Error cleaning up output file {name}: {e}")


def _unique_name(prefix: str, suffix: str) -> str:
    return f"{prefix}{int(time.time() * 1000)}-{uuid.uuid4().hex[:12]}{suffix}"


def _reduction(input_bytes: int, output_bytes: int) -> str:
    if input_bytes == 0:
        return "0.0"
    return f"{(input_bytes - output_bytes) / input_bytes * 100:.1f}"


def create_app(
    upload_dir=None,
    output_dir=None,
    codec: Optional[ImageCodec] = None,
    output_ttl: float = OUTPUT_TTL_SECONDS,
    clock: Callable[[], float] = time.time
) -> Flask:
    """Build the Flask app. Directories default to ./uploads and ./outputs."""
    upload_dir = Path(upload_dir or Path.cwd() / 'uploads')
    output_dir = Path(output_dir or Path.cwd() / 'outputs')
    upload_dir.mkdir(parents=True, exist_ok=True)
    output_dir.mkdir(parents=True, exist_ok=True)

    app = Flask(__name__)
    app.config['MAX_CONTENT_LENGTH'] = MAX_UPLOAD_BYTES
    store = OutputStore(output_dir, output_ttl, clock)
    app.extensions['output_store'] = store
    started = clock()

    @app.before_request
    def _purge():
        store.purge_expired()

    @app.errorhandler(RequestEntityTooLarge)
    def _too_large(e):
        return jsonify(error=f"File too large (max {MAX_UPLOAD_BYTES // (1024 * 1024)} MB)"), 413

    @app.post('/compress')
    def compress():
        upload = request.files.get('image')
        if upload is None or not upload.filename:
            return jsonify(error='No file uploaded'), 400

        suffix = Path(upload.filename).suffix.lower()
        if suffix not in ALLOWED_UPLOAD_SUFFIXES:
            return jsonify(error='Only PNG, JPG, and JPEG images are allowed!'), 400

        raw_quality = request.form.get('quality', '')
        try:
            quality = validate_quality(raw_quality) if raw_quality.strip() else DEFAULT_QUALITY
        except InvalidQuality:
            return jsonify(error='Quality must be between 0 and 1'), 400

        fmt = (request.form.get('format') or DEFAULT_FORMAT).lower()
        if fmt not in ALLOWED_FORMATS:
            return jsonify(error='Format must be jpg or png'), 400

        input_path = upload_dir / _unique_name('', suffix)
        output_path = output_dir / _unique_name('compressed-', f".{fmt}")
        upload.save(str(input_path))
        logger.info(f"Compression request: {upload.filename} -> {output_path.name} (quality {quality})")

        try:
            result = compress_image(input_path, output_path, quality, codec=codec)
        except CompressionError as e:
            logger.error(f"Compression failed: {e}")
            return jsonify(success=False, error=str(e), log=''), 500
        finally:
            try:
                input_path.unlink(missing_ok=True)
            except OSError as e:
                logger.error(f"Error deleting input file: {e}")

        if not output_path.is_file():
            return jsonify(
                success=False,
                error='Compression completed but output file not found',
                log=result.summary()
            ), 500

        store.register(output_path)
        output_bytes = output_path.stat().st_size
        logger.info(
            f"Compression successful: {result.input_bytes} -> {output_bytes} bytes "
            f"({_reduction(result.input_bytes, output_bytes)}%)"
        )
        return jsonify(
            success=True,
            filename=output_path.name,
            downloadUrl=f"/download/{output_path.name}",
            originalSize=result.input_bytes,
            compressedSize=output_bytes,
            reduction=_reduction(result.input_bytes, output_bytes),
            log=result.summary(),
        )

    @app.get('/download/<path:filename>')
    def download(filename):
        try:
            return send_from_directory(output_dir, filename, as_attachment=True)
        except NotFound:
            return jsonify(error='File not found or expired'), 404

    @app.get('/health')
    def health():
        return jsonify(
            status='ok',
            platform=sys.platform,
            pythonVersion=platform.python_version(),
            outputDir=str(output_dir),
            uptime=clock() - started,
        )

    return app


def run_server(host: str = '0.0.0.0', port: Optional[int] = None) -> None:
    """Serve with Flask's built-in server; port defaults to $PORT or 3000."""
    port = port or int(os.environ.get('PORT', DEFAULT_PORT))
    app = create_app()
    logger.info(f"Image compressor server running on http://localhost:{port}")
    app.run(host=host, port=port)
