"""Data models for compression parameters and results."""

from .compression_params import CompressionParams, validate_quality
from .compression_result import CompressionResult
from .errors import (
    CompressionError,
    DecodeFailure,
    EncodeFailure,
    IndexedEncodeFailure,
    InvalidCompressionLevel,
    InvalidQuality,
    JPEGEncodeFailure,
    TruecolorEncodeFailure,
    UnsupportedOutputFormat,
)
from .palette import Palette
from .tier_params import TierParams

__all__ = [
    'CompressionParams',
    'validate_quality',
    'CompressionResult',
    'CompressionError',
    'DecodeFailure',
    'EncodeFailure',
    'IndexedEncodeFailure',
    'InvalidCompressionLevel',
    'InvalidQuality',
    'JPEGEncodeFailure',
    'TruecolorEncodeFailure',
    'UnsupportedOutputFormat',
    'Palette',
    'TierParams',
]
