"""Exceptions raised by the compression pipeline."""


class CompressionError(Exception):
    """Base class for every failure surfaced by the pipeline."""


class InvalidQuality(CompressionError, ValueError):
    """Quality is not a finite number in [0, 1]."""


class InvalidCompressionLevel(CompressionError, ValueError):
    """PNG compression level is not an integer in 0-9."""


class DecodeFailure(CompressionError):
    """Input file could not be read or decoded."""


class UnsupportedOutputFormat(CompressionError):
    """Output extension is not .png, .jpg or .jpeg."""


class EncodeFailure(CompressionError):
    """An encoder could not produce the output file."""


class IndexedEncodeFailure(EncodeFailure):
    """Palette PNG encoding failed. Recovered by truecolor fallback."""


class TruecolorEncodeFailure(EncodeFailure):
    pass


class JPEGEncodeFailure(EncodeFailure):
    pass
