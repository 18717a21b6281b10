"""
Perceptual image compressor.

Usage:
    python main.py <input> <output> <quality> [-v]
    python main.py --synthetic <name> <output> <quality> [-v]
    python main.py --serve [port] [-v]
"""

import logging
import sys
import warnings

warnings.filterwarnings('ignore', category=RuntimeWarning)

USAGE = """Usage: python main.py <input> <output> <quality> [-v|--verbose]
       python main.py --synthetic <checkerboard|gradient|noise|two_color> <output> <quality> [-v]
       python main.py --serve [port] [-v]
  input:   .png, .jpg, or .jpeg file
  output:  .png or .jpg/.jpeg file
  quality: 0.0 (lowest quality) to 1.0 (highest quality)"""


def setup_logging(verbose: bool = False):
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S"
    )


def run_serve(args) -> int:
    """Start the HTTP service."""
    from webapp.app import run_server

    if len(args) > 1 or (args and not args[0].isdigit()):
        print(USAGE, file=sys.stderr)
        return 1
    run_server(port=int(args[0]) if args else None)
    return 0


def run_cli(argv) -> int:
    """Run the compressor; returns the process exit code."""
    from engines.pipeline import compress_array, compress_image
    from models.compression_params import validate_quality
    from models.errors import CompressionError
    from utils.test_images import generate_demo_image

    args = [a for a in argv if a not in ('-v', '--verbose')]
    setup_logging(len(args) != len(argv))

    if args and args[0] in ('-h', '--help'):
        print(USAGE)
        return 0

    if args and args[0] == '--serve':
        return run_serve(args[1:])

    synthetic = bool(args) and args[0] == '--synthetic'
    if synthetic:
        args = args[1:]
    if len(args) != 3:
        print(USAGE, file=sys.stderr)
        return 1

    source, output, quality_text = args
    try:
        quality = validate_quality(quality_text)
        if synthetic:
            image = generate_demo_image(source)
            if image is None:
                print(f"Error: Unknown synthetic image: {source}", file=sys.stderr)
                return 1
            result = compress_array(image, output, quality)
        else:
            result = compress_image(source, output, quality)
    except CompressionError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"\n{result.summary()}")
    return 0


def main():
    sys.exit(run_cli(sys.argv[1:]))


if __name__ == '__main__':
    main()
