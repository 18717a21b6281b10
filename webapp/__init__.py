"""HTTP front end for the compressor."""

from .app import create_app, run_server

__all__ = ['create_app', 'run_server']
