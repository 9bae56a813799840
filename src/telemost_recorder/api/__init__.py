"""
API module - HTTP interface for the recorder.
"""

from telemost_recorder.api.server import create_app, run_server

__all__ = ["create_app", "run_server"]
