"""Utility functions."""

from .logging_setup import setup_logging
from .frame_dump import format_frame

__all__ = ["setup_logging", "format_frame"]
