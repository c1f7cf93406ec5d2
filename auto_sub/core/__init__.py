"""Core muxing modules for auto_sub."""

from .main import main

__all__ = ["main"]
