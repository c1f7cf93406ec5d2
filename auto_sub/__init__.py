"""
Auto Sub - Batch soft-subbing of video files with ffmpeg.
"""

__version__ = "1.0.0"

# Import configuration utilities
from .config import get_config, load_env_file

__all__ = [
    "get_config",
    "load_env_file",
]
