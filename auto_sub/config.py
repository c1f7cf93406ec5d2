"""Configuration management for auto-sub."""

import os
import shutil
from pathlib import Path
from typing import Optional, Dict, Any


def load_env_file(env_path: Optional[Path] = None) -> Dict[str, str]:
    """Load environment variables from .env file."""
    if env_path is None:
        # Look for .env in current directory, then in package directory
        candidates = [
            Path.cwd() / ".env",
            Path(__file__).parent.parent / ".env",
        ]

        for candidate in candidates:
            if candidate.exists():
                env_path = candidate
                break

    env_vars = {}

    if env_path and env_path.exists():
        with open(env_path, 'r', encoding='utf-8') as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith('#'):
                    if '=' in line:
                        key, value = line.split('=', 1)
                        env_vars[key.strip()] = value.strip()

    return env_vars


def get_config(env_path: Optional[Path] = None) -> Dict[str, Any]:
    """Get configuration from environment variables and .env file."""
    env_vars = load_env_file(env_path)

    config = {
        'ffmpeg_path': env_vars.get('ffmpeg_path', os.getenv('FFMPEG_PATH')) or shutil.which('ffmpeg'),
        'ffprobe_path': env_vars.get('ffprobe_path', os.getenv('FFPROBE_PATH')) or shutil.which('ffprobe'),
        'subtitle_language': env_vars.get('subtitle_language', os.getenv('SUBTITLE_LANGUAGE', 'eng')),
        'output_dir_name': env_vars.get('output_dir_name', os.getenv('OUTPUT_DIR_NAME', 'result')),
        'refresh_interval': float(env_vars.get('refresh_interval', os.getenv('REFRESH_INTERVAL', '1.0'))),
        'debug': env_vars.get('debug', os.getenv('DEBUG', 'false')).lower() in ('true', '1', 'yes'),
        'log_level': env_vars.get('log_level', os.getenv('LOG_LEVEL', 'INFO')).upper(),
    }

    return config
