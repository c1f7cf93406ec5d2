"""
Test package for auto_sub.

Unit tests live in tests/unit, tests that wire several modules together
(progress monitor threads, the muxing engine, the CLI) in tests/integration.
ffmpeg itself is never required: subprocess calls are mocked.
"""

# Test configuration
TEST_CONFIG = {
    'timeout': 30,  # Default timeout for tests
    'temp_cleanup': True,  # Whether to clean up temp files
    'mock_subprocess': True,  # Whether to mock subprocess calls by default
}

__version__ = "1.0.0"
