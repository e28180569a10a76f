"""
Utility Module for the Document Record Extraction Engine.

Common utilities used across all other modules:
    - Logging configuration
    - Exception hierarchy
    - String and filesystem helpers
"""

from .logger import setup_logger, setup_logger_from_config, get_logger
from .helpers import (
    ensure_directory,
    get_file_extension,
    humanize_slug,
    sanitize_asset_name,
    slugify,
    strip_extension,
)

__all__ = [
    'setup_logger',
    'setup_logger_from_config',
    'get_logger',
    'ensure_directory',
    'get_file_extension',
    'humanize_slug',
    'sanitize_asset_name',
    'slugify',
    'strip_extension',
]
