"""
Helper Utilities Module.

Generic string and filesystem helpers shared across the engine.

Functions:
    - ensure_directory: Create directory if it doesn't exist
    - get_file_extension: Extract file extension safely
    - strip_extension: Filename without its last extension
    - slugify: Normalize text into a category slug
    - humanize_slug: Display name for a slug
    - sanitize_asset_name: Make a title safe for use as a filename
"""

import re
from pathlib import Path
from typing import Optional, Union

SLUG_MAX_LENGTH = 50

_SLUG_INVALID = re.compile(r'[^a-z0-9]+')
_UNSAFE_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f]')


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        path: Directory path to ensure exists.

    Returns:
        Path object pointing to the directory.

    Example:
        >>> ensure_directory("data")
        PosixPath('data')
    """
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path


def get_file_extension(filename: str) -> str:
    """
    Return the extension of a filename including the dot, case preserved.

    A leading dot (".env") is not treated as an extension.

    Example:
        >>> get_file_extension("Receipt.JPG")
        ".JPG"
        >>> get_file_extension("noextension")
        ""
    """
    index = filename.rfind('.')
    if index <= 0:
        return ""
    return filename[index:]


def strip_extension(filename: str) -> str:
    """
    Return the filename without its last extension.

    Example:
        >>> strip_extension("scan.2026.png")
        "scan.2026"
    """
    return re.sub(r'\.[^.]+$', '', filename)


def slugify(text: Optional[str], max_length: int = SLUG_MAX_LENGTH) -> str:
    """
    Normalize text into a category slug.

    Lowercases, replaces every run of non-alphanumerics with a hyphen,
    trims leading/trailing hyphens and caps the length.

    Example:
        >>> slugify("  Home & Garden! ")
        "home-garden"
    """
    if not text:
        return ""
    slug = _SLUG_INVALID.sub('-', text.strip().lower()).strip('-')
    return slug[:max_length].strip('-')


def humanize_slug(slug: str) -> str:
    """
    Derive a display name from a slug.

    Example:
        >>> humanize_slug("home-garden")
        "Home Garden"
    """
    return re.sub(r'\b\w', lambda m: m.group(0).upper(), slug.replace('-', ' '))


def sanitize_asset_name(name: str, max_length: int = 180) -> str:
    """
    Make a title safe for use as a filename.

    Strips filesystem-unsafe characters, collapses whitespace, drops
    trailing dots and caps the length.

    Example:
        >>> sanitize_asset_name('Shop: "Best"  Buy...')
        "Shop Best Buy"
    """
    sanitized = _UNSAFE_FILENAME_CHARS.sub('', name.strip())
    sanitized = re.sub(r'\s+', ' ', sanitized)
    sanitized = re.sub(r'\.+$', '', sanitized)
    return sanitized[:max_length].strip()
