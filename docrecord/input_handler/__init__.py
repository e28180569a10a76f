"""
Input Handler Module.

Loads page bytes for extraction jobs:
    - Ordered, concurrent page loading
    - Media type sniffing with Pillow
"""

from .loader import PageLoader, detect_media_type, guess_media_type, read_local_page, sniff_media_type

__all__ = ['PageLoader', 'detect_media_type', 'guess_media_type', 'read_local_page', 'sniff_media_type']
