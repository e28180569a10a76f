"""
Page Loader Module.

Loads the binary content of a document's pages. Pages are read
concurrently but always returned in the order of the job's page paths.
Reading is delegated to a reader callable so blob storage can stand in
for the local filesystem.

Usage:
    from docrecord.input_handler import PageLoader

    loader = PageLoader()
    pages = loader.load(["scans/p1.jpg", "scans/p2.jpg"])
"""

import io
import mimetypes
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from PIL import Image, UnidentifiedImageError

from config import get_config
from docrecord.utils.exceptions import NotFoundError, ValidationError
from docrecord.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_MEDIA_TYPE = "image/png"
PDF_MEDIA_TYPE = "application/pdf"

PageReader = Callable[[str], bytes]


def read_local_page(path: str) -> bytes:
    """
    Read one page from the local filesystem.

    Raises:
        NotFoundError: If the path does not exist or is not a file.
    """
    page_path = Path(path)
    if not page_path.is_file():
        raise NotFoundError("page", str(path))
    return page_path.read_bytes()


def sniff_media_type(data: bytes) -> Optional[str]:
    """
    Sniff the media type of page bytes.

    Images are identified with Pillow; PDFs by their magic header.

    Returns:
        The media type, or None when the bytes are neither an image
        nor a PDF (plain text pages, for instance).
    """
    if data[:5] == b"%PDF-":
        return PDF_MEDIA_TYPE
    try:
        with Image.open(io.BytesIO(data)) as image:
            image_format = image.format
    except (UnidentifiedImageError, OSError, ValueError):
        return None
    return Image.MIME.get(image_format or "", DEFAULT_MEDIA_TYPE)


def detect_media_type(data: bytes) -> str:
    """
    Media type to declare when sending page bytes to a model.

    Anything unrecognized is reported as PNG.

    Example:
        >>> detect_media_type(jpeg_bytes)
        "image/jpeg"
    """
    return sniff_media_type(data) or DEFAULT_MEDIA_TYPE


def guess_media_type(filename: str) -> str:
    """Media type from a filename's extension, for files not yet read."""
    media_type, _ = mimetypes.guess_type(filename)
    return media_type or "application/octet-stream"


class PageLoader:
    """
    Loads page bytes for a job, concurrently and in order.

    Attributes:
        reader: Callable returning the bytes for one page path
        max_workers: Thread pool size

    Example:
        >>> loader = PageLoader(reader=blob_client.download)
        >>> pages = loader.load(job.page_paths)
    """

    def __init__(self, reader: Optional[PageReader] = None, max_workers: Optional[int] = None) -> None:
        self.reader = reader or read_local_page
        self.max_workers = max_workers or get_config("input.max_workers", 4)

    def load(self, page_paths: Sequence[str]) -> List[bytes]:
        """
        Load every page.

        Args:
            page_paths: Ordered page locations.

        Returns:
            Page bytes in the same order as page_paths.

        Raises:
            ValidationError: If no page paths are given.
            NotFoundError: If a page cannot be found. The first failure
                in page order is raised.
        """
        if not page_paths:
            raise ValidationError("At least one page path is required")

        workers = max(1, min(self.max_workers, len(page_paths)))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            pages = list(pool.map(self.reader, page_paths))

        logger.debug(f"Loaded {len(pages)} page(s), {sum(len(p) for p in pages)} bytes")
        return pages
