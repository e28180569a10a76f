"""Tests for page loading."""

import time

import pytest

from docrecord.input_handler import PageLoader, read_local_page, sniff_media_type
from docrecord.utils.exceptions import NotFoundError, ValidationError


def slow_reader(path):
    # Earlier pages finish last
    time.sleep(0.05 * (3 - int(path)))
    return f"page-{path}".encode()


def test_pages_keep_their_order():
    pages = PageLoader(reader=slow_reader, max_workers=3).load(["0", "1", "2"])
    assert pages == [b"page-0", b"page-1", b"page-2"]


def test_empty_page_list():
    with pytest.raises(ValidationError):
        PageLoader().load([])


def test_local_pages(tmp_path):
    page = tmp_path / "p1.png"
    page.write_bytes(b"\x89PNG")
    assert PageLoader().load([str(page)]) == [b"\x89PNG"]

    with pytest.raises(NotFoundError):
        read_local_page(str(tmp_path / "missing.png"))


def test_sniff_media_type(png_bytes, jpeg_bytes):
    assert sniff_media_type(png_bytes) == "image/png"
    assert sniff_media_type(jpeg_bytes) == "image/jpeg"
    assert sniff_media_type(b"%PDF-1.7 ...") == "application/pdf"
    assert sniff_media_type("Total $16.58".encode("utf-8")) is None
