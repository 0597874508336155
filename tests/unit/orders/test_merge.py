"""Unit tests for the PDF document merger (pypdf + Pillow + reportlab)."""

from __future__ import annotations

from io import BytesIO

import pytest
from PIL import Image
from pypdf import PdfReader

from modules.orders.dtos import UploadFile
from modules.orders.exceptions import DocumentMergeError
from modules.orders.merge import PdfDocumentMerger

pytestmark = pytest.mark.unit


@pytest.fixture()
def merger():
    return PdfDocumentMerger()


def page_count(content: bytes) -> int:
    return len(PdfReader(BytesIO(content)).pages)


class TestMerge:
    def test_single_file_returned_unchanged(self, merger, png_bytes):
        upload = UploadFile(filename="foto.png", content=png_bytes, content_type="image/png")

        assert merger.merge([upload]) is upload

    def test_pdf_and_images_become_one_pdf(self, merger, pdf_bytes, png_bytes):
        files = [
            UploadFile(filename="voucher.pdf", content=pdf_bytes, content_type="application/pdf"),
            UploadFile(filename="foto1.png", content=png_bytes, content_type="image/png"),
            UploadFile(filename="foto2.png", content=png_bytes, content_type="image/png"),
        ]

        merged = merger.merge(files)

        assert merged.filename == "operacion.pdf"
        assert merged.content_type == "application/pdf"
        assert merged.is_pdf
        assert page_count(merged.content) == 3

    def test_unreadable_file_aborts(self, merger, pdf_bytes):
        files = [
            UploadFile(filename="voucher.pdf", content=pdf_bytes),
            UploadFile(filename="roto.jpg", content=b"not an image", content_type="image/jpeg"),
        ]

        with pytest.raises(DocumentMergeError, match="roto.jpg"):
            merger.merge(files)

    def test_no_files(self, merger):
        with pytest.raises(DocumentMergeError):
            merger.merge([])


class TestImages:
    def test_downscale_caps_long_edge(self, merger, png_bytes):
        jpeg, width, height = merger.downscale(png_bytes)

        assert (width, height) == (1400, 700)
        with Image.open(BytesIO(jpeg)) as image:
            assert image.format == "JPEG"

    def test_small_images_keep_their_size(self, merger):
        buffer = BytesIO()
        Image.new("RGB", (200, 100)).save(buffer, format="PNG")

        _, width, height = merger.downscale(buffer.getvalue())

        assert (width, height) == (200, 100)

    def test_image_to_pdf_is_one_a4_page(self, merger, png_bytes):
        reader = PdfReader(BytesIO(merger.image_to_pdf(png_bytes)))

        assert len(reader.pages) == 1
        box = reader.pages[0].mediabox
        assert round(float(box.width)) == 595
        assert round(float(box.height)) == 842
