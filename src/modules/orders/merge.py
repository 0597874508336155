"""Merge several selected files into one PDF before upload.

The transition service depends on ``IDocumentMerger`` only, so the merge
can move server-side without touching it.  ``PdfDocumentMerger`` copies
PDF pages as they are and places each image, downscaled and re-encoded as
JPEG, centred on its own A4 page.
"""

from __future__ import annotations

from io import BytesIO
from typing import Protocol, Sequence

import structlog
from PIL import Image, ImageOps
from pypdf import PdfReader, PdfWriter
from pypdf.errors import PyPdfError
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from modules.orders.constants import IMAGE_JPEG_QUALITY, MAX_IMAGE_EDGE_PX
from modules.orders.dtos import UploadFile
from modules.orders.exceptions import DocumentMergeError

logger = structlog.get_logger(__name__)

MERGED_FILENAME = "operacion.pdf"
PAGE_MARGIN_PT = 20


class IDocumentMerger(Protocol):
    """Turns one or more files into a single uploadable file."""

    def merge(self, files: Sequence[UploadFile]) -> UploadFile: ...


class PdfDocumentMerger:
    def __init__(
        self,
        max_edge: int = MAX_IMAGE_EDGE_PX,
        jpeg_quality: int = IMAGE_JPEG_QUALITY,
        filename: str = MERGED_FILENAME,
    ) -> None:
        self.max_edge = max_edge
        self.jpeg_quality = jpeg_quality
        self.filename = filename

    def merge(self, files: Sequence[UploadFile]) -> UploadFile:
        """Return a single PDF with every page/image of *files* in order.

        A single file is returned unchanged.

        Raises:
            DocumentMergeError: no files, or a file is neither a readable
                PDF nor a readable image.
        """
        if not files:
            raise DocumentMergeError("No hay archivos para combinar")
        if len(files) == 1:
            return files[0]

        writer = PdfWriter()
        for upload in files:
            try:
                if upload.is_pdf:
                    self._append_pdf(writer, upload.content)
                else:
                    self._append_pdf(writer, self.image_to_pdf(upload.content))
            except (OSError, ValueError, PyPdfError) as exc:
                logger.warning(
                    "documents.merge_failed", filename=upload.filename, error=str(exc)
                )
                raise DocumentMergeError(
                    f"No se pudo procesar el archivo {upload.filename}"
                ) from exc

        output = BytesIO()
        writer.write(output)
        logger.info(
            "documents.merged", files=len(files), pages=len(writer.pages)
        )
        return UploadFile(
            filename=self.filename,
            content=output.getvalue(),
            content_type="application/pdf",
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _append_pdf(writer: PdfWriter, content: bytes) -> None:
        reader = PdfReader(BytesIO(content))
        for page in reader.pages:
            writer.add_page(page)

    def downscale(self, content: bytes) -> tuple[bytes, int, int]:
        """JPEG bytes of the image with its long edge at most ``max_edge``."""
        with Image.open(BytesIO(content)) as source:
            image = ImageOps.exif_transpose(source).convert("RGB")
        image.thumbnail((self.max_edge, self.max_edge))
        buffer = BytesIO()
        image.save(buffer, format="JPEG", quality=self.jpeg_quality)
        return buffer.getvalue(), image.width, image.height

    def image_to_pdf(self, content: bytes) -> bytes:
        """One A4 page with the downscaled image centred inside the margins."""
        jpeg, width, height = self.downscale(content)
        page_width, page_height = A4
        scale = min(
            (page_width - 2 * PAGE_MARGIN_PT) / width,
            (page_height - 2 * PAGE_MARGIN_PT) / height,
            1.0,
        )
        draw_width, draw_height = width * scale, height * scale

        buffer = BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=A4)
        pdf.drawImage(
            ImageReader(BytesIO(jpeg)),
            (page_width - draw_width) / 2,
            (page_height - draw_height) / 2,
            width=draw_width,
            height=draw_height,
        )
        pdf.showPage()
        pdf.save()
        return buffer.getvalue()
