"""Document attachment registry.

Presents the five document slots of an order uniformly, builds the
canonical PDF link, and validates upload submissions before anything is
sent to the Order API.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from django.conf import settings

from modules.orders.constants import MAX_OPERATION_FILES, ORDER_RESOURCES
from modules.orders.dtos import UploadFile
from modules.orders.exceptions import UploadValidationError

# (key, label) in display order; "pdf" is derived, the rest are order fields.
DOCUMENT_SLOTS: tuple[tuple[str, str], ...] = (
    ("pdf", "PDF"),
    ("url", "Operación"),
    ("url_cotizacion", "Cotización"),
    ("url_factura", "Factura"),
    ("url_comprobante_retencion", "Comp. Retención"),
)


@dataclass(frozen=True)
class DocumentLink:
    key: str
    label: str
    url: Optional[str]

    @property
    def available(self) -> bool:
        return bool(self.url)


def pdf_url(tipo: str, order_id: Optional[int], base_url: Optional[str] = None) -> Optional[str]:
    """Canonical PDF view link of an order (``None`` while the id is unknown)."""
    if order_id is None:
        return None
    base = (base_url or settings.ORDERS_API_BASE_URL).rstrip("/")
    return f"{base}/{ORDER_RESOURCES[tipo]}/{order_id}/pdf"


def document_links(order: Any, base_url: Optional[str] = None) -> List[DocumentLink]:
    links = []
    for key, label in DOCUMENT_SLOTS:
        if key == "pdf":
            url = pdf_url(order.tipo, getattr(order, "id", None), base_url)
        else:
            url = getattr(order, key, None) or None
        links.append(DocumentLink(key=key, label=label, url=url))
    return links


# ----------------------------------------------------------------------
# Upload validation
# ----------------------------------------------------------------------


def validate_retention_receipt(file: Optional[UploadFile], nro_serie: Optional[str]) -> str:
    """Check a retention receipt submission; return the cleaned ``nro_serie``.

    Raises:
        UploadValidationError: no file selected or empty ``nro_serie``.
    """
    if file is None:
        raise UploadValidationError("No se ha seleccionado un archivo")
    cleaned = (nro_serie or "").strip()
    if not cleaned:
        raise UploadValidationError("Debe ingresar el número de serie")
    return cleaned


def validate_operation_files(files: Optional[Sequence[UploadFile]]) -> List[UploadFile]:
    """Check the operation evidence selection (1 to ``MAX_OPERATION_FILES``).

    Raises:
        UploadValidationError: no file or too many files selected.
    """
    selected = list(files or [])
    if not selected:
        raise UploadValidationError("No se ha seleccionado un archivo")
    if len(selected) > MAX_OPERATION_FILES:
        raise UploadValidationError(
            f"Solo se permiten hasta {MAX_OPERATION_FILES} archivos"
        )
    return selected
