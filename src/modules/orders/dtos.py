"""Order DTOs.

Framework-agnostic data transfer objects using Pydantic v2.  ``OrderDTO``
is the single record shape for purchase and service orders, built from
Order API payloads and from the cached list.  DTOs are immutable
(``frozen=True``); local patches produce new instances via ``with_changes``.

- ``OrderDTO``: one order with its approvals, payment disposition and
  document links.
- ``UploadFile``: an in-memory file selected for upload.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from modules.core.formatting import (
    format_amount,
    format_calendar_date,
    parse_calendar_date,
    to_decimal,
)
from modules.orders.constants import (
    APPROVAL_FIELDS,
    CURRENCY_SYMBOLS,
    Approval,
    Moneda,
    OrderEstado,
    OrderType,
    ProcedePago,
    TieneAnticipo,
)


class OrderDTO(BaseModel):
    """Immutable purchase or service order as served by the Order API.

    The server is authoritative for every field; amounts are displayed,
    never recomputed.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: int = Field(
        validation_alias=AliasChoices("id", "id_orden_compra", "id_orden_servicio")
    )
    tipo: OrderType
    numero_orden: str = ""
    fecha_orden: Optional[date] = None
    nombre_proveedor: str = ""
    ruc_proveedor: str = ""
    moneda: Moneda = Moneda.SOLES
    subtotal: Decimal = Decimal("0")
    igv: Decimal = Decimal("0")
    total: Decimal = Decimal("0")
    estado: OrderEstado = OrderEstado.PENDIENTE

    auto_administrador: Approval = Approval.NOT_APPLICABLE
    jefe_proyecto: Approval = Approval.NOT_APPLICABLE
    auto_contabilidad: Approval = Approval.NOT_APPLICABLE
    procede_pago: Optional[ProcedePago] = None

    retencion: Optional[str] = None
    valor_retencion: Decimal = Decimal("0")
    detraccion: Optional[str] = None
    valor_detraccion: Decimal = Decimal("0")
    tiene_anticipo: TieneAnticipo = TieneAnticipo.NO

    url: Optional[str] = None
    url_cotizacion: Optional[str] = None
    url_factura: Optional[str] = None
    url_comprobante_retencion: Optional[str] = None
    nro_serie: Optional[str] = None

    deleted_at: Optional[datetime] = None

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @field_validator("fecha_orden", mode="before")
    @classmethod
    def _calendar_date(cls, v: Any) -> Optional[date]:
        return parse_calendar_date(v)

    @field_validator(
        "subtotal", "igv", "total", "valor_retencion", "valor_detraccion",
        mode="before",
    )
    @classmethod
    def _amount(cls, v: Any) -> Decimal:
        return to_decimal(v)

    @field_validator(*APPROVAL_FIELDS, mode="before")
    @classmethod
    def _approval(cls, v: Any) -> Approval:
        return Approval.coerce(v)

    @field_validator("procede_pago", mode="before")
    @classmethod
    def _blank_disposition(cls, v: Any) -> Any:
        return v or None

    @field_validator("tiene_anticipo", mode="before")
    @classmethod
    def _anticipo(cls, v: Any) -> Any:
        if v in (1, True, "1"):
            return TieneAnticipo.SI
        if v in (None, "", 0, False, "0"):
            return TieneAnticipo.NO
        return v

    @field_validator(
        "numero_orden", "nombre_proveedor", "ruc_proveedor", mode="before"
    )
    @classmethod
    def _text(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator(
        "retencion", "detraccion", "url", "url_cotizacion", "url_factura",
        "url_comprobante_retencion", "nro_serie",
        mode="before",
    )
    @classmethod
    def _blank_to_none(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        text = str(v).strip()
        return text or None

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    @classmethod
    def from_api(cls, payload: dict[str, Any], tipo: OrderType | str) -> OrderDTO:
        """Build a DTO from an Order API payload of the given family."""
        return cls.model_validate({**payload, "tipo": tipo})

    def with_changes(self, **changes: Any) -> OrderDTO:
        """Return a copy with *changes* applied (validated like API input)."""
        data = self.model_dump()
        data.update(changes)
        return OrderDTO.model_validate(data)

    def to_cache(self) -> dict[str, Any]:
        return self.model_dump(mode="json")

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def approvals(self) -> tuple[Approval, ...]:
        return tuple(getattr(self, name) for name in APPROVAL_FIELDS)

    @property
    def approved_count(self) -> int:
        return sum(1 for approval in self.approvals if approval.is_approved)

    @property
    def neto_a_pagar(self) -> Decimal:
        return self.total - self.valor_retencion - self.valor_detraccion

    @property
    def fecha_display(self) -> str:
        return format_calendar_date(self.fecha_orden)

    @property
    def total_display(self) -> str:
        return format_amount(self.total, CURRENCY_SYMBOLS.get(self.moneda, ""))

    def __str__(self) -> str:
        return f"{self.numero_orden} ({self.tipo}, {self.estado})"


class UploadFile(BaseModel):
    """Immutable in-memory file selected for upload."""

    model_config = ConfigDict(frozen=True)

    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

    @field_validator("content")
    @classmethod
    def content_must_not_be_empty(cls, v: bytes) -> bytes:
        if not v:
            raise ValueError("File content must not be empty.")
        return v

    @property
    def is_pdf(self) -> bool:
        return self.content.startswith(b"%PDF") or self.content_type == "application/pdf"

    def as_multipart(self) -> tuple[str, bytes, str]:
        return (self.filename, self.content, self.content_type)
