"""Unit tests for Order DTOs (Pydantic v2)."""

from __future__ import annotations

from decimal import Decimal

import pytest
from pydantic import ValidationError

from modules.orders.constants import Approval, Moneda, OrderType, ProcedePago, TieneAnticipo
from modules.orders.dtos import OrderDTO, UploadFile

pytestmark = pytest.mark.unit


class TestOrderDTO:
    def test_purchase_id_alias(self, payload_factory):
        order = OrderDTO.from_api(payload_factory(42), OrderType.COMPRA)

        assert order.id == 42
        assert order.tipo == OrderType.COMPRA

    def test_service_id_alias(self, payload_factory):
        payload = payload_factory(9, OrderType.SERVICIO)

        order = OrderDTO.from_api(payload, OrderType.SERVICIO)

        assert order.id == 9
        assert order.tipo == OrderType.SERVICIO

    def test_approval_flags_map_to_tagged_enum(self, order_factory):
        order = order_factory(auto_administrador=True, jefe_proyecto=False)

        assert order.auto_administrador is Approval.APPROVED
        assert order.jefe_proyecto is Approval.PENDING
        assert order.auto_contabilidad is Approval.NOT_APPLICABLE
        assert order.approved_count == 1

    def test_missing_approval_key_is_not_applicable(self, payload_factory):
        payload = payload_factory()
        del payload["jefe_proyecto"]

        order = OrderDTO.from_api(payload, OrderType.COMPRA)

        assert order.jefe_proyecto is Approval.NOT_APPLICABLE

    def test_empty_procede_pago_is_none(self, order_factory):
        assert order_factory(procede_pago="").procede_pago is None
        assert order_factory(procede_pago="PAGAR").procede_pago == ProcedePago.PAGAR

    def test_tiene_anticipo_accepts_numeric_flags(self, order_factory):
        assert order_factory(tiene_anticipo=1).tiene_anticipo == TieneAnticipo.SI
        assert order_factory(tiene_anticipo=0).tiene_anticipo == TieneAnticipo.NO
        assert order_factory(tiene_anticipo="SI").tiene_anticipo == TieneAnticipo.SI

    def test_invalid_estado_rejected(self, payload_factory):
        with pytest.raises(ValidationError):
            OrderDTO.from_api(payload_factory(estado="BORRADOR"), OrderType.COMPRA)

    def test_dto_is_immutable(self, order_factory):
        order = order_factory()

        with pytest.raises(ValidationError):
            order.total = Decimal("1")

    def test_with_changes_returns_new_instance(self, order_factory):
        order = order_factory()

        approved = order.with_changes(jefe_proyecto=Approval.APPROVED)

        assert approved.jefe_proyecto is Approval.APPROVED
        assert order.jefe_proyecto is Approval.NOT_APPLICABLE

    def test_cache_round_trip_keeps_tags(self, order_factory):
        order = order_factory(auto_administrador=True, deleted_at="2024-05-01T10:00:00Z")

        restored = OrderDTO.model_validate(order.to_cache())

        assert restored == order


class TestDerivedValues:
    def test_fecha_display_ignores_timezone(self, order_factory):
        order = order_factory(fecha_orden="2024-03-15")

        assert order.fecha_display == "15/03/2024"

    def test_fecha_display_from_utc_midnight_timestamp(self, order_factory):
        order = order_factory(fecha_orden="2024-03-15T00:00:00.000Z")

        assert order.fecha_display == "15/03/2024"

    def test_neto_a_pagar(self, order_factory):
        order = order_factory(
            total="1180.00", valor_retencion="35.40", valor_detraccion="47.20"
        )

        assert order.neto_a_pagar == Decimal("1097.40")

    def test_total_display_by_currency(self, order_factory):
        assert order_factory(total="1234.5").total_display == "S/. 1,234.50"
        assert order_factory(moneda=Moneda.DOLARES, total="99").total_display == "$ 99.00"


class TestUploadFile:
    def test_empty_content_rejected(self):
        with pytest.raises(ValidationError):
            UploadFile(filename="vacio.pdf", content=b"")

    def test_pdf_detected_by_magic_bytes(self, pdf_bytes):
        upload = UploadFile(filename="scan", content=pdf_bytes)

        assert upload.is_pdf is True

    def test_image_is_not_pdf(self, png_bytes):
        upload = UploadFile(filename="foto.png", content=png_bytes, content_type="image/png")

        assert upload.is_pdf is False
        assert upload.as_multipart() == ("foto.png", png_bytes, "image/png")
