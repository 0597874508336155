from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework.test import APIClient

from modules.orders.constants import APPROVAL_ACTIONS, Approval, OrderType
from modules.orders.dtos import OrderDTO, UploadFile
from modules.orders.exceptions import OrderApiError
from modules.orders.notifications import ToastCollector
from modules.orders.repositories.interfaces import IOrderRepository
from modules.orders.store import OrderListStore


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture(autouse=True)
def _clear_cache():
    """Order lists and throttling counters live in the cache."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture(autouse=True)
def _orders_api_up(monkeypatch):
    """Keep /health from calling a real Order API."""
    monkeypatch.setattr(
        "modules.core.views.check_orders_api", lambda: {"status": "up"}
    )


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


@pytest.fixture()
def auth_client():
    """APIClient with a force-authenticated Django user."""
    client = APIClient()
    user = get_user_model().objects.create_user(username="backoffice", password="testpass123")
    client.force_authenticate(user=user)
    return client


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


def order_payload(id: int = 1, tipo: str = OrderType.COMPRA, **overrides: Any) -> Dict[str, Any]:
    """Order API payload shaped like the real service sends it."""
    id_field = "id_orden_compra" if tipo == OrderType.COMPRA else "id_orden_servicio"
    payload = {
        id_field: id,
        "numero_orden": f"OC-{id:05d}",
        "fecha_orden": "2024-01-15T00:00:00.000Z",
        "nombre_proveedor": "Transportes Andinos SAC",
        "ruc_proveedor": "20512345678",
        "moneda": "SOLES",
        "subtotal": "1000.00",
        "igv": "180.00",
        "total": "1180.00",
        "estado": "PENDIENTE",
        "auto_administrador": None,
        "jefe_proyecto": None,
        "auto_contabilidad": None,
        "procede_pago": "",
        "retencion": None,
        "valor_retencion": "0",
        "detraccion": None,
        "valor_detraccion": "0",
        "tiene_anticipo": 0,
        "url": None,
        "url_cotizacion": None,
        "url_factura": None,
        "url_comprobante_retencion": None,
        "nro_serie": None,
        "deleted_at": None,
    }
    payload.update(overrides)
    return payload


def make_order(id: int = 1, tipo: str = OrderType.COMPRA, **overrides: Any) -> OrderDTO:
    return OrderDTO.from_api(order_payload(id, tipo, **overrides), tipo)


class FakeOrderRepository(IOrderRepository):
    """In-memory Order API for one family.

    Applies approvals and soft deletes to its own records so reloads see
    them; ``failures`` maps a method name to the ``OrderApiError`` it raises.
    """

    def __init__(self, tipo: str, orders: Optional[List[OrderDTO]] = None) -> None:
        self.tipo = OrderType(tipo)
        self.orders: Dict[int, OrderDTO] = {o.id: o for o in orders or []}
        self.calls: List[tuple] = []
        self.failures: Dict[str, OrderApiError] = {}
        self.upload_url: Optional[str] = "https://files.example.com/operacion.pdf"

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, *args))
        if name in self.failures:
            raise self.failures[name]

    def list(self, filters=None) -> List[OrderDTO]:
        self._record("list")
        return list(self.orders.values())

    def get_by_id(self, id: int) -> Optional[OrderDTO]:
        self._record("get_by_id", id)
        return self.orders.get(id)

    def approve(self, id: int, action: str) -> Any:
        self._record("approve", id, action)
        field = APPROVAL_ACTIONS[action]
        self.orders[id] = self.orders[id].with_changes(**{field: Approval.APPROVED})
        return {"success": True}

    def transfer(self, id: int) -> Any:
        self._record("transfer", id)
        self.orders[id] = self.orders[id].with_changes(estado="COMPLETADA")
        return {"success": True}

    def upload_file(self, id: int, file: UploadFile) -> Optional[str]:
        self._record("upload_file", id, file)
        if self.upload_url:
            self.orders[id] = self.orders[id].with_changes(url=self.upload_url)
        return self.upload_url

    def upload_retention_receipt(self, id: int, file: UploadFile, nro_serie: str) -> Optional[str]:
        self._record("upload_retention_receipt", id, file, nro_serie)
        return self.upload_url

    def delete(self, id: int) -> Any:
        self._record("delete", id)
        return None

    def restore(self, id: int) -> Any:
        self._record("restore", id)
        return None

    def call_names(self) -> List[str]:
        return [call[0] for call in self.calls]


@pytest.fixture()
def store():
    return OrderListStore(timeout=60)


@pytest.fixture()
def notifier():
    return ToastCollector()


@pytest.fixture()
def compra_repo():
    return FakeOrderRepository(OrderType.COMPRA)


@pytest.fixture()
def servicio_repo():
    return FakeOrderRepository(OrderType.SERVICIO)


@pytest.fixture()
def repositories(compra_repo, servicio_repo):
    return {OrderType.COMPRA: compra_repo, OrderType.SERVICIO: servicio_repo}


@pytest.fixture()
def use_fake_repositories(monkeypatch, repositories):
    """Route the views, the webhook and the Celery task to the fakes."""
    from modules.orders import container

    monkeypatch.setattr(container, "get_order_repository", lambda tipo: repositories[tipo])
    return repositories


@pytest.fixture()
def pdf_bytes():
    from io import BytesIO

    from pypdf import PdfWriter

    writer = PdfWriter()
    writer.add_blank_page(width=595, height=842)
    buffer = BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


@pytest.fixture()
def png_bytes():
    from io import BytesIO

    from PIL import Image

    buffer = BytesIO()
    Image.new("RGB", (3000, 1500), color=(200, 30, 30)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture()
def payload_factory():
    return order_payload


@pytest.fixture()
def order_factory():
    return make_order


@pytest.fixture()
def fake_repository_factory():
    return FakeOrderRepository
