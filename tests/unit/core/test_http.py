"""Unit tests for ApiClient (requests session mocked)."""

from unittest.mock import MagicMock

import pytest
import requests

from modules.core.http import ApiClient, ExternalApiError, get_http_session
from modules.core.middleware import correlation_id_var
from modules.core.views import check_orders_api
from modules.orders import container

pytestmark = pytest.mark.unit


def make_response(status_code=200, body=None, content=b"x"):
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.ok = status_code < 400
    response.content = content
    if isinstance(body, Exception):
        response.json.side_effect = body
    else:
        response.json.return_value = body
    return response


@pytest.fixture()
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture()
def client(session):
    return ApiClient("http://orders.local/api/", timeout=3, session=session)


class TestRequest:
    def test_joins_base_url_and_sends_timeout(self, client, session):
        session.request.return_value = make_response(body=[])

        client.get("/ordenes-compra")

        args, kwargs = session.request.call_args
        assert args == ("GET", "http://orders.local/api/ordenes-compra")
        assert kwargs["timeout"] == 3
        assert kwargs["headers"]["Accept"] == "application/json"

    def test_forwards_correlation_id(self, client, session):
        session.request.return_value = make_response(body=[])
        token = correlation_id_var.set("cid-123")
        try:
            client.get("ordenes-compra")
        finally:
            correlation_id_var.reset(token)

        assert session.request.call_args.kwargs["headers"]["X-Request-ID"] == "cid-123"

    def test_no_correlation_header_outside_a_request(self, client, session):
        session.request.return_value = make_response(body=[])

        client.get("ordenes-compra")

        assert "X-Request-ID" not in session.request.call_args.kwargs["headers"]

    def test_unwraps_data_envelope(self, client, session):
        session.request.return_value = make_response(body={"success": True, "data": [1, 2]})

        assert client.get("ordenes-compra") == [1, 2]

    def test_plain_object_is_returned_as_is(self, client, session):
        body = {"id_orden_compra": 1, "data": "x", "estado": "PENDIENTE"}
        session.request.return_value = make_response(body=body)

        assert client.get("ordenes-compra/1") == body

    def test_empty_body(self, client, session):
        session.request.return_value = make_response(status_code=204, content=b"")

        assert client.delete("ordenes-compra/1") is None


class TestErrors:
    def test_server_message_is_kept(self, client, session):
        session.request.return_value = make_response(
            status_code=409, body={"message": "La orden ya fue aprobada"}
        )

        with pytest.raises(ExternalApiError) as exc_info:
            client.post("ordenes-compra/1/aprobar-administracion")

        assert exc_info.value.message == "La orden ya fue aprobada"
        assert exc_info.value.status_code == 409

    def test_generic_message_without_body(self, client, session):
        session.request.return_value = make_response(status_code=500, body=ValueError())

        with pytest.raises(ExternalApiError) as exc_info:
            client.get("ordenes-compra")

        assert exc_info.value.message == "Error desconocido (HTTP 500)"

    def test_connection_failure(self, client, session):
        session.request.side_effect = requests.ConnectionError("refused")

        with pytest.raises(ExternalApiError) as exc_info:
            client.get("ordenes-compra")

        assert exc_info.value.message == "No se pudo conectar con el servidor"
        assert exc_info.value.status_code is None

    def test_custom_error_class(self, session):
        class OrdersDown(ExternalApiError):
            pass

        client = ApiClient("http://orders.local", session=session, error_class=OrdersDown)
        session.request.side_effect = requests.Timeout()

        with pytest.raises(OrdersDown):
            client.get("ordenes-compra")

    def test_empty_message_falls_back(self):
        assert ExternalApiError("").message == "Error desconocido"


class TestSharedSession:
    def test_clients_without_a_session_share_the_process_session(self):
        first = ApiClient("http://orders.local")
        second = ApiClient("http://health.local")

        assert first._session is get_http_session()
        assert second._session is first._session

    def test_order_clients_reuse_the_session(self):
        assert container.get_api_client()._session is container.get_api_client()._session

    def test_health_check_reuses_the_session(self, session, monkeypatch):
        monkeypatch.setattr("modules.core.views.get_http_session", lambda: session)
        session.request.return_value = make_response(body={"status": "ok"})

        assert check_orders_api()["status"] == "up"
        assert check_orders_api()["status"] == "up"

        assert session.request.call_count == 2
