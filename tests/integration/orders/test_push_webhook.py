"""Integration tests for the Order API push webhook."""

from __future__ import annotations

import pytest

from modules.orders import container
from modules.orders.board import OrderBoard
from modules.orders.constants import OrderType, RoleScope
from modules.orders.notifications import LoggingNotifier
from modules.orders.store import OrderListStore
from shared.infrastructure.bus import InMemoryEventBus

pytestmark = pytest.mark.integration

PUSH_URL = "/api/v1/push/"
TOKEN = "push-secret"


@pytest.fixture()
def push_token(settings):
    settings.PUSH_WEBHOOK_TOKEN = TOKEN
    return TOKEN


@pytest.fixture()
def mounted_board(monkeypatch, use_fake_repositories):
    bus = InMemoryEventBus()
    monkeypatch.setattr(container, "get_event_bus", lambda: bus)
    board = OrderBoard(
        RoleScope.CONTROL_APROBADOS,
        use_fake_repositories,
        OrderListStore(),
        LoggingNotifier(),
        bus,
    ).mount()
    yield board
    board.unmount()


def push(client, event, token=TOKEN):
    return client.post(PUSH_URL, {"event": event}, format="json", HTTP_X_PUSH_TOKEN=token)


class TestPushWebhook:
    def test_reloads_only_the_changed_family(
        self, api_client, push_token, mounted_board, use_fake_repositories, order_factory
    ):
        compra = use_fake_repositories[OrderType.COMPRA]
        compra.orders = {7: order_factory(7)}

        response = push(api_client, "ordenCompraUpdated")

        assert response.status_code == 202
        assert response.json() == {"event": "ordenCompraUpdated", "status": "accepted"}
        assert [o.id for o in OrderListStore().get_list(OrderType.COMPRA)] == [7]
        assert use_fake_repositories[OrderType.SERVICIO].calls == []

    def test_reloaded_list_is_what_boards_show(
        self, api_client, auth_client, push_token, mounted_board, use_fake_repositories,
        order_factory,
    ):
        servicio = use_fake_repositories[OrderType.SERVICIO]
        servicio.orders = {1: order_factory(1, OrderType.SERVICIO)}
        auth_client.get("/api/v1/registro-gerencia/servicio/")
        servicio.orders[2] = order_factory(2, OrderType.SERVICIO)

        push(api_client, "ordenServicioUpdated")
        listed = auth_client.get("/api/v1/registro-gerencia/servicio/").json()

        assert [row["id"] for row in listed["results"]] == [1, 2]

    def test_missing_token(self, api_client, push_token, mounted_board, use_fake_repositories):
        response = api_client.post(PUSH_URL, {"event": "ordenCompraUpdated"}, format="json")

        assert response.status_code == 403
        assert use_fake_repositories[OrderType.COMPRA].calls == []

    def test_wrong_token(self, api_client, push_token, mounted_board):
        response = push(api_client, "ordenCompraUpdated", token="guess")

        assert response.status_code == 403

    def test_closed_when_no_token_configured(self, api_client, settings, mounted_board):
        settings.PUSH_WEBHOOK_TOKEN = ""

        response = push(api_client, "ordenCompraUpdated", token="")

        assert response.status_code == 403

    def test_unknown_event(self, api_client, push_token, mounted_board):
        response = push(api_client, "clienteUpdated")

        assert response.status_code == 400
        assert response.json()["errors"][0]["attr"] == "event"
