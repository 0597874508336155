"""Integration tests for the Celery app and the order list refresh task."""

import logging

import pytest

from modules.orders.constants import OrderType
from modules.orders.exceptions import OrderApiError
from modules.orders.store import OrderListStore

pytestmark = pytest.mark.integration


@pytest.fixture(autouse=True)
def _celery_eager(settings):
    """Run tasks synchronously in the test process."""
    settings.CELERY_TASK_ALWAYS_EAGER = True
    settings.CELERY_TASK_EAGER_PROPAGATES = True


class TestCeleryConfig:
    """Celery loads through Django settings."""

    def test_celery_app_is_importable(self):
        from config.celery import app

        assert app.main == "backoffice"

    def test_celery_app_exported_from_init(self):
        from config import celery_app

        assert celery_app.main == "backoffice"

    def test_celery_serializer_is_json(self, settings):
        assert settings.CELERY_TASK_SERIALIZER == "json"
        assert settings.CELERY_RESULT_SERIALIZER == "json"
        assert settings.CELERY_ACCEPT_CONTENT == ["json"]

    def test_celery_timezone_matches_django(self, settings):
        assert settings.CELERY_TIMEZONE == settings.TIME_ZONE

    def test_refresh_is_on_the_beat_schedule(self, settings):
        entry = settings.CELERY_BEAT_SCHEDULE["refresh-order-lists"]
        assert entry["task"] == "orders.refresh_order_lists"
        assert entry["schedule"] == float(settings.ORDERS_POLL_INTERVAL)

    def test_task_is_registered(self):
        from config.celery import app
        from modules.orders import tasks  # noqa: F401

        assert "orders.refresh_order_lists" in app.tasks


class TestRefreshOrderLists:
    """The beat task reloads every family into the shared store."""

    def test_refreshes_both_families(self, use_fake_repositories, order_factory):
        from modules.orders.tasks import refresh_order_lists

        use_fake_repositories[OrderType.COMPRA].orders = {1: order_factory(1), 2: order_factory(2)}
        use_fake_repositories[OrderType.SERVICIO].orders = {
            5: order_factory(5, OrderType.SERVICIO)
        }

        result = refresh_order_lists.delay()

        assert result.successful()
        assert result.result == {"compra": 2, "servicio": 1}
        store = OrderListStore()
        assert [o.id for o in store.get_list(OrderType.COMPRA)] == [1, 2]
        assert [o.id for o in store.get_list(OrderType.SERVICIO)] == [5]

    def test_failed_family_keeps_previous_list(
        self, use_fake_repositories, order_factory, caplog
    ):
        from modules.orders.tasks import refresh_order_lists

        store = OrderListStore()
        store.replace(OrderType.COMPRA, [order_factory(9)])
        use_fake_repositories[OrderType.COMPRA].failures["list"] = OrderApiError(
            "Servicio no disponible", 503
        )

        with caplog.at_level(logging.WARNING):
            output = refresh_order_lists()

        assert output == {"servicio": 0}
        assert [o.id for o in store.get_list(OrderType.COMPRA)] == [9]
        assert any("orders.refresh_failed" in r.getMessage() for r in caplog.records)
