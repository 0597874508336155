import pytest

from modules.orders.notifications import LoggingNotifier, ToastCollector, ToastLevel
from modules.orders.serializers import ToastSerializer

pytestmark = pytest.mark.unit


class TestToastCollector:
    def test_keeps_emission_order(self):
        collector = ToastCollector()
        collector.error("Error al cargar las órdenes de compra", "Timeout")
        collector.success("Archivo subido exitosamente")

        assert [t.level for t in collector.toasts] == [ToastLevel.ERROR, ToastLevel.SUCCESS]
        assert collector.errors[0].description == "Timeout"

    def test_dismiss_drops_only_loading_toasts(self):
        collector = ToastCollector()
        collector.error("Error previo")
        collector.loading("Subiendo archivo...")

        collector.dismiss()

        assert [t.message for t in collector.toasts] == ["Error previo"]

    def test_warning_is_kept(self):
        collector = ToastCollector()
        collector.warning("1 orden no se pudo mostrar")

        assert collector.toasts[0].level == ToastLevel.WARNING
        assert collector.errors == []

    def test_serialized_for_responses(self):
        collector = ToastCollector()
        collector.success("Orden de compra transferida exitosamente")

        assert ToastSerializer(collector.toasts, many=True).data == [
            {
                "level": "success",
                "message": "Orden de compra transferida exitosamente",
                "description": "",
            }
        ]


def test_logging_notifier_never_raises():
    notifier = LoggingNotifier()
    notifier.loading("Cargando...")
    notifier.success("ok")
    notifier.warning("1 orden no se pudo mostrar")
    notifier.error("Error al cargar las órdenes de servicio", "Timeout")
    notifier.dismiss()
