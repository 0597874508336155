from django.apps import AppConfig


class OrdersConfig(AppConfig):
    name = "modules.orders"
    label = "orders"

    def ready(self) -> None:
        from modules.orders import container
        from modules.orders.board import OrderBoard
        from modules.orders.constants import RoleScope
        from modules.orders.notifications import LoggingNotifier

        # Process board: reloads the shared lists when a push event arrives.
        self.board = OrderBoard(
            RoleScope.CONTROL_APROBADOS,
            container.get_order_repositories(),
            container.get_order_store(),
            LoggingNotifier(),
            container.get_event_bus(),
        ).mount()
