"""Role-scoped order board (the list view-model of one back-office page).

A board holds the order lists of the families its page shows, filters
them with the page's approval flag, and annotates every row with the
transitions the role may trigger and the document links.

Lists come from the shared ``OrderListStore``; a board loads a family
from the Order API when the store has nothing yet, and reloads it when a
push event for that family is published on the bus it is mounted on::

    with OrderBoard(RoleScope.GERENCIA, repositories, store, notifier, bus) as board:
        rows = board.rows(OrderType.COMPRA, board.criteria(search="ACME"))
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Mapping, Optional

import structlog

from modules.orders.authorization import enabled_actions
from modules.orders.constants import (
    ORDER_PLURAL_NOUNS,
    ROLE_ACTIONS,
    ROLE_APPROVAL_FIELDS,
    ROLES_SEEING_DELETED,
    TODOS,
    ApprovalFilter,
    RoleScope,
)
from modules.orders.documents import DocumentLink, document_links
from modules.orders.dtos import OrderDTO
from modules.orders.events import EVENT_CLASSES_BY_TYPE
from modules.orders.exceptions import OrderApiError
from modules.orders.filters import OrderFilter
from modules.orders.handlers import OrderListReloadHandler
from modules.orders.notifications import INotifier
from modules.orders.repositories.interfaces import IOrderRepository
from modules.orders.store import OrderListStore
from shared.domain.bus import IEventBus

logger = structlog.get_logger(__name__)

INVALID_ROWS_DESCRIPTION = "El servidor envió datos incompletos o inválidos"


def skipped_message(count: int) -> str:
    if count == 1:
        return "1 orden no se pudo mostrar"
    return f"{count} órdenes no se pudieron mostrar"


@dataclass(frozen=True)
class OrderRow:
    """One listed order with what the current role can do with it."""

    order: OrderDTO
    acciones: Dict[str, bool]
    documentos: List[DocumentLink]


class OrderBoard:
    def __init__(
        self,
        role: RoleScope | str,
        repositories: Mapping[str, IOrderRepository],
        store: OrderListStore,
        notifier: INotifier,
        bus: Optional[IEventBus] = None,
    ) -> None:
        self.role = RoleScope(role)
        self._repositories = dict(repositories)
        self._store = store
        self._notifier = notifier
        self._bus = bus
        self._handlers: Dict[str, OrderListReloadHandler] = {}

    @property
    def actions(self) -> tuple[str, ...]:
        return ROLE_ACTIONS[self.role]

    @property
    def mounted(self) -> bool:
        return bool(self._handlers)

    # ------------------------------------------------------------------
    # Push subscription
    # ------------------------------------------------------------------

    def mount(self) -> OrderBoard:
        """Subscribe to the push events of every family this board shows."""
        if self._bus is None or self.mounted:
            return self
        for tipo in self._repositories:
            handler = OrderListReloadHandler(self, tipo)
            self._bus.subscribe(EVENT_CLASSES_BY_TYPE[tipo], handler)
            self._handlers[tipo] = handler
        logger.debug("orders.board_mounted", role=str(self.role))
        return self

    def unmount(self) -> None:
        if self._bus is None:
            return
        for tipo, handler in self._handlers.items():
            self._bus.unsubscribe(EVENT_CLASSES_BY_TYPE[tipo], handler)
        self._handlers.clear()
        logger.debug("orders.board_unmounted", role=str(self.role))

    def __enter__(self) -> OrderBoard:
        return self.mount()

    def __exit__(self, *exc_info: object) -> None:
        self.unmount()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def repository(self, tipo: str) -> IOrderRepository:
        return self._repositories[tipo]

    def load(self, tipo: str) -> List[OrderDTO]:
        """Fetch the family from the Order API and replace the stored list.

        A failed fetch yields an empty list and an error toast; the stored
        list is left as it was.
        """
        try:
            orders = self.repository(tipo).list()
        except OrderApiError as exc:
            logger.warning(
                "orders.list_failed", tipo=str(tipo), role=str(self.role), error=exc.message
            )
            self._notifier.error(
                f"Error al cargar las {ORDER_PLURAL_NOUNS[tipo]}", exc.message
            )
            return []
        logger.info("orders.list_loaded", tipo=str(tipo), count=len(orders))
        skipped = self.repository(tipo).skipped
        if skipped:
            self._notifier.warning(skipped_message(skipped), INVALID_ROWS_DESCRIPTION)
        return self._store.replace(tipo, orders)

    def orders(self, tipo: str) -> List[OrderDTO]:
        cached = self._store.get_list(tipo)
        if cached is None:
            return self.load(tipo)
        return cached

    # ------------------------------------------------------------------
    # Rows
    # ------------------------------------------------------------------

    def criteria(
        self,
        search: str = "",
        estado: str = TODOS,
        aprobacion: str = ApprovalFilter.TODOS,
        fecha: Optional[date | str] = None,
        eliminadas: bool = False,
    ) -> OrderFilter:
        """Filter for this page: its approval flag and its view of deleted orders."""
        return OrderFilter(
            search=search,
            estado=estado or TODOS,
            approval=aprobacion or ApprovalFilter.TODOS,
            approval_field=ROLE_APPROVAL_FIELDS[self.role],
            fecha=fecha,
            include_deleted=eliminadas and self.role in ROLES_SEEING_DELETED,
        )

    def row(self, order: OrderDTO) -> OrderRow:
        return OrderRow(
            order=order,
            acciones=enabled_actions(order, self.actions),
            documentos=document_links(order),
        )

    def rows(self, tipo: str, criteria: Optional[OrderFilter] = None) -> List[OrderRow]:
        criteria = criteria or self.criteria()
        return [self.row(order) for order in criteria.apply(self.orders(tipo))]

    def find(self, tipo: str, id: int) -> Optional[OrderRow]:
        for order in self.orders(tipo):
            if order.id == id:
                return self.row(order)
        return None
