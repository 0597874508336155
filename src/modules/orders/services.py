"""Order transition service (Use Cases).

Runs the named transitions of one order family against the Order API.
Every transition follows the same steps:

1. Find the order (stored list first, then the Order API).
2. Gate it with the authorization engine.
3. Ask for confirmation through the injected ``confirm`` callable.
4. Show a loading toast and make the remote call.
5. On success, patch the stored order (or reload the family) and show a
   success toast; on failure, show the server message and change nothing.

The service never raises for expected failures: each call returns a
``TransitionResult`` the HTTP layer maps to a status code.  The Order API
remains the authority on who may set which flag.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Optional, Sequence

import structlog
from django.utils import timezone

from modules.orders.authorization import can_transition
from modules.orders.constants import (
    APPROVAL_ACTIONS,
    APPROVER_LABELS,
    ORDER_NOUNS,
    ORDER_PLURAL_NOUNS,
    Approval,
    OrderAction,
)
from modules.orders.documents import validate_operation_files, validate_retention_receipt
from modules.orders.exceptions import (
    DocumentMergeError,
    OrderApiError,
    OrderNotFound,
    UploadValidationError,
)
from modules.orders.merge import PdfDocumentMerger

if TYPE_CHECKING:
    from modules.orders.dtos import OrderDTO, UploadFile
    from modules.orders.merge import IDocumentMerger
    from modules.orders.notifications import INotifier
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.orders.store import OrderListStore

logger = structlog.get_logger(__name__)

NOT_FOUND_MESSAGE = "La orden no existe"
NOT_ALLOWED_MESSAGE = "La acción no está disponible para esta orden"


class TransitionOutcome(str, Enum):
    APPLIED = "APPLIED"
    DECLINED = "DECLINED"
    NOT_FOUND = "NOT_FOUND"
    NOT_ALLOWED = "NOT_ALLOWED"
    INVALID = "INVALID"
    MERGE_FAILED = "MERGE_FAILED"
    FAILED = "FAILED"


@dataclass(frozen=True)
class TransitionResult:
    outcome: TransitionOutcome
    order: Optional[OrderDTO] = None
    message: str = ""

    @property
    def applied(self) -> bool:
        return self.outcome is TransitionOutcome.APPLIED


def _always_confirm(message: str) -> bool:
    return True


class OrderTransitionService:
    """Application service for the transitions of one order family.

    Receives its collaborators via constructor injection (DIP).
    """

    def __init__(
        self,
        repository: IOrderRepository,
        store: OrderListStore,
        notifier: INotifier,
        confirm: Optional[Callable[[str], bool]] = None,
        merger: Optional[IDocumentMerger] = None,
    ) -> None:
        self._repo = repository
        self._store = store
        self._notifier = notifier
        self._confirm = confirm or _always_confirm
        self._merger = merger or PdfDocumentMerger()

    @property
    def tipo(self) -> str:
        return self._repo.tipo

    @property
    def noun(self) -> str:
        return ORDER_NOUNS[self.tipo]

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def approve(self, id: int, action: str) -> TransitionResult:
        """Set the approval flag owned by *action* to APPROVED."""
        if action not in APPROVAL_ACTIONS:
            raise ValueError(f"Not an approval action: {action!r}")
        field = APPROVAL_ACTIONS[action]
        approver = APPROVER_LABELS[action]
        return self._run(
            id,
            action,
            confirm=f"¿Está seguro de que desea aprobar esta {self.noun} {approver}?",
            loading=f"Aprobando {self.noun}...",
            success=f"{self.noun.capitalize()} aprobada {approver} exitosamente",
            failure=f"Error al aprobar la {self.noun}",
            call=lambda: self._repo.approve(id, action),
            apply=lambda _: self._patch(id, **{field: Approval.APPROVED}),
        )

    def transfer(self, id: int) -> TransitionResult:
        """Transfer the order; the family is reloaded afterwards."""
        return self._run(
            id,
            OrderAction.TRANSFER,
            confirm=f"¿Está seguro de que desea transferir esta {self.noun}?",
            loading=f"Transfiriendo {self.noun}...",
            success=f"{self.noun.capitalize()} transferida exitosamente",
            failure=f"Error al transferir la {self.noun}",
            call=lambda: self._repo.transfer(id),
            apply=lambda _: self._reload_and_get(id),
        )

    def delete(self, id: int) -> TransitionResult:
        return self._run(
            id,
            OrderAction.DELETE,
            confirm=f"¿Está seguro de que desea eliminar esta {self.noun}?",
            loading=f"Eliminando {self.noun}...",
            success=f"{self.noun.capitalize()} eliminada exitosamente",
            failure=f"Error al eliminar la {self.noun}",
            call=lambda: self._repo.delete(id),
            apply=lambda _: self._patch(id, deleted_at=timezone.now()),
        )

    def restore(self, id: int) -> TransitionResult:
        return self._run(
            id,
            OrderAction.RESTORE,
            confirm=f"¿Está seguro de que desea restaurar esta {self.noun}?",
            loading=f"Restaurando {self.noun}...",
            success=f"{self.noun.capitalize()} restaurada exitosamente",
            failure=f"Error al restaurar la {self.noun}",
            call=lambda: self._repo.restore(id),
            apply=lambda _: self._patch(id, deleted_at=None),
        )

    def upload_operation_files(
        self, id: int, files: Optional[Sequence[UploadFile]]
    ) -> TransitionResult:
        """Upload the operation evidence (1 to 4 files merged into one PDF).

        Nothing is sent when the selection is invalid or the merge fails.
        """
        try:
            selected = validate_operation_files(files)
        except UploadValidationError as exc:
            return self._invalid(id, str(exc))

        order = self._find(id)
        if order is None:
            return self._not_found(id)
        if not can_transition(order, OrderAction.UPLOAD_OPERATION_FILE):
            return self._not_allowed(order, OrderAction.UPLOAD_OPERATION_FILE)

        try:
            upload = self._merger.merge(selected)
        except DocumentMergeError as exc:
            logger.warning("order.merge_failed", order_id=id, error=str(exc))
            self._notifier.error("Error al procesar los archivos", str(exc))
            return TransitionResult(TransitionOutcome.MERGE_FAILED, order, str(exc))

        return self._execute(
            order,
            OrderAction.UPLOAD_OPERATION_FILE,
            loading="Subiendo archivo...",
            success="Archivo subido exitosamente",
            failure="Error al subir el archivo",
            call=lambda: self._repo.upload_file(id, upload),
            apply=lambda url: self._patch(id, url=url) if url else self._reload_and_get(id),
        )

    def upload_retention_receipt(
        self, id: int, file: Optional[UploadFile], nro_serie: Optional[str]
    ) -> TransitionResult:
        """Upload the retention receipt with its series number."""
        try:
            serie = validate_retention_receipt(file, nro_serie)
        except UploadValidationError as exc:
            return self._invalid(id, str(exc))

        order = self._find(id)
        if order is None:
            return self._not_found(id)
        if not can_transition(order, OrderAction.UPLOAD_RETENTION_RECEIPT):
            return self._not_allowed(order, OrderAction.UPLOAD_RETENTION_RECEIPT)

        def apply(url: Optional[str]) -> Optional[OrderDTO]:
            if not url:
                return self._reload_and_get(id)
            return self._patch(id, url_comprobante_retencion=url, nro_serie=serie)

        return self._execute(
            order,
            OrderAction.UPLOAD_RETENTION_RECEIPT,
            loading="Subiendo comprobante de retención...",
            success="Comprobante de retención subido exitosamente",
            failure="Error al subir el comprobante de retención",
            call=lambda: self._repo.upload_retention_receipt(id, file, serie),
            apply=apply,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _run(
        self,
        id: int,
        action: str,
        confirm: str,
        **steps: Any,
    ) -> TransitionResult:
        order = self._find(id)
        if order is None:
            return self._not_found(id)
        if not can_transition(order, action):
            return self._not_allowed(order, action)
        if not self._confirm(confirm):
            logger.info("order.transition_declined", order_id=id, action=str(action))
            return TransitionResult(TransitionOutcome.DECLINED, order)
        return self._execute(order, action, **steps)

    def _execute(
        self,
        order: OrderDTO,
        action: str,
        loading: str,
        success: str,
        failure: str,
        call: Callable[[], Any],
        apply: Callable[[Any], Optional[OrderDTO]],
    ) -> TransitionResult:
        log = logger.bind(order_id=order.id, tipo=str(self.tipo), action=str(action))
        self._notifier.loading(loading)
        try:
            response = call()
        except OrderApiError as exc:
            self._notifier.dismiss()
            self._notifier.error(failure, exc.message)
            log.warning(
                "order.transition_failed", error=exc.message, status_code=exc.status_code
            )
            return TransitionResult(TransitionOutcome.FAILED, order, exc.message)

        self._notifier.dismiss()
        updated = apply(response) or order
        self._notifier.success(success)
        log.info("order.transition_applied")
        return TransitionResult(TransitionOutcome.APPLIED, updated, success)

    def _find(self, id: int) -> Optional[OrderDTO]:
        order = self._store.get(self.tipo, id)
        if order is not None:
            return order
        try:
            return self._repo.get_by_id(id)
        except OrderApiError as exc:
            logger.warning("order.lookup_failed", order_id=id, error=exc.message)
            return None

    def _patch(self, id: int, **changes: Any) -> Optional[OrderDTO]:
        try:
            return self._store.patch(self.tipo, id, **changes)
        except OrderNotFound:
            # Not in the stored list: the next reload brings the change.
            logger.debug("order.patch_skipped", order_id=id, tipo=str(self.tipo))
            return None

    def _reload_and_get(self, id: int) -> Optional[OrderDTO]:
        try:
            orders = self._repo.list()
        except OrderApiError as exc:
            logger.warning("orders.reload_failed", tipo=str(self.tipo), error=exc.message)
            self._notifier.error(
                f"Error al cargar las {ORDER_PLURAL_NOUNS[self.tipo]}", exc.message
            )
            return None
        self._store.replace(self.tipo, orders)
        return next((order for order in orders if order.id == id), None)

    def _not_found(self, id: int) -> TransitionResult:
        self._notifier.error(NOT_FOUND_MESSAGE)
        logger.info("order.not_found", order_id=id, tipo=str(self.tipo))
        return TransitionResult(TransitionOutcome.NOT_FOUND, None, NOT_FOUND_MESSAGE)

    def _not_allowed(self, order: OrderDTO, action: str) -> TransitionResult:
        self._notifier.error(NOT_ALLOWED_MESSAGE)
        logger.info("order.transition_not_allowed", order_id=order.id, action=str(action))
        return TransitionResult(TransitionOutcome.NOT_ALLOWED, order, NOT_ALLOWED_MESSAGE)

    def _invalid(self, id: int, message: str) -> TransitionResult:
        self._notifier.error(message)
        logger.info("order.upload_invalid", order_id=id, error=message)
        return TransitionResult(TransitionOutcome.INVALID, None, message)
