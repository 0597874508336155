"""Order API implementation of ``IOrderRepository``.

Maps each repository call to one request on the order family's resource
(``/ordenes-compra`` or ``/ordenes-servicio``) and converts payloads to
``OrderDTO`` instances.  A malformed row in a listing is logged and
skipped (counted in ``skipped``) so the valid rows still show.  Transport and HTTP failures surface as
``OrderApiError`` from the ``ApiClient``.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from pydantic import ValidationError

from modules.core.http import ApiClient
from modules.orders.constants import (
    APPROVAL_ENDPOINTS,
    ORDER_ID_FIELDS,
    ORDER_RESOURCES,
    OrderType,
)
from modules.orders.dtos import OrderDTO, UploadFile
from modules.orders.exceptions import OrderApiError
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)

INVALID_RESPONSE_MESSAGE = "Respuesta inválida del servidor"

# Keys an upload response may use for the stored file URL.
_URL_KEYS = ("url", "url_comprobante_retencion", "fileUrl", "file_url")


class OrderHttpRepository(IOrderRepository):
    def __init__(self, client: ApiClient, tipo: OrderType | str) -> None:
        self._client = client
        self.tipo = OrderType(tipo)
        self._resource = ORDER_RESOURCES[self.tipo]

    def _path(self, id: Optional[int] = None, action: str = "") -> str:
        path = self._resource
        if id is not None:
            path = f"{path}/{id}"
        if action:
            path = f"{path}/{action}"
        return path

    def _to_dto(self, payload: Any) -> OrderDTO:
        if not isinstance(payload, dict):
            raise OrderApiError(INVALID_RESPONSE_MESSAGE)
        try:
            return OrderDTO.from_api(payload, self.tipo)
        except ValidationError as exc:
            logger.warning(
                "orders.invalid_payload", tipo=self.tipo, errors=exc.error_count()
            )
            raise OrderApiError(INVALID_RESPONSE_MESSAGE) from exc

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[OrderDTO]:
        payload = self._client.get(self._path(), params=filters)
        if payload is None:
            return []
        if not isinstance(payload, list):
            raise OrderApiError(INVALID_RESPONSE_MESSAGE)
        orders: List[OrderDTO] = []
        self.skipped = 0
        for item in payload:
            order = self._list_item(item)
            if order is None:
                self.skipped += 1
            else:
                orders.append(order)
        return orders

    def _list_item(self, item: Any) -> Optional[OrderDTO]:
        if not isinstance(item, dict):
            logger.warning("orders.invalid_payload", tipo=str(self.tipo), order_id=None)
            return None
        try:
            return OrderDTO.from_api(item, self.tipo)
        except ValidationError as exc:
            logger.warning(
                "orders.invalid_payload",
                tipo=str(self.tipo),
                order_id=item.get(ORDER_ID_FIELDS[self.tipo]),
                errors=exc.error_count(),
            )
            return None

    def get_by_id(self, id: int) -> Optional[OrderDTO]:
        try:
            payload = self._client.get(self._path(id))
        except OrderApiError as exc:
            if exc.status_code == 404:
                return None
            raise
        return self._to_dto(payload) if payload is not None else None

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def approve(self, id: int, action: str) -> Any:
        try:
            endpoint = APPROVAL_ENDPOINTS[action]
        except KeyError:
            raise ValueError(f"Not an approval action: {action!r}") from None
        return self._client.post(self._path(id, endpoint))

    def transfer(self, id: int) -> Any:
        return self._client.post(self._path(id, "transferir"))

    def upload_file(self, id: int, file: UploadFile) -> Optional[str]:
        payload = self._client.post(
            self._path(id, "upload-file"), files={"file": file.as_multipart()}
        )
        return self._extract_url(payload)

    def upload_retention_receipt(
        self, id: int, file: UploadFile, nro_serie: str
    ) -> Optional[str]:
        payload = self._client.post(
            self._path(id, "upload-comprobante-retencion"),
            data={"nro_serie": nro_serie},
            files={"file": file.as_multipart()},
        )
        return self._extract_url(payload)

    def delete(self, id: int) -> Any:
        return self._client.delete(self._path(id))

    def restore(self, id: int) -> Any:
        return self._client.post(self._path(id, "restore"))

    @staticmethod
    def _extract_url(payload: Any) -> Optional[str]:
        if isinstance(payload, str):
            return payload or None
        if isinstance(payload, dict):
            for key in _URL_KEYS:
                value = payload.get(key)
                if isinstance(value, str) and value:
                    return value
        return None
