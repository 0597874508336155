"""Order domain constants.

Defines the enumerations shared by purchase and service orders, the
tri-state approval tag, the named transitions, and the role scopes that
decide which transitions each back-office page exposes.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from django.db import models


class OrderType(models.TextChoices):
    COMPRA = "compra", "Orden de compra"
    SERVICIO = "servicio", "Orden de servicio"


# Resource family of each order type in the Order API.
ORDER_RESOURCES: dict[str, str] = {
    OrderType.COMPRA: "ordenes-compra",
    OrderType.SERVICIO: "ordenes-servicio",
}

# Lower-case nouns used in user-facing messages.
ORDER_NOUNS: dict[str, str] = {
    OrderType.COMPRA: "orden de compra",
    OrderType.SERVICIO: "orden de servicio",
}
ORDER_PLURAL_NOUNS: dict[str, str] = {
    OrderType.COMPRA: "órdenes de compra",
    OrderType.SERVICIO: "órdenes de servicio",
}

# Field carrying the server-assigned id of each order type.
ORDER_ID_FIELDS: dict[str, str] = {
    OrderType.COMPRA: "id_orden_compra",
    OrderType.SERVICIO: "id_orden_servicio",
}


class OrderEstado(models.TextChoices):
    PENDIENTE = "PENDIENTE", "Pendiente"
    APROBADA = "APROBADA", "Aprobada"
    COMPLETADA = "COMPLETADA", "Completada"
    CANCELADA = "CANCELADA", "Cancelada"
    FIRMADA = "FIRMADA", "Firmada"


class Moneda(models.TextChoices):
    SOLES = "SOLES", "Soles"
    DOLARES = "DOLARES", "Dólares"


CURRENCY_SYMBOLS: dict[str, str] = {
    Moneda.SOLES: "S/.",
    Moneda.DOLARES: "$",
}


class ProcedePago(models.TextChoices):
    TRANSFERIR = "TRANSFERIR", "Transferir"
    PAGAR = "PAGAR", "Pagar"


class TieneAnticipo(models.TextChoices):
    SI = "SI", "Sí"
    NO = "NO", "No"


class Approval(Enum):
    """One approver's decision on an order.

    The Order API sends ``true`` / ``false`` / ``null``; ``null`` (or a
    missing key) means the approval does not apply to the order yet.
    """

    APPROVED = "APROBADO"
    PENDING = "PENDIENTE"
    NOT_APPLICABLE = "NO_APLICA"

    @classmethod
    def coerce(cls, value: Any) -> Approval:
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.NOT_APPLICABLE
        if isinstance(value, bool):
            return cls.APPROVED if value else cls.PENDING
        if isinstance(value, int):
            return cls.APPROVED if value == 1 else cls.PENDING
        if isinstance(value, str):
            return cls(value)
        raise ValueError(f"Unsupported approval value: {value!r}")

    @property
    def is_approved(self) -> bool:
        return self is Approval.APPROVED


APPROVAL_FIELDS: tuple[str, ...] = (
    "auto_administrador",
    "jefe_proyecto",
    "auto_contabilidad",
)

# Approvals needed before transfer / operation file upload are enabled.
MIN_APPROVALS = 2


class OrderAction(models.TextChoices):
    APPROVE_ADMIN = "approve_admin", "Aprobar (administración)"
    APPROVE_JEFE_PROYECTO = "approve_jefe_proyecto", "Aprobar (jefe de proyecto)"
    APPROVE_CONTABILIDAD = "approve_contabilidad", "Aprobar (contabilidad)"
    TRANSFER = "transfer", "Transferir"
    UPLOAD_OPERATION_FILE = "upload_operation_file", "Subir archivo"
    UPLOAD_RETENTION_RECEIPT = "upload_retention_receipt", "Subir comprobante"
    DELETE = "delete", "Eliminar"
    RESTORE = "restore", "Restaurar"


APPROVAL_ACTIONS: dict[str, str] = {
    OrderAction.APPROVE_ADMIN: "auto_administrador",
    OrderAction.APPROVE_JEFE_PROYECTO: "jefe_proyecto",
    OrderAction.APPROVE_CONTABILIDAD: "auto_contabilidad",
}

# Order API path segment of each approval endpoint.
APPROVAL_ENDPOINTS: dict[str, str] = {
    OrderAction.APPROVE_ADMIN: "aprobar-administracion",
    OrderAction.APPROVE_JEFE_PROYECTO: "aprobar-jefe-proyecto",
    OrderAction.APPROVE_CONTABILIDAD: "aprobar-contabilidad",
}

# How each approver is named in messages ("aprobada como jefe de proyecto").
APPROVER_LABELS: dict[str, str] = {
    OrderAction.APPROVE_ADMIN: "por administración",
    OrderAction.APPROVE_JEFE_PROYECTO: "como jefe de proyecto",
    OrderAction.APPROVE_CONTABILIDAD: "para contabilidad",
}


class RoleScope(models.TextChoices):
    JEFE_PROYECTO = "jefe-proyecto", "Registro - Jefe de proyecto"
    GERENCIA = "gerencia", "Registro - Gerencia"
    CONTABILIDAD = "contabilidad", "Registro - Contabilidad"
    LOGISTICA = "logistica", "Órdenes de compra y servicio"
    CONTROL_APROBADOS = "control-aprobados", "Control de aprobados"


ROLE_ACTIONS: dict[str, tuple[str, ...]] = {
    RoleScope.JEFE_PROYECTO: (OrderAction.APPROVE_JEFE_PROYECTO,),
    RoleScope.GERENCIA: (
        OrderAction.APPROVE_ADMIN,
        OrderAction.TRANSFER,
        OrderAction.UPLOAD_OPERATION_FILE,
    ),
    RoleScope.CONTABILIDAD: (
        OrderAction.APPROVE_CONTABILIDAD,
        OrderAction.UPLOAD_RETENTION_RECEIPT,
    ),
    RoleScope.LOGISTICA: (OrderAction.DELETE, OrderAction.RESTORE),
    RoleScope.CONTROL_APROBADOS: (),
}

# Approval flag each page filters on (``None``: the page has no approval filter).
ROLE_APPROVAL_FIELDS: dict[str, str | None] = {
    RoleScope.JEFE_PROYECTO: "jefe_proyecto",
    RoleScope.GERENCIA: "auto_administrador",
    RoleScope.CONTABILIDAD: "auto_contabilidad",
    RoleScope.LOGISTICA: None,
    RoleScope.CONTROL_APROBADOS: None,
}

# Pages that list soft-deleted orders (so they can be restored).
ROLES_SEEING_DELETED: frozenset[str] = frozenset({RoleScope.LOGISTICA})

# Filter value meaning "no filter" for estado and approval selects.
TODOS = "TODOS"


class ApprovalFilter(models.TextChoices):
    TODOS = "TODOS", "Todos"
    APROBADO = "APROBADO", "Aprobado"
    PENDIENTE = "PENDIENTE", "Pendiente"


# Push notification names sent by the Order API.
PUSH_EVENT_ORDEN_COMPRA = "ordenCompraUpdated"
PUSH_EVENT_ORDEN_SERVICIO = "ordenServicioUpdated"

MAX_OPERATION_FILES = 4
MAX_IMAGE_EDGE_PX = 1400
IMAGE_JPEG_QUALITY = 85
