"""Order API views.

Exposes one board per back-office page (role scope) via DRF ViewSets,
mounted at ``/api/v1/registro-<scope>/<compra|servicio>/``.  Every
response carries the toasts the operation raised.  Transition results are
translated into HTTP status codes here; actions outside the role's scope
answer 403 before anything else happens.

The push webhook publishes Order API notifications on the process event
bus.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.views import APIView
from rest_framework.viewsets import GenericViewSet

from modules.orders import container
from modules.orders.board import OrderBoard
from modules.orders.constants import (
    APPROVAL_ACTIONS,
    ROLE_ACTIONS,
    OrderAction,
    OrderType,
    RoleScope,
)
from modules.orders.dtos import UploadFile
from modules.orders.events import PUSH_EVENT_CLASSES
from modules.orders.notifications import ToastCollector
from modules.orders.permissions import HasPushToken
from modules.orders.serializers import (
    OperationFilesSerializer,
    OrderFilterSerializer,
    OrderRowSerializer,
    PushEventSerializer,
    RetentionReceiptSerializer,
    ToastSerializer,
    TransitionSerializer,
)
from modules.orders.services import (
    OrderTransitionService,
    TransitionOutcome,
    TransitionResult,
)

logger = structlog.get_logger(__name__)

FORBIDDEN_MESSAGE = "Esta acción no está disponible para su rol."

OUTCOME_STATUS: Dict[TransitionOutcome, int] = {
    TransitionOutcome.APPLIED: status.HTTP_200_OK,
    TransitionOutcome.DECLINED: status.HTTP_400_BAD_REQUEST,
    TransitionOutcome.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    TransitionOutcome.NOT_ALLOWED: status.HTTP_409_CONFLICT,
    TransitionOutcome.INVALID: status.HTTP_400_BAD_REQUEST,
    TransitionOutcome.MERGE_FAILED: status.HTTP_422_UNPROCESSABLE_ENTITY,
    TransitionOutcome.FAILED: status.HTTP_502_BAD_GATEWAY,
}


def _to_upload(uploaded: Any) -> UploadFile:
    return UploadFile(
        filename=uploaded.name,
        content=uploaded.read(),
        content_type=getattr(uploaded, "content_type", None) or "application/octet-stream",
    )


class RoleOrderViewSet(GenericViewSet):
    """ViewSet for one role's board over one order family.

    Subclasses set ``role``; the family comes from the ``tipo`` URL kwarg.
    Does **not** extend ``ModelViewSet``: orders live in the Order API and
    all access goes through the board and the transition service.
    """

    role: RoleScope
    serializer_class = OrderRowSerializer
    lookup_value_regex = r"\d+"

    def initial(self, request: Request, *args: Any, **kwargs: Any) -> None:
        super().initial(request, *args, **kwargs)
        self.notifier = ToastCollector()
        structlog.contextvars.bind_contextvars(role=str(self.role), tipo=self.tipo)

    def get_throttles(self) -> list[BaseThrottle]:
        """Listing and transition requests are throttled separately."""
        if self.action in {"list", "retrieve"}:
            self.throttle_scope = "order_listing"
        else:
            self.throttle_scope = "order_transition"
        return super().get_throttles()

    @property
    def tipo(self) -> str:
        return OrderType(self.kwargs["tipo"])

    def get_board(self) -> OrderBoard:
        return OrderBoard(
            self.role,
            container.get_order_repositories(),
            container.get_order_store(),
            self.notifier,
        )

    def get_service(self, confirmado: bool = False) -> OrderTransitionService:
        return OrderTransitionService(
            container.get_order_repository(self.tipo),
            container.get_order_store(),
            self.notifier,
            confirm=lambda message: confirmado,
            merger=container.get_document_merger(),
        )

    def require(self, order_action: str) -> None:
        if order_action not in ROLE_ACTIONS[self.role]:
            logger.info("orders.action_forbidden", action=str(order_action))
            raise PermissionDenied(FORBIDDEN_MESSAGE)

    def _confirmado(self, request: Request) -> bool:
        data = request.data if request.data else request.query_params
        serializer = TransitionSerializer(data=data)
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data["confirmado"]

    def _toasts(self) -> List[dict]:
        return ToastSerializer(self.notifier.toasts, many=True).data

    def _row_data(self, board: OrderBoard, result: TransitionResult) -> Optional[dict]:
        if result.order is None:
            return None
        return OrderRowSerializer(board.row(result.order)).data

    def _result_response(self, result: TransitionResult) -> Response:
        body = {
            "resultado": result.outcome.value,
            "mensaje": result.message,
            "orden": self._row_data(self.get_board(), result),
            "toasts": self._toasts(),
        }
        return Response(body, status=OUTCOME_STATUS[result.outcome])

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request, tipo: str) -> Response:
        """GET /api/v1/registro-<scope>/<tipo>/

        Filtering (search, estado, aprobacion, fecha, eliminadas) runs over
        the shared list of the family.
        """
        params = OrderFilterSerializer(data=request.query_params)
        params.is_valid(raise_exception=True)

        board = self.get_board()
        rows = board.rows(self.tipo, board.criteria(**params.validated_data))
        return Response(
            {
                "count": len(rows),
                "results": OrderRowSerializer(rows, many=True).data,
                "toasts": self._toasts(),
            }
        )

    def retrieve(self, request: Request, tipo: str, pk: str) -> Response:
        """GET /api/v1/registro-<scope>/<tipo>/{pk}/"""
        row = self.get_board().find(self.tipo, int(pk))
        if row is None:
            return Response(
                {"detail": "Orden no encontrada.", "toasts": self._toasts()},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response({**OrderRowSerializer(row).data, "toasts": self._toasts()})

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    @action(detail=True, methods=["post"])
    def aprobar(self, request: Request, tipo: str, pk: str) -> Response:
        """POST .../{pk}/aprobar/ with the role's own approval flag."""
        approval = next(
            (a for a in ROLE_ACTIONS[self.role] if a in APPROVAL_ACTIONS), None
        )
        if approval is None:
            raise PermissionDenied(FORBIDDEN_MESSAGE)
        result = self.get_service(self._confirmado(request)).approve(int(pk), approval)
        return self._result_response(result)

    @action(detail=True, methods=["post"])
    def transferir(self, request: Request, tipo: str, pk: str) -> Response:
        self.require(OrderAction.TRANSFER)
        result = self.get_service(self._confirmado(request)).transfer(int(pk))
        return self._result_response(result)

    def destroy(self, request: Request, tipo: str, pk: str) -> Response:
        """DELETE .../{pk}/ (soft delete)."""
        self.require(OrderAction.DELETE)
        result = self.get_service(self._confirmado(request)).delete(int(pk))
        return self._result_response(result)

    @action(detail=True, methods=["post"])
    def restaurar(self, request: Request, tipo: str, pk: str) -> Response:
        self.require(OrderAction.RESTORE)
        result = self.get_service(self._confirmado(request)).restore(int(pk))
        return self._result_response(result)

    @action(detail=True, methods=["post"], url_path="subir-archivo")
    def subir_archivo(self, request: Request, tipo: str, pk: str) -> Response:
        """POST .../{pk}/subir-archivo/ (multipart ``files``, 1 to 4)."""
        self.require(OrderAction.UPLOAD_OPERATION_FILE)
        serializer = OperationFilesSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        files: List[UploadFile] = [
            _to_upload(f) for f in serializer.validated_data["files"]
        ]
        result = self.get_service().upload_operation_files(int(pk), files)
        return self._result_response(result)

    @action(
        detail=True,
        methods=["post"],
        url_path="subir-comprobante-retencion",
    )
    def subir_comprobante_retencion(
        self, request: Request, tipo: str, pk: str
    ) -> Response:
        """POST .../{pk}/subir-comprobante-retencion/ (multipart ``file``, ``nro_serie``)."""
        self.require(OrderAction.UPLOAD_RETENTION_RECEIPT)
        serializer = RetentionReceiptSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        uploaded = serializer.validated_data["file"]
        result = self.get_service().upload_retention_receipt(
            int(pk),
            _to_upload(uploaded) if uploaded is not None else None,
            serializer.validated_data["nro_serie"],
        )
        return self._result_response(result)


class JefeProyectoOrderViewSet(RoleOrderViewSet):
    role = RoleScope.JEFE_PROYECTO


class GerenciaOrderViewSet(RoleOrderViewSet):
    role = RoleScope.GERENCIA


class ContabilidadOrderViewSet(RoleOrderViewSet):
    role = RoleScope.CONTABILIDAD


class LogisticaOrderViewSet(RoleOrderViewSet):
    role = RoleScope.LOGISTICA


class ControlAprobadosOrderViewSet(RoleOrderViewSet):
    role = RoleScope.CONTROL_APROBADOS


ROLE_VIEWSETS = {
    RoleScope.JEFE_PROYECTO: JefeProyectoOrderViewSet,
    RoleScope.GERENCIA: GerenciaOrderViewSet,
    RoleScope.CONTABILIDAD: ContabilidadOrderViewSet,
    RoleScope.LOGISTICA: LogisticaOrderViewSet,
    RoleScope.CONTROL_APROBADOS: ControlAprobadosOrderViewSet,
}


class PushWebhookView(APIView):
    """POST /api/v1/push/: receives Order API change notifications.

    Authenticated by the shared ``X-Push-Token`` header, not by JWT.
    """

    authentication_classes: list = []
    permission_classes = [HasPushToken]
    throttle_classes: list = []

    def post(self, request: Request) -> Response:
        serializer = PushEventSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        name = serializer.validated_data["event"]

        event = PUSH_EVENT_CLASSES[name]()
        container.get_event_bus().publish(event)
        logger.info("orders.push_published", push_event=name, event_id=str(event.event_id))
        return Response(
            {"event": name, "status": "accepted"}, status=status.HTTP_202_ACCEPTED
        )
