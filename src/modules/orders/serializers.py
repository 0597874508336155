"""Order DRF serializers for API input/output.

The serializer operates at the Interface layer (API Views).  Input
serializers only shape the request; the transition service owns the
business checks (file count, required series number) so their failures
come back as toasts like every other transition failure.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.orders.constants import TODOS, ApprovalFilter, OrderEstado
from modules.orders.events import PUSH_EVENT_CLASSES

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class OrderFilterSerializer(serializers.Serializer):
    """Query parameters of a board listing."""

    search = serializers.CharField(required=False, allow_blank=True, default="")
    estado = serializers.ChoiceField(
        choices=[TODOS, *OrderEstado.values], required=False, default=TODOS
    )
    aprobacion = serializers.ChoiceField(
        choices=ApprovalFilter.choices, required=False, default=ApprovalFilter.TODOS
    )
    fecha = serializers.DateField(required=False, allow_null=True, default=None)
    eliminadas = serializers.BooleanField(required=False, default=False)


class TransitionSerializer(serializers.Serializer):
    """Body of a confirmable transition (approve, transfer, delete, restore)."""

    confirmado = serializers.BooleanField(required=False, default=False)


class OperationFilesSerializer(serializers.Serializer):
    files = serializers.ListField(
        child=serializers.FileField(), required=False, default=list
    )


class RetentionReceiptSerializer(serializers.Serializer):
    file = serializers.FileField(required=False, allow_null=True, default=None)
    nro_serie = serializers.CharField(required=False, allow_blank=True, default="")


class PushEventSerializer(serializers.Serializer):
    """Push notification sent by the Order API (``{"event": "ordenCompraUpdated"}``)."""

    event = serializers.ChoiceField(choices=sorted(PUSH_EVENT_CLASSES))


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class ToastSerializer(serializers.Serializer):
    level = serializers.CharField()
    message = serializers.CharField()
    description = serializers.CharField()


class DocumentLinkSerializer(serializers.Serializer):
    key = serializers.CharField()
    label = serializers.CharField()
    url = serializers.CharField(allow_null=True)
    available = serializers.BooleanField()


class OrderRowSerializer(serializers.Serializer):
    """Read serializer for one board row: order data, actions and documents."""

    id = serializers.IntegerField(source="order.id")
    tipo = serializers.CharField(source="order.tipo")
    numero_orden = serializers.CharField(source="order.numero_orden")
    fecha_orden = serializers.DateField(source="order.fecha_orden", allow_null=True)
    fecha_display = serializers.CharField(source="order.fecha_display")
    nombre_proveedor = serializers.CharField(source="order.nombre_proveedor")
    ruc_proveedor = serializers.CharField(source="order.ruc_proveedor")
    moneda = serializers.CharField(source="order.moneda")
    subtotal = serializers.DecimalField(max_digits=14, decimal_places=2, source="order.subtotal")
    igv = serializers.DecimalField(max_digits=14, decimal_places=2, source="order.igv")
    total = serializers.DecimalField(max_digits=14, decimal_places=2, source="order.total")
    total_display = serializers.CharField(source="order.total_display")
    neto_a_pagar = serializers.DecimalField(
        max_digits=14, decimal_places=2, source="order.neto_a_pagar"
    )
    estado = serializers.CharField(source="order.estado")
    auto_administrador = serializers.CharField(source="order.auto_administrador.value")
    jefe_proyecto = serializers.CharField(source="order.jefe_proyecto.value")
    auto_contabilidad = serializers.CharField(source="order.auto_contabilidad.value")
    procede_pago = serializers.CharField(source="order.procede_pago", allow_null=True)
    retencion = serializers.CharField(source="order.retencion", allow_null=True)
    valor_retencion = serializers.DecimalField(
        max_digits=14, decimal_places=2, source="order.valor_retencion"
    )
    detraccion = serializers.CharField(source="order.detraccion", allow_null=True)
    valor_detraccion = serializers.DecimalField(
        max_digits=14, decimal_places=2, source="order.valor_detraccion"
    )
    tiene_anticipo = serializers.CharField(source="order.tiene_anticipo")
    nro_serie = serializers.CharField(source="order.nro_serie", allow_null=True)
    deleted_at = serializers.DateTimeField(source="order.deleted_at", allow_null=True)
    acciones = serializers.DictField(child=serializers.BooleanField())
    documentos = DocumentLinkSerializer(many=True)
