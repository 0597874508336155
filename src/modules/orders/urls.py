"""Order URL configuration."""

from __future__ import annotations

from django.urls import path
from rest_framework.routers import DefaultRouter

from modules.orders.views import ROLE_VIEWSETS, PushWebhookView

TIPO_PATTERN = r"(?P<tipo>compra|servicio)"

router = DefaultRouter(trailing_slash=True)
for role, viewset in ROLE_VIEWSETS.items():
    router.register(
        rf"registro-{role.value}/{TIPO_PATTERN}",
        viewset,
        basename=f"orders-{role.value}",
    )

urlpatterns = [
    path("push/", PushWebhookView.as_view(), name="orders-push"),
    *router.urls,
]
