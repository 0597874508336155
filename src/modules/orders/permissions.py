"""Permissions for the Order API push webhook."""

from __future__ import annotations

import secrets

from django.conf import settings
from rest_framework.permissions import BasePermission

PUSH_TOKEN_HEADER = "X-Push-Token"


class HasPushToken(BasePermission):
    """Grants access when ``X-Push-Token`` matches ``PUSH_WEBHOOK_TOKEN``.

    An unset token closes the webhook.
    """

    message = "Invalid push token."

    def has_permission(self, request, view) -> bool:
        expected = settings.PUSH_WEBHOOK_TOKEN
        provided = request.headers.get(PUSH_TOKEN_HEADER, "")
        if not expected or not provided:
            return False
        return secrets.compare_digest(provided.encode(), expected.encode())
