"""DRF exception handler rendering the standard error envelope.

Every error answered by the API has the shape::

    {"type": "validation_error",
     "errors": [{"code": "required", "detail": "...", "attr": "nro_serie"}]}

``type`` is ``validation_error`` (400), ``client_error`` (other 4xx) or
``server_error`` (5xx).  Nested validation errors are flattened with
dotted ``attr`` paths (``files.0``).
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from rest_framework import exceptions
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = structlog.get_logger(__name__)


def _flatten(detail: Any, attr: Optional[str] = None) -> List[Dict[str, Any]]:
    if isinstance(detail, dict):
        errors = []
        for key, value in detail.items():
            if key == "non_field_errors":
                child = attr
            else:
                child = f"{attr}.{key}" if attr else str(key)
            errors.extend(_flatten(value, child))
        return errors
    if isinstance(detail, list):
        errors = []
        for index, value in enumerate(detail):
            if isinstance(value, (dict, list)):
                errors.extend(_flatten(value, f"{attr}.{index}" if attr else str(index)))
            else:
                errors.extend(_flatten(value, attr))
        return errors
    code = getattr(detail, "code", None) or "error"
    return [{"code": code, "detail": str(detail), "attr": attr}]


def _error_type(exc: exceptions.APIException, status_code: int) -> str:
    if isinstance(exc, exceptions.ValidationError):
        return "validation_error"
    if status_code >= 500:
        return "server_error"
    return "client_error"


def api_exception_handler(exc: Exception, context: Dict[str, Any]) -> Optional[Response]:
    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, exceptions.APIException):
        detail = exc.detail
        error_type = _error_type(exc, response.status_code)
    else:
        # Http404 / PermissionDenied from Django, already translated by DRF.
        detail = response.data.get("detail", response.data)
        error_type = "client_error"

    errors = _flatten(detail)
    if isinstance(exc, exceptions.APIException) and not isinstance(
        exc, exceptions.ValidationError
    ):
        for error in errors:
            if error["code"] == "error":
                error["code"] = exc.default_code

    view = context.get("view")
    logger.info(
        "api.error",
        type=error_type,
        status_code=response.status_code,
        view=type(view).__name__ if view is not None else None,
    )
    response.data = {"type": error_type, "errors": errors}
    return response
