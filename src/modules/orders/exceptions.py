"""Order domain exceptions.

Raised by the repository and document helpers.  The transition service
catches them and turns them into toasts and ``TransitionResult`` values;
they never reach the API views.
"""

from __future__ import annotations

from modules.core.http import ExternalApiError


class OrderApiError(ExternalApiError):
    """The Order API rejected a call or could not be reached."""


class OrderNotFound(Exception):
    """The requested order is not known to the Order API."""


class UploadValidationError(Exception):
    """An upload is missing a file or a required field (blocked client-side)."""


class DocumentMergeError(Exception):
    """Selected files could not be merged into a single PDF."""
