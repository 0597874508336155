"""HTTP client for the external REST APIs this back-office consumes.

Wraps a ``requests.Session`` with the configured base URL and timeout,
forwards the request correlation id as ``X-Request-ID``, unwraps the
``{"data": ...}`` envelope some endpoints use, and turns every transport
or HTTP failure into ``ExternalApiError`` carrying the server message.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Dict, Optional

import requests
import structlog

from modules.core.middleware import correlation_id_var

logger = structlog.get_logger(__name__)

GENERIC_ERROR_MESSAGE = "Error desconocido"

# Keys of the {"data": ...} envelope; other bodies are returned as-is.
_ENVELOPE_KEYS = frozenset({"data", "message", "success", "status", "total"})


@lru_cache(maxsize=1)
def get_http_session() -> requests.Session:
    """Process-wide session; clients share its connection pool."""
    return requests.Session()


class ExternalApiError(Exception):
    """An external API call failed.

    ``message`` is what the server said (or a generic fallback) and is safe
    to show to the user.
    """

    def __init__(self, message: str = GENERIC_ERROR_MESSAGE, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message or GENERIC_ERROR_MESSAGE
        self.status_code = status_code


class ApiClient:
    """Thin JSON client bound to one base URL."""

    error_class: type[ExternalApiError] = ExternalApiError

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
        error_class: Optional[type[ExternalApiError]] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or get_http_session()
        if error_class is not None:
            self.error_class = error_class

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    # ------------------------------------------------------------------
    # Verbs
    # ------------------------------------------------------------------

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("GET", path, params=params)

    def post(
        self,
        path: str,
        json: Any = None,
        data: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
    ) -> Any:
        return self.request("POST", path, json=json, data=data, files=files)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)

    def request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = self.url(path)
        headers = {"Accept": "application/json"}
        cid = correlation_id_var.get()
        if cid:
            headers["X-Request-ID"] = cid

        log = logger.bind(method=method, url=url)
        try:
            response = self._session.request(
                method, url, headers=headers, timeout=self.timeout, **kwargs
            )
        except requests.RequestException as exc:
            log.warning("external_api.unreachable", error=str(exc))
            raise self.error_class(
                "No se pudo conectar con el servidor"
            ) from exc

        if not response.ok:
            message = self._error_message(response)
            log.warning(
                "external_api.error",
                status_code=response.status_code,
                error=message,
            )
            raise self.error_class(message, status_code=response.status_code)

        log.info("external_api.ok", status_code=response.status_code)
        return self._payload(response)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _payload(response: requests.Response) -> Any:
        if not response.content:
            return None
        try:
            body = response.json()
        except ValueError:
            return None
        if isinstance(body, dict) and "data" in body and set(body) <= _ENVELOPE_KEYS:
            return body["data"]
        return body

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            for key in ("message", "error", "detail"):
                value = body.get(key)
                if isinstance(value, str) and value:
                    return value
        return f"{GENERIC_ERROR_MESSAGE} (HTTP {response.status_code})"
