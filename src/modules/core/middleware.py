import uuid
from contextvars import ContextVar
from typing import Callable

import structlog
from django.http import HttpRequest, HttpResponse

REQUEST_ID_HEADER = "X-Request-ID"

# Read by the outbound API client so upstream calls carry the same id.
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")

logger = structlog.get_logger()


class CorrelationIdMiddleware:
    """Tags every request with a correlation id.

    Uses the incoming ``X-Request-ID`` header or a new UUID4.  The id is
    bound into the structlog context for every log line of the request,
    forwarded to the Order API by ``ApiClient``, and echoed back in the
    response header.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        cid = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        token = correlation_id_var.set(cid)

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(correlation_id=cid)

        log = logger.bind(method=request.method, path=request.path)
        log.info("request.started")
        try:
            response = self.get_response(request)
        finally:
            correlation_id_var.reset(token)

        log.info("request.finished", status_code=response.status_code)
        response[REQUEST_ID_HEADER] = cid
        return response
