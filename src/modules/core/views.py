import time
from typing import Any, Dict

import structlog
from django.conf import settings
from django.core.cache import cache
from django.db import connections
from django.http import HttpRequest, JsonResponse
from django.utils import timezone

from modules.core.http import ApiClient, ExternalApiError, get_http_session

logger = structlog.get_logger()


def _elapsed_ms(start: float) -> float:
    return round((time.monotonic() - start) * 1000, 2)


def check_database() -> Dict[str, Any]:
    start = time.monotonic()
    try:
        conn = connections["default"]
        conn.ensure_connection()
        with conn.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
    except Exception:
        logger.error("health_check_db_failure")
        return {"status": "down"}
    return {"status": "up", "response_time_ms": _elapsed_ms(start)}


def check_cache() -> Dict[str, Any]:
    start = time.monotonic()
    try:
        cache.set("_health_check", "ok", 10)
        if cache.get("_health_check") != "ok":
            raise ConnectionError("Cache read failed")
    except Exception as exc:
        logger.error("health_check_cache_failure", error=str(exc))
        return {"status": "down"}
    return {"status": "up", "response_time_ms": _elapsed_ms(start)}


def check_orders_api() -> Dict[str, Any]:
    """The Order API is up when it answers at all (any status below 500)."""
    start = time.monotonic()
    client = ApiClient(
        settings.ORDERS_API_BASE_URL,
        timeout=settings.ORDERS_API_HEALTH_TIMEOUT,
        session=get_http_session(),
    )
    try:
        client.get("")
    except ExternalApiError as exc:
        if exc.status_code is None or exc.status_code >= 500:
            logger.error("health_check_orders_api_failure", error=exc.message)
            return {"status": "down"}
    return {"status": "up", "response_time_ms": _elapsed_ms(start)}


def health_check(request: HttpRequest) -> JsonResponse:
    services: Dict[str, Dict[str, Any]] = {
        "database": check_database(),
        "cache": check_cache(),
        "orders_api": check_orders_api(),
    }
    overall_healthy = all(s["status"] == "up" for s in services.values())
    status_code = 200 if overall_healthy else 503

    logger.info(
        "health_check_completed", status="healthy" if overall_healthy else "unhealthy"
    )

    return JsonResponse(
        {
            "status": "healthy" if overall_healthy else "unhealthy",
            "timestamp": timezone.now().isoformat(),
            "services": services,
        },
        status=status_code,
    )
