import time
from typing import Any, Callable, Dict

import structlog
from django.core.cache import cache
from django.db import connections
from django.http import HttpRequest, JsonResponse
from django.utils import timezone

logger = structlog.get_logger(__name__)


def _ping_database() -> None:
    conn = connections["default"]
    conn.ensure_connection()
    with conn.cursor() as cursor:
        cursor.execute("SELECT 1")
        cursor.fetchone()


def _ping_cache() -> None:
    cache.set("_health_check", "ok", 10)
    if cache.get("_health_check") != "ok":
        raise ConnectionError("Cache read failed")


def _ping_broker() -> None:
    from config.celery import app

    with app.connection_for_write() as conn:
        conn.ensure_connection(max_retries=1)


HEALTH_CHECKS: Dict[str, Callable[[], None]] = {
    "database": _ping_database,
    "cache": _ping_cache,
    "broker": _ping_broker,
}

# The shop keeps taking orders without the broker; side effects queue up.
NON_CRITICAL_SERVICES = {"broker"}


def health_check(request: HttpRequest) -> JsonResponse:
    """Report reachability of the database, cache and task broker.

    Returns 503 only when a critical service (database, cache) is down.
    """
    services: Dict[str, Dict[str, Any]] = {}
    overall_healthy = True

    for name, ping in HEALTH_CHECKS.items():
        start = time.monotonic()
        try:
            ping()
        except Exception:
            services[name] = {"status": "down"}
            logger.error("health_check.service_down", service=name)
            if name not in NON_CRITICAL_SERVICES:
                overall_healthy = False
            continue
        services[name] = {
            "status": "up",
            "response_time_ms": round((time.monotonic() - start) * 1000, 2),
        }

    label = "healthy" if overall_healthy else "unhealthy"
    logger.info("health_check.completed", status=label)

    return JsonResponse(
        {
            "status": label,
            "timestamp": timezone.now().isoformat(),
            "services": services,
        },
        status=200 if overall_healthy else 503,
    )
