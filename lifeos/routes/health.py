# lifeos/routes/health.py
"""
Liveness and readiness endpoints.
"""

import time
from zoneinfo import ZoneInfoNotFoundError

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from lifeos.config import settings
from lifeos.db.pool import db_health_check

router = APIRouter(tags=["health"])


@router.get("/healthz")
async def healthz():
    """Basic health check - always returns 200 if app is running."""
    return {"status": "ok", "service": "lifeos"}


@router.get("/readyz")
async def readyz():
    """
    Readiness check covering the database pool and configuration.
    Returns 503 when any check fails.
    """
    checks = {}
    overall_ok = True

    t0 = time.time()
    try:
        db_health = await db_health_check()
    except Exception as e:
        db_health = {"healthy": False, "error": f"{type(e).__name__}: {e}"}

    is_healthy = db_health.get("healthy", False)
    checks["database"] = {
        "ok": is_healthy,
        "latency_ms": round((time.time() - t0) * 1000, 1),
    }

    if "pool_stats" in db_health:
        checks["database"].update(db_health["pool_stats"])
        checks["database"]["connection_time_ms"] = db_health.get("connection_time_ms", 0)

    if "warnings" in db_health:
        checks["database"]["warnings"] = db_health["warnings"]

    if not is_healthy:
        checks["database"]["error"] = db_health.get("error", "Database unhealthy")

    overall_ok = overall_ok and is_healthy

    config_issues = []
    if not settings.DATABASE_URL:
        config_issues.append("DATABASE_URL not set")
    try:
        settings.local_timezone()
    except (ZoneInfoNotFoundError, ValueError):
        config_issues.append(f"Unknown APP_TIMEZONE: {settings.APP_TIMEZONE}")

    checks["configuration"] = {
        "ok": not config_issues,
        "issues": config_issues or None,
        "environment": settings.environment,
    }
    overall_ok = overall_ok and not config_issues

    body = {"overall_ok": overall_ok, "checks": checks, "timestamp": time.time()}
    return JSONResponse(content=body, status_code=200 if overall_ok else 503)
