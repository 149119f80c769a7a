"""Health check endpoints for load balancers and monitoring."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from auditchain.config import settings
from auditchain.deps import get_audit_logger
from auditchain.services.audit import AuditLogger

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """Lightweight liveness check (no store/ledger access)."""
    return {
        "status": "ok",
        "service": "AuditChain",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.environment,
    }


@router.get("/health/ready")
async def readiness_check(audit: AuditLogger = Depends(get_audit_logger)):
    """Readiness: the store answers a query; mirror queue stats are reported.

    A backed-up or failing mirror does not make the service unready:
    the store is authoritative and writes still succeed without it.
    """
    checks = {
        "service": "ok",
        "store": "unknown",
    }
    healthy = True

    try:
        await audit.query.count_logs()
        checks["store"] = "ok"
    except Exception as e:
        checks["store"] = f"error: {str(e)[:100]}"
        healthy = False

    mirror = audit.dispatcher.stats() if audit.dispatcher is not None else {"running": False}

    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "healthy" if healthy else "unhealthy",
            "service": "AuditChain",
            "checks": checks,
            "mirror": mirror,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )
