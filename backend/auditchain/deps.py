"""FastAPI dependencies for reaching the audit service."""

from fastapi import Depends, HTTPException, Request, status

from auditchain.services.audit import AuditLogger
from auditchain.services.query import QueryService


def get_audit_logger(request: Request) -> AuditLogger:
    """Return the service built by the app lifespan."""
    audit = getattr(request.app.state, "audit", None)
    if audit is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Audit service not initialised",
        )
    return audit


def get_query_service(audit: AuditLogger = Depends(get_audit_logger)) -> QueryService:
    return audit.query
