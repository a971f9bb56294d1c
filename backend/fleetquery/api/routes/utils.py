"""
Probes for the orchestrator.

Both answer ``true`` when healthy and a 503 envelope listing the failed
checks otherwise.
"""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from fleetquery.api.deps import SourceDep
from fleetquery.core.health import liveness_check, readiness_check

router = APIRouter(prefix="/utils", tags=["utils"])


def _probe_result(ok: bool, failures: list[str], message: str) -> bool | JSONResponse:
    if ok:
        return True
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"success": False, "message": message, "data": failures},
    )


@router.get("/liveness/", response_model=None)
def liveness() -> bool | JSONResponse:
    """Process is up; touches no database."""
    return _probe_result(*liveness_check(), "Process unhealthy")


@router.get("/health-check/", response_model=None)
def health_check(source: SourceDep) -> bool | JSONResponse:
    """A pooled connection answers SELECT 1."""
    return _probe_result(*readiness_check(source), "Service Unavailable")
