"""Health check endpoint."""

from datetime import datetime

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text

from approved_revs import __version__
from approved_revs.api.deps import get_engine
from approved_revs.core.approval import ApprovedRevs

router = APIRouter(tags=["health"])


@router.get("/health")
def health_check(engine: ApprovedRevs = Depends(get_engine)):
    """
    Basic health check.

    Returns 200 when the approval database answers, 503 otherwise.
    """
    try:
        with engine.repository.read_session_factory() as session:
            session.execute(text("SELECT 1"))
        database = {"status": "healthy"}
    except Exception as e:
        database = {"status": "unhealthy", "error": str(e)}

    healthy = database["status"] == "healthy"
    return JSONResponse(
        status_code=200 if healthy else 503,
        content={
            "status": "healthy" if healthy else "unhealthy",
            "version": __version__,
            "checks": {"database": database},
            "timestamp": datetime.utcnow().isoformat(),
        },
    )
