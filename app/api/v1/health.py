"""Liveness and session-store readiness. No session required."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import check_db_connected, get_db
from app.schemas.health import HealthResponse
from app.services.sessions import session_store_available

router = APIRouter()


@router.get("/", response_model=HealthResponse)
def get_health(db: Annotated[Session, Depends(get_db)]) -> HealthResponse:
    """
    ``degraded`` when the sessions table cannot be read: every authenticated
    route fails closed with 401 in that state.
    """
    connected = check_db_connected(db)
    store_ok = connected and session_store_available(db)
    return HealthResponse(
        status="ok" if store_ok else "degraded",
        environment=settings.APP_ENV,
        database="connected" if connected else "disconnected",
        session_store="available" if store_ok else "unavailable",
    )
