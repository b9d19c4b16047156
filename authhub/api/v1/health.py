"""Health check: database connectivity and the login methods this process serves."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from authhub.auth import get_strategy_registry
from authhub.core.config import settings
from authhub.core.database import check_db_connected, get_db
from authhub.schemas.health import HealthResponse

router = APIRouter()


@router.get("/", response_model=HealthResponse)
def get_health(db: Session = Depends(get_db)) -> HealthResponse:
    """Used by load balancers and monitoring."""
    db_status = "connected" if check_db_connected(db) else "disconnected"

    return HealthResponse(
        status="ok",
        environment=settings.APP_ENV,
        database=db_status,
        auth_methods=get_strategy_registry().implemented_ids(),
    )
