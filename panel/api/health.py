"""Health check endpoint with database connectivity and role seed checks."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from panel.core.config import settings
from panel.core.database import check_db_connected, get_db
from panel.models import DEFAULT_ROLE_NAMES
from panel.repositories import RoleStore
from panel.schemas.health import HealthResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def get_health(db: Session = Depends(get_db)) -> HealthResponse:
    """
    Return service health status, database connectivity and whether default roles are seeded.
    Used by load balancers and monitoring.
    """
    if not check_db_connected(db):
        return HealthResponse(environment=settings.APP_ENV, database="disconnected")

    seeded = RoleStore(db).find_all_by_names(DEFAULT_ROLE_NAMES)
    return HealthResponse(
        status="ok",
        environment=settings.APP_ENV,
        database="connected",
        roles_seeded=len(seeded) == len(DEFAULT_ROLE_NAMES),
    )
