from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session
import logging

from ..database import get_session
from ..schemas.trends.trend import TrendsResponse
from ..application.services.trends_service import TrendsService
from ..infrastructure.persistence.sqlalchemy.repositories.metrics_repository_sql import SqlMetricsRepository
from .deps import CurrentUser, get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/trends", tags=["Trends"])


def get_trends_service(session: Session = Depends(get_session)) -> TrendsService:
    return TrendsService(metrics=SqlMetricsRepository(session))


@router.get("/", response_model=TrendsResponse)
def get_trends(
    current_user: CurrentUser = Depends(get_current_user),
    svc: TrendsService = Depends(get_trends_service),
):
    try:
        return TrendsResponse(**svc.summary())
    except Exception as e:
        logger.error(f"Error fetching trend data: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch trend data")
