from typing import Any, Dict
from fastapi import APIRouter, Body, Depends, HTTPException
from sqlmodel import Session
import logging

from ..database import get_session
from ..schemas.health.health import IngestResponse, HealthSummaryResponse
from ..application.services.health_ingest_service import HealthIngestService
from ..infrastructure.persistence.sqlalchemy.repositories.metrics_repository_sql import SqlMetricsRepository
from .deps import CurrentUser, get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Health Data"])


def get_ingest_service(session: Session = Depends(get_session)) -> HealthIngestService:
    return HealthIngestService(metrics_repo=SqlMetricsRepository(session))


@router.post("/data", response_model=IngestResponse, response_model_exclude_none=True)
def ingest_health_data(
    payload: Dict[str, Any] = Body(...),
    svc: HealthIngestService = Depends(get_ingest_service),
):
    # Pushed by the phone's export app, which carries no user token
    try:
        result = svc.ingest(payload)
        return IngestResponse(
            success=True,
            message=f"Processed {result.inserted} health records",
            inserted=result.inserted,
            errors=result.errors or None,
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error processing health data: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to process health data")


@router.get("/health/summary", response_model=HealthSummaryResponse)
def get_health_summary(
    current_user: CurrentUser = Depends(get_current_user),
    svc: HealthIngestService = Depends(get_ingest_service),
):
    try:
        return HealthSummaryResponse(**svc.summary())
    except Exception as e:
        logger.error(f"Error fetching health summary: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch health summary")
