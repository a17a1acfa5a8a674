from dataclasses import asdict
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session
import logging

from ..core.config import settings
from ..database import get_session
from ..schemas.alerts.alert import AlertResponse, AlertActionResponse, GenerateAlertsResponse
from ..application.services.alerts_service import AlertsService
from ..application.ports.ai_provider import AIProvider
from ..application.ports.audit_logger import AuditLogger
from ..infrastructure.persistence.sqlalchemy.repositories.alerts_repository_sql import SqlAlertsRepository
from ..infrastructure.persistence.sqlalchemy.repositories.metrics_repository_sql import SqlMetricsRepository
from ..infrastructure.persistence.sqlalchemy.repositories.patients_repository_sql import SqlPatientsRepository
from .deps import CurrentUser, get_ai_provider, get_audit_logger, require_doctor, require_patient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/alerts", tags=["Alerts"])


def get_alerts_service(
    session: Session = Depends(get_session),
    ai_provider: Optional[AIProvider] = Depends(get_ai_provider),
    audit: AuditLogger = Depends(get_audit_logger),
) -> AlertsService:
    return AlertsService(
        alerts_repo=SqlAlertsRepository(session),
        patients_repo=SqlPatientsRepository(session),
        metrics_repo=SqlMetricsRepository(session),
        ai_provider=ai_provider,
        audit=audit,
        lookback_minutes=settings.ALERT_LOOKBACK_MINUTES,
        list_limit=settings.ALERT_LIST_LIMIT,
    )


@router.post("/generate", response_model=GenerateAlertsResponse)
def generate_alerts(
    current_user: CurrentUser = Depends(require_patient),
    svc: AlertsService = Depends(get_alerts_service),
):
    try:
        created = svc.generate(current_user.user_id)
        return GenerateAlertsResponse(
            message="Alerts generated successfully",
            alerts_created=len(created),
            alerts=[AlertResponse(**asdict(a)) for a in created],
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error generating alerts: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to generate alerts")


@router.get("/", response_model=List[AlertResponse])
def get_alerts(
    current_user: CurrentUser = Depends(require_patient),
    svc: AlertsService = Depends(get_alerts_service),
):
    try:
        return [AlertResponse(**asdict(a)) for a in svc.list_for_patient(current_user.user_id)]
    except Exception as e:
        logger.error(f"Error fetching alerts: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch alerts")


@router.get("/doctor", response_model=List[AlertResponse])
def get_doctor_alerts(
    current_user: CurrentUser = Depends(require_doctor),
    svc: AlertsService = Depends(get_alerts_service),
):
    try:
        return [AlertResponse(**asdict(a)) for a in svc.list_for_doctor(current_user.user_id)]
    except Exception as e:
        logger.error(f"Error fetching doctor alerts: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch alerts")


@router.put("/{alert_id}/read", response_model=AlertActionResponse)
def mark_alert_read(
    alert_id: int,
    current_user: CurrentUser = Depends(require_doctor),
    svc: AlertsService = Depends(get_alerts_service),
):
    try:
        alert = svc.mark_read(current_user.user_id, alert_id)
        return AlertActionResponse(message="Alert marked as read", alert=AlertResponse(**asdict(alert)))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error marking alert as read: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to mark alert as read")


@router.put("/{alert_id}/dismiss", response_model=AlertActionResponse)
def dismiss_alert(
    alert_id: int,
    current_user: CurrentUser = Depends(require_patient),
    svc: AlertsService = Depends(get_alerts_service),
):
    try:
        alert = svc.dismiss(current_user.user_id, alert_id)
        return AlertActionResponse(message="Alert dismissed", alert=AlertResponse(**asdict(alert)))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error dismissing alert: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to dismiss alert")
