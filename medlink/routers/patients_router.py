from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session
import logging

from ..database import get_session
from ..schemas.patients.patient import ConnectDoctorRequest, ConnectedDoctorResponse
from ..application.services.patients_service import PatientsService
from ..infrastructure.persistence.sqlalchemy.repositories.patients_repository_sql import SqlPatientsRepository
from .deps import CurrentUser, require_patient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/patients", tags=["Patients"])


def get_patients_service(session: Session = Depends(get_session)) -> PatientsService:
    return PatientsService(repo=SqlPatientsRepository(session))


@router.post("/connect-doctor", response_model=ConnectedDoctorResponse)
def connect_doctor(
    body: ConnectDoctorRequest,
    current_user: CurrentUser = Depends(require_patient),
    svc: PatientsService = Depends(get_patients_service),
):
    try:
        return ConnectedDoctorResponse(doctor_id=svc.connect_doctor(current_user.user_id, body.doctor_id))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error connecting doctor: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to connect doctor")


@router.get("/connected-doctor", response_model=ConnectedDoctorResponse)
def get_connected_doctor(
    current_user: CurrentUser = Depends(require_patient),
    svc: PatientsService = Depends(get_patients_service),
):
    try:
        return ConnectedDoctorResponse(doctor_id=svc.connected_doctor(current_user.user_id))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching connected doctor: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch connected doctor")
