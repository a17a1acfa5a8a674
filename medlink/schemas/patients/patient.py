# medlink/schemas/patients/patient.py
from pydantic import BaseModel
from typing import Optional

class ConnectDoctorRequest(BaseModel):
    doctor_id: Optional[int] = None

class ConnectedDoctorResponse(BaseModel):
    doctor_id: int
