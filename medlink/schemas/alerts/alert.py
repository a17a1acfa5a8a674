# medlink/schemas/alerts/alert.py
from pydantic import BaseModel, Field
from typing import Any, List, Optional
from datetime import datetime

class AlertResponse(BaseModel):
    id: int
    user_id: int
    doctor_id: Optional[int] = None
    alert_type: str
    title: str
    message: str
    severity: str
    is_read: bool
    is_dismissed: bool
    created_at: datetime
    metadata: Any = Field(default_factory=dict)

class GenerateAlertsResponse(BaseModel):
    message: str
    alerts_created: int
    alerts: List[AlertResponse]

class AlertActionResponse(BaseModel):
    message: str
    alert: AlertResponse
