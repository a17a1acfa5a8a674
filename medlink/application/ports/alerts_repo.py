from dataclasses import dataclass, field
from typing import Any, List, Optional
from datetime import datetime


@dataclass
class AlertDto:
    id: int
    user_id: int
    doctor_id: Optional[int]
    alert_type: str
    title: str
    message: str
    severity: str
    is_read: bool
    is_dismissed: bool
    created_at: datetime
    metadata: Any = field(default_factory=dict)


class AlertsRepository:
    def create(self, user_id: int, doctor_id: Optional[int], alert_type: str, title: str, message: str, severity: str, metadata: Any) -> AlertDto:
        ...

    def list_active_for_user(self, user_id: int, limit: int) -> List[AlertDto]:
        ...

    def list_active_for_doctor(self, doctor_id: int, limit: int) -> List[AlertDto]:
        ...

    def mark_read(self, alert_id: int, doctor_id: int) -> Optional[AlertDto]:
        ...

    def dismiss(self, alert_id: int, user_id: int) -> Optional[AlertDto]:
        ...
