import json
import logging
from datetime import datetime
from typing import Any, List, Optional
from sqlmodel import Session, select

from .....db.models import Alert, Patient
from .....application.ports.alerts_repo import AlertsRepository, AlertDto

logger = logging.getLogger(__name__)


class SqlAlertsRepository(AlertsRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, a: Alert) -> AlertDto:
        try:
            metadata = json.loads(a.meta_json) if a.meta_json else {}
        except ValueError:
            logger.warning(f"Alert {a.id} has unreadable metadata")
            metadata = {}
        return AlertDto(
            id=a.id,
            user_id=a.user_id,
            doctor_id=a.doctor_id,
            alert_type=a.alert_type,
            title=a.title,
            message=a.message,
            severity=a.severity,
            is_read=bool(a.is_read),
            is_dismissed=bool(a.is_dismissed),
            created_at=a.created_at,
            metadata=metadata,
        )

    def create(self, user_id: int, doctor_id: Optional[int], alert_type: str, title: str, message: str, severity: str, metadata: Any) -> AlertDto:
        alert = Alert(
            user_id=user_id,
            doctor_id=doctor_id,
            alert_type=alert_type,
            title=title,
            message=message,
            severity=severity,
            meta_json=json.dumps(metadata if metadata is not None else {}, default=str),
            is_read=False,
            is_dismissed=False,
            created_at=datetime.utcnow(),
        )
        try:
            self.session.add(alert)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        self.session.refresh(alert)
        return self._to_dto(alert)

    def list_active_for_user(self, user_id: int, limit: int) -> List[AlertDto]:
        rows = self.session.exec(
            select(Alert)
            .where(Alert.user_id == user_id)
            .where(Alert.is_dismissed == False)  # noqa: E712
            .order_by(Alert.created_at.desc(), Alert.id.desc())
            .limit(limit)
        ).all()
        return [self._to_dto(r) for r in rows]

    @staticmethod
    def _linked_patients(doctor_id: int):
        # Ownership follows the patient's current doctor link
        return select(Patient.user_id).where(Patient.doctor_id == doctor_id)

    def list_active_for_doctor(self, doctor_id: int, limit: int) -> List[AlertDto]:
        rows = self.session.exec(
            select(Alert)
            .where(Alert.user_id.in_(self._linked_patients(doctor_id)))
            .where(Alert.is_dismissed == False)  # noqa: E712
            .order_by(Alert.created_at.desc(), Alert.id.desc())
            .limit(limit)
        ).all()
        return [self._to_dto(r) for r in rows]

    def mark_read(self, alert_id: int, doctor_id: int) -> Optional[AlertDto]:
        alert = self.session.exec(
            select(Alert)
            .where(Alert.id == alert_id)
            .where(Alert.user_id.in_(self._linked_patients(doctor_id)))
        ).first()
        if not alert:
            return None
        alert.is_read = True
        self.session.add(alert)
        self.session.commit()
        self.session.refresh(alert)
        return self._to_dto(alert)

    def dismiss(self, alert_id: int, user_id: int) -> Optional[AlertDto]:
        alert = self.session.exec(
            select(Alert).where(Alert.id == alert_id).where(Alert.user_id == user_id)
        ).first()
        if not alert:
            return None
        alert.is_dismissed = True
        self.session.add(alert)
        self.session.commit()
        self.session.refresh(alert)
        return self._to_dto(alert)
