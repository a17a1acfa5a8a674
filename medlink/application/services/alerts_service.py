from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, List, Mapping, Optional
import json
import logging
import re
from fastapi import HTTPException

from ..ports.alerts_repo import AlertsRepository, AlertDto
from ..ports.patients_repo import PatientsRepository
from ..ports.metrics_repo import MetricsRepository
from ..ports.ai_provider import AIProvider
from ..ports.audit_logger import AuditLogger
from .health_context import ALERT_SERIES, collect_series
from .prompts import build_alert_prompt

logger = logging.getLogger(__name__)

DEFAULT_ALERT_TYPE = "general"
DEFAULT_TITLE = "Health Alert"
DEFAULT_MESSAGE = "Abnormal health pattern detected"
DEFAULT_SEVERITY = "medium"

_FENCE_RE = re.compile(r"```(?:json)?\n?|\n?```")


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


@dataclass
class AlertCandidate:
    alert_type: str = DEFAULT_ALERT_TYPE
    title: str = DEFAULT_TITLE
    message: str = DEFAULT_MESSAGE
    severity: str = DEFAULT_SEVERITY
    metadata: Any = field(default_factory=dict)

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "AlertCandidate":
        return cls(
            alert_type=_text(raw.get("alert_type")) or DEFAULT_ALERT_TYPE,
            title=_text(raw.get("title")) or DEFAULT_TITLE,
            message=_text(raw.get("message")) or DEFAULT_MESSAGE,
            severity=_text(raw.get("severity")) or DEFAULT_SEVERITY,
            metadata=raw.get("metadata") or {},
        )


def parse_alert_candidates(text: Optional[str]) -> List[AlertCandidate]:
    """Turn the provider's reply into alert candidates.

    The reply should be a JSON array, optionally wrapped in a Markdown code
    fence. Anything else yields an empty list.
    """
    if not text:
        return []
    cleaned = _FENCE_RE.sub("", text).strip()
    try:
        parsed = json.loads(cleaned)
    except ValueError as e:
        logger.warning(f"Could not parse AI alert response: {e}")
        return []
    if not isinstance(parsed, list):
        logger.warning("AI alert response is not a JSON array")
        return []

    candidates: List[AlertCandidate] = []
    for item in parsed:
        if not isinstance(item, dict):
            logger.warning(f"Skipping malformed alert entry: {item!r}")
            continue
        candidates.append(AlertCandidate.from_raw(item))
    return candidates


@dataclass
class AlertsService:
    alerts_repo: AlertsRepository
    patients_repo: PatientsRepository
    metrics_repo: MetricsRepository
    ai_provider: Optional[AIProvider] = None
    audit: Optional[AuditLogger] = None
    lookback_minutes: int = 60
    list_limit: int = 50
    clock: Callable[[], datetime] = field(default=datetime.now)

    def persist_candidates(self, user_id: int, doctor_id: int, candidates: List[AlertCandidate]) -> List[AlertDto]:
        created: List[AlertDto] = []
        for candidate in candidates:
            try:
                created.append(self.alerts_repo.create(
                    user_id=user_id,
                    doctor_id=doctor_id,
                    alert_type=candidate.alert_type,
                    title=candidate.title,
                    message=candidate.message,
                    severity=candidate.severity,
                    metadata=candidate.metadata,
                ))
            except Exception as e:
                # One bad row must not cost the rest of the batch
                logger.error(f"Error inserting alert for user {user_id}: {e}")
        return created

    def generate(self, user_id: int) -> List[AlertDto]:
        doctor_id = self.patients_repo.get_doctor_id(user_id)
        if not doctor_id:
            raise HTTPException(status_code=400, detail="Patient is not assigned to a doctor")
        if self.ai_provider is None:
            logger.error("GEMINI_API_KEY not configured")
            raise HTTPException(status_code=500, detail="AI service not configured")

        end = self.clock()
        start = end - timedelta(minutes=self.lookback_minutes)
        health_data = collect_series(self.metrics_repo, ALERT_SERIES, start, end)

        try:
            reply = self.ai_provider.generate_text(build_alert_prompt(health_data))
        except Exception as e:
            logger.error(f"AI provider call failed: {e}")
            raise HTTPException(status_code=500, detail="AI service unavailable")

        candidates = parse_alert_candidates(reply)
        created = self.persist_candidates(user_id, doctor_id, candidates)
        logger.info(f"Generated {len(created)} of {len(candidates)} alerts for user {user_id}")
        if self.audit:
            self.audit.log("alerts_generated", user_id=user_id, details={"created": len(created), "candidates": len(candidates)})
        return created

    def list_for_patient(self, user_id: int) -> List[AlertDto]:
        return self.alerts_repo.list_active_for_user(user_id, self.list_limit)

    def list_for_doctor(self, doctor_id: int) -> List[AlertDto]:
        return self.alerts_repo.list_active_for_doctor(doctor_id, self.list_limit)

    def mark_read(self, doctor_id: int, alert_id: int) -> AlertDto:
        alert = self.alerts_repo.mark_read(alert_id, doctor_id)
        if not alert:
            raise HTTPException(status_code=404, detail="Alert not found")
        if self.audit:
            self.audit.log("alert_read", user_id=doctor_id, details={"alert_id": alert_id})
        return alert

    def dismiss(self, user_id: int, alert_id: int) -> AlertDto:
        alert = self.alerts_repo.dismiss(alert_id, user_id)
        if not alert:
            raise HTTPException(status_code=404, detail="Alert not found")
        if self.audit:
            self.audit.log("alert_dismissed", user_id=user_id, details={"alert_id": alert_id})
        return alert
