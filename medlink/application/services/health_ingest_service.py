from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional
import logging
from fastapi import HTTPException

from ..ports.metrics_repo import AGGREGATED, REALTIME, MetricReading, MetricsRepository, SleepRecord

logger = logging.getLogger(__name__)

# High-frequency metrics land in the realtime store, everything else is aggregated
REALTIME_METRICS = ("heart_rate", "step_count", "active_energy", "respiratory_rate")

SLEEP_METRIC = "sleep_analysis"

_TIMESTAMP_FORMATS = ("%Y-%m-%d %H:%M:%S %z", "%Y-%m-%d %H:%M:%S")


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an export timestamp into a naive local datetime."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        parsed = None
        text = value.strip()
        for fmt in _TIMESTAMP_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
        if parsed is None:
            try:
                parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
            except ValueError:
                return None
    else:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def _number(value: Any, default: Optional[float] = None) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def normalize_sample(sample: Any, units: Optional[str] = None) -> Optional[MetricReading]:
    if not isinstance(sample, dict):
        return None
    raw_value = next((sample[k] for k in ("qty", "Avg", "value") if sample.get(k) is not None), None)
    raw_ts = sample.get("date") or sample.get("timestamp")
    value = _number(raw_value)
    timestamp = parse_timestamp(raw_ts)
    if value is None or timestamp is None:
        return None
    return MetricReading(timestamp=timestamp, value=value, units=units, source=sample.get("source"))


def _record_date(value: Any) -> Optional[date]:
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    parsed = parse_timestamp(value)
    if parsed is not None:
        return parsed.date()
    if isinstance(value, str):
        try:
            return datetime.strptime(value.strip()[:10], "%Y-%m-%d").date()
        except ValueError:
            return None
    return None


def normalize_sleep_sample(sample: Any) -> Optional[SleepRecord]:
    if not isinstance(sample, dict):
        return None
    record_date = _record_date(sample.get("date"))
    if record_date is None:
        return None
    return SleepRecord(
        record_date=record_date,
        sleep_start=parse_timestamp(sample.get("sleepStart")),
        sleep_end=parse_timestamp(sample.get("sleepEnd")),
        in_bed_start=parse_timestamp(sample.get("inBedStart")),
        in_bed_end=parse_timestamp(sample.get("inBedEnd")),
        deep=_number(sample.get("deep"), 0.0),
        core=_number(sample.get("core"), 0.0),
        rem=_number(sample.get("rem"), 0.0),
        awake=_number(sample.get("awake"), 0.0),
    )


@dataclass
class IngestResult:
    inserted: int = 0
    errors: List[str] = field(default_factory=list)


@dataclass
class HealthIngestService:
    metrics_repo: MetricsRepository

    def ingest(self, payload: Any) -> IngestResult:
        data = payload.get("data") if isinstance(payload, dict) else None
        metrics = data.get("metrics") if isinstance(data, dict) else None
        if not isinstance(metrics, list):
            raise HTTPException(status_code=400, detail="Invalid data format - expected data.metrics array")

        result = IngestResult()
        for metric in metrics:
            name = metric.get("name") if isinstance(metric, dict) else None
            if not name:
                result.errors.append("unknown: metric entry has no name")
                continue
            samples = metric.get("data") or []
            try:
                result.inserted += self._ingest_metric(name, metric.get("units"), samples)
            except Exception as e:
                logger.error(f"Error processing metric {name}: {e}")
                result.errors.append(f"{name}: {e}")
        logger.info(f"Ingested {result.inserted} records from {len(metrics)} metrics")
        return result

    def _ingest_metric(self, name: str, units: Optional[str], samples: List[Any]) -> int:
        if name == SLEEP_METRIC:
            records = [r for r in (normalize_sleep_sample(s) for s in samples) if r is not None]
            dropped = len(samples) - len(records)
            count = self.metrics_repo.upsert_sleep(records) if records else 0
        else:
            readings = [r for r in (normalize_sample(s, units) for s in samples) if r is not None]
            dropped = len(samples) - len(readings)
            store = REALTIME if name in REALTIME_METRICS else AGGREGATED
            count = self.metrics_repo.upsert_readings(store, name, readings) if readings else 0
        if dropped:
            logger.warning(f"Dropped {dropped} malformed samples for {name}")
        return count

    def summary(self) -> Dict[str, Any]:
        return self.metrics_repo.counts()
