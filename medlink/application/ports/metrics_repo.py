from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple
from datetime import date, datetime

REALTIME = "realtime"
AGGREGATED = "aggregated"

# Metric names ending in "%" are matched as prefixes
WRIST_TEMPERATURE = "apple_sleeping_wrist_temperatur%"


@dataclass
class MetricReading:
    timestamp: datetime
    value: float
    units: Optional[str] = None
    source: Optional[str] = None


@dataclass
class SleepRecord:
    record_date: date
    sleep_start: Optional[datetime] = None
    sleep_end: Optional[datetime] = None
    in_bed_start: Optional[datetime] = None
    in_bed_end: Optional[datetime] = None
    deep: float = 0.0
    core: float = 0.0
    rem: float = 0.0
    awake: float = 0.0

    @property
    def total_hours(self) -> float:
        return self.deep + self.core + self.rem


class MetricsRepository:
    def average(self, store: str, metric: str, start: datetime, end: datetime) -> Optional[float]:
        ...

    def total(self, store: str, metric: str, start: datetime, end: datetime) -> Optional[float]:
        ...

    def latest(self, store: str, metric: str, start: Optional[datetime] = None, end: Optional[datetime] = None) -> Optional[float]:
        ...

    def recent(self, store: str, metric: str, limit: int) -> List[Tuple[datetime, float]]:
        """Most recent readings, newest first."""
        ...

    def series(self, store: str, metric: str, start: datetime, end: datetime) -> List[Tuple[datetime, float]]:
        """Readings in [start, end), oldest first."""
        ...

    def sleep_average(self, start: date, end: date) -> Optional[float]:
        ...

    def recent_sleep(self, since: date, limit: int) -> List[SleepRecord]:
        """Sleep records on or after ``since``, newest first."""
        ...

    def upsert_readings(self, store: str, metric: str, readings: List[MetricReading]) -> int:
        ...

    def upsert_sleep(self, records: List[SleepRecord]) -> int:
        ...

    def counts(self) -> Dict[str, Any]:
        ...
