# medlink/db/models/health/metric.py
from typing import Optional
from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field
from datetime import datetime, date

class HealthRealtime(SQLModel, table=True):
    """High-frequency samples (heart rate, steps, active energy, respiratory rate)."""
    __tablename__ = "health_realtime"
    __table_args__ = (UniqueConstraint("metric_name", "timestamp", name="health_realtime_uniq"),)
    id: Optional[int] = Field(default=None, primary_key=True)
    metric_name: str = Field(index=True)
    timestamp: datetime = Field(index=True)
    value: float
    units: Optional[str] = Field(default=None)
    source: Optional[str] = Field(default=None)

class HealthAggregated(SQLModel, table=True):
    """Periodic values (HRV, SpO2, wrist temperature, daylight, exercise time...)."""
    __tablename__ = "health_aggregated"
    __table_args__ = (UniqueConstraint("metric_name", "timestamp", name="health_aggregated_uniq"),)
    id: Optional[int] = Field(default=None, primary_key=True)
    metric_name: str = Field(index=True)
    timestamp: datetime = Field(index=True)
    value: float
    units: Optional[str] = Field(default=None)
    source: Optional[str] = Field(default=None)

class SleepAnalysis(SQLModel, table=True):
    __tablename__ = "sleep_analysis"
    id: Optional[int] = Field(default=None, primary_key=True)
    record_date: date = Field(unique=True, index=True)
    sleep_start: Optional[datetime] = Field(default=None)
    sleep_end: Optional[datetime] = Field(default=None)
    in_bed_start: Optional[datetime] = Field(default=None)
    in_bed_end: Optional[datetime] = Field(default=None)
    # hours per stage
    deep: float = Field(default=0)
    core: float = Field(default=0)
    rem: float = Field(default=0)
    awake: float = Field(default=0)
