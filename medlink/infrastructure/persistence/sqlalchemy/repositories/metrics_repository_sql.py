from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy import func
from sqlmodel import Session, select

from .....db.models import HealthAggregated, HealthRealtime, SleepAnalysis
from .....application.ports.metrics_repo import (
    AGGREGATED,
    REALTIME,
    MetricReading,
    MetricsRepository,
    SleepRecord,
)

_STORES = {
    REALTIME: HealthRealtime,
    AGGREGATED: HealthAggregated,
}


def _model(store: str):
    try:
        return _STORES[store]
    except KeyError:
        raise ValueError(f"Unknown metric store: {store}")


def _metric_filter(model, metric: str):
    if metric.endswith("%"):
        return model.metric_name.like(metric)
    return model.metric_name == metric


def _as_float(value) -> Optional[float]:
    return float(value) if value is not None else None


class SqlMetricsRepository(MetricsRepository):
    def __init__(self, session: Session):
        self.session = session

    def _window(self, stmt, model, start: Optional[datetime], end: Optional[datetime]):
        if start is not None:
            stmt = stmt.where(model.timestamp >= start)
        if end is not None:
            stmt = stmt.where(model.timestamp < end)
        return stmt

    def average(self, store: str, metric: str, start: datetime, end: datetime) -> Optional[float]:
        model = _model(store)
        stmt = select(func.avg(model.value)).where(_metric_filter(model, metric))
        return _as_float(self.session.exec(self._window(stmt, model, start, end)).one())

    def total(self, store: str, metric: str, start: datetime, end: datetime) -> Optional[float]:
        model = _model(store)
        stmt = select(func.sum(model.value)).where(_metric_filter(model, metric))
        return _as_float(self.session.exec(self._window(stmt, model, start, end)).one())

    def latest(self, store: str, metric: str, start: Optional[datetime] = None, end: Optional[datetime] = None) -> Optional[float]:
        model = _model(store)
        stmt = select(model.value).where(_metric_filter(model, metric))
        stmt = self._window(stmt, model, start, end).order_by(model.timestamp.desc()).limit(1)
        return _as_float(self.session.exec(stmt).first())

    def recent(self, store: str, metric: str, limit: int) -> List[Tuple[datetime, float]]:
        model = _model(store)
        rows = self.session.exec(
            select(model.timestamp, model.value)
            .where(_metric_filter(model, metric))
            .order_by(model.timestamp.desc())
            .limit(limit)
        ).all()
        return [(ts, float(value)) for ts, value in rows]

    def series(self, store: str, metric: str, start: datetime, end: datetime) -> List[Tuple[datetime, float]]:
        model = _model(store)
        stmt = select(model.timestamp, model.value).where(_metric_filter(model, metric))
        rows = self.session.exec(self._window(stmt, model, start, end).order_by(model.timestamp)).all()
        return [(ts, float(value)) for ts, value in rows]

    def sleep_average(self, start: date, end: date) -> Optional[float]:
        stmt = (
            select(func.avg(SleepAnalysis.deep + SleepAnalysis.core + SleepAnalysis.rem))
            .where(SleepAnalysis.record_date >= start)
            .where(SleepAnalysis.record_date < end)
        )
        return _as_float(self.session.exec(stmt).one())

    def recent_sleep(self, since: date, limit: int) -> List[SleepRecord]:
        rows = self.session.exec(
            select(SleepAnalysis)
            .where(SleepAnalysis.record_date >= since)
            .order_by(SleepAnalysis.record_date.desc())
            .limit(limit)
        ).all()
        return [
            SleepRecord(
                record_date=r.record_date,
                sleep_start=r.sleep_start,
                sleep_end=r.sleep_end,
                in_bed_start=r.in_bed_start,
                in_bed_end=r.in_bed_end,
                deep=r.deep or 0.0,
                core=r.core or 0.0,
                rem=r.rem or 0.0,
                awake=r.awake or 0.0,
            )
            for r in rows
        ]

    def upsert_readings(self, store: str, metric: str, readings: List[MetricReading]) -> int:
        model = _model(store)
        try:
            for reading in readings:
                row = self.session.exec(
                    select(model)
                    .where(model.metric_name == metric)
                    .where(model.timestamp == reading.timestamp)
                ).first()
                if row:
                    row.value = reading.value
                else:
                    row = model(
                        metric_name=metric,
                        timestamp=reading.timestamp,
                        value=reading.value,
                        units=reading.units,
                        source=reading.source,
                    )
                self.session.add(row)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        return len(readings)

    def upsert_sleep(self, records: List[SleepRecord]) -> int:
        try:
            for record in records:
                row = self.session.exec(
                    select(SleepAnalysis).where(SleepAnalysis.record_date == record.record_date)
                ).first()
                if not row:
                    row = SleepAnalysis(record_date=record.record_date)
                row.sleep_start = record.sleep_start
                row.sleep_end = record.sleep_end
                row.in_bed_start = record.in_bed_start
                row.in_bed_end = record.in_bed_end
                row.deep = record.deep
                row.core = record.core
                row.rem = record.rem
                row.awake = record.awake
                self.session.add(row)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        return len(records)

    def counts(self) -> Dict[str, Any]:
        per_metric: Dict[str, int] = {}
        for model in (HealthRealtime, HealthAggregated):
            rows = self.session.exec(
                select(model.metric_name, func.count()).group_by(model.metric_name)
            ).all()
            for name, count in rows:
                per_metric[name] = per_metric.get(name, 0) + count
        return {
            REALTIME: self.session.exec(select(func.count()).select_from(HealthRealtime)).one(),
            AGGREGATED: self.session.exec(select(func.count()).select_from(HealthAggregated)).one(),
            "sleep_analysis": self.session.exec(select(func.count()).select_from(SleepAnalysis)).one(),
            "metrics": per_metric,
        }
