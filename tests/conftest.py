from collections import defaultdict
from statistics import mean

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from medlink.database import create_db_and_tables
from medlink.application.ports.metrics_repo import SleepRecord


class FakeMetricsRepo:
    """In-memory stand-in for the metric store."""

    def __init__(self):
        self.readings = defaultdict(dict)  # (store, metric) -> {timestamp: value}
        self.sleep = {}

    def add(self, store, metric, ts, value):
        self.readings[(store, metric)][ts] = value

    def add_sleep(self, record_date, deep=0.0, core=0.0, rem=0.0):
        self.sleep[record_date] = SleepRecord(record_date=record_date, deep=deep, core=core, rem=rem)

    def _rows(self, store, metric, start=None, end=None):
        prefix = metric[:-1] if metric.endswith("%") else None
        rows = []
        for (s, m), values in self.readings.items():
            if s != store:
                continue
            if m == metric or (prefix is not None and m.startswith(prefix)):
                rows.extend(values.items())
        return sorted(
            (ts, v) for ts, v in rows
            if (start is None or ts >= start) and (end is None or ts < end)
        )

    def average(self, store, metric, start, end):
        values = [v for _, v in self._rows(store, metric, start, end)]
        return mean(values) if values else None

    def total(self, store, metric, start, end):
        values = [v for _, v in self._rows(store, metric, start, end)]
        return sum(values) if values else None

    def latest(self, store, metric, start=None, end=None):
        rows = self._rows(store, metric, start, end)
        return rows[-1][1] if rows else None

    def recent(self, store, metric, limit):
        return list(reversed(self._rows(store, metric)))[:limit]

    def series(self, store, metric, start, end):
        return self._rows(store, metric, start, end)

    def sleep_average(self, start, end):
        values = [r.total_hours for d, r in self.sleep.items() if start <= d < end]
        return mean(values) if values else None

    def recent_sleep(self, since, limit):
        records = sorted((r for d, r in self.sleep.items() if d >= since), key=lambda r: r.record_date, reverse=True)
        return records[:limit]

    def upsert_readings(self, store, metric, readings):
        for r in readings:
            self.add(store, metric, r.timestamp, r.value)
        return len(readings)

    def upsert_sleep(self, records):
        for r in records:
            self.sleep[r.record_date] = r
        return len(records)

    def counts(self):
        return {
            "realtime": sum(len(v) for (s, _), v in self.readings.items() if s == "realtime"),
            "aggregated": sum(len(v) for (s, _), v in self.readings.items() if s == "aggregated"),
            "sleep_analysis": len(self.sleep),
            "metrics": {m: len(v) for (_, m), v in self.readings.items()},
        }


@pytest.fixture
def metrics_repo():
    return FakeMetricsRepo()


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_db_and_tables(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as s:
        yield s
