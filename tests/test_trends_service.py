from datetime import date, datetime

import pytest

from medlink.application.ports.metrics_repo import AGGREGATED, REALTIME
from medlink.application.services.trends_service import (
    TRACKED_METRICS,
    TrendsService,
    percentage_change,
    trend_windows,
)

TODAY = date(2024, 5, 15)  # a Wednesday


def at(day, hour=12):
    return datetime(day.year, day.month, day.day, hour)


@pytest.mark.parametrize("current,previous,expected", [
    (120, 100, 20),
    (80, 100, -20),
    (5, 0, 0),
    (5, None, 0),
    (5, "n/a", 0),
    (None, 50, -100),
    ("abc", 100, -100),
    ("150", "100", 50),
])
def test_percentage_change(current, previous, expected):
    assert percentage_change(current, previous) == pytest.approx(expected)


def test_windows_for_midweek_day():
    w = trend_windows(TODAY)
    assert (w["daily"].current_start, w["daily"].previous_start) == (date(2024, 5, 15), date(2024, 5, 14))
    assert (w["weekly"].current_start, w["weekly"].current_end) == (date(2024, 5, 13), date(2024, 5, 20))
    assert w["weekly"].previous_start == date(2024, 5, 6)
    assert (w["monthly"].current_start, w["monthly"].current_end) == (date(2024, 5, 1), date(2024, 6, 1))
    assert w["monthly"].previous_start == date(2024, 4, 1)


def test_monthly_window_wraps_year():
    w = trend_windows(date(2024, 1, 31))["monthly"]
    assert (w.previous_start, w.previous_end, w.current_end) == (date(2023, 12, 1), date(2024, 1, 1), date(2024, 2, 1))


def test_empty_store_reports_zeros(metrics_repo):
    out = TrendsService(metrics=metrics_repo, clock=lambda: TODAY).summary()
    assert set(out) == {"daily", "weekly", "monthly"}
    expected_keys = [f"{m}_{suffix}" for m in TRACKED_METRICS for suffix in ("current", "previous", "pct_change")]
    for snapshot in out.values():
        assert list(snapshot) == expected_keys
        assert all(v == 0 for v in snapshot.values())


def test_daily_heart_rate_and_calories(metrics_repo):
    yesterday = date(2024, 5, 14)
    metrics_repo.add(REALTIME, "heart_rate", at(TODAY, 8), 70)
    metrics_repo.add(REALTIME, "heart_rate", at(TODAY, 9), 90)
    metrics_repo.add(REALTIME, "heart_rate", at(yesterday), 64)
    metrics_repo.add(REALTIME, "active_energy", at(TODAY, 8), 100.4)
    metrics_repo.add(REALTIME, "active_energy", at(TODAY, 9), 200.4)
    metrics_repo.add(REALTIME, "active_energy", at(yesterday), 250)

    daily = TrendsService(metrics=metrics_repo, clock=lambda: TODAY).summary()["daily"]
    assert daily["heart_rate_current"] == 80
    assert daily["heart_rate_previous"] == 64
    assert daily["heart_rate_pct_change"] == pytest.approx(25)
    assert daily["calories_current"] == 301
    assert daily["calories_pct_change"] == pytest.approx(20.4)


def test_daily_respiratory_rate_uses_latest_reading(metrics_repo):
    metrics_repo.add(REALTIME, "respiratory_rate", at(TODAY, 6), 14)
    metrics_repo.add(REALTIME, "respiratory_rate", at(TODAY, 9), 16.6)
    daily = TrendsService(metrics=metrics_repo, clock=lambda: TODAY).summary()["daily"]
    assert daily["respiratory_rate_current"] == 17
    assert daily["respiratory_rate_previous"] == 0


def test_spo2_comes_from_aggregated_store(metrics_repo):
    metrics_repo.add(AGGREGATED, "blood_oxygen_saturation", at(TODAY), 97)
    metrics_repo.add(AGGREGATED, "blood_oxygen_saturation", at(date(2024, 5, 14)), 95)
    daily = TrendsService(metrics=metrics_repo, clock=lambda: TODAY).summary()["daily"]
    assert (daily["spo2_current"], daily["spo2_previous"]) == (97, 95)


def test_daily_temperature_groups_latest_readings_by_day(metrics_repo):
    metrics_repo.add(AGGREGATED, "apple_sleeping_wrist_temperature", at(date(2024, 5, 13), 3), 35.0)
    metrics_repo.add(AGGREGATED, "apple_sleeping_wrist_temperature", at(date(2024, 5, 14), 3), 36.0)
    metrics_repo.add(AGGREGATED, "apple_sleeping_wrist_temperature", at(TODAY, 3), 36.5)
    daily = TrendsService(metrics=metrics_repo, clock=lambda: TODAY).summary()["daily"]
    assert (daily["temperature_current"], daily["temperature_previous"]) == (36.5, 36.0)


def test_weekly_temperature_splits_at_week_start(metrics_repo):
    metrics_repo.add(AGGREGATED, "apple_sleeping_wrist_temperature", at(date(2024, 5, 10), 3), 35.0)
    metrics_repo.add(AGGREGATED, "apple_sleeping_wrist_temperature", at(date(2024, 5, 13), 3), 36.0)
    metrics_repo.add(AGGREGATED, "apple_sleeping_wrist_temperature", at(TODAY, 3), 37.0)
    weekly = TrendsService(metrics=metrics_repo, clock=lambda: TODAY).summary()["weekly"]
    assert weekly["temperature_current"] == 36.5
    assert weekly["temperature_previous"] == 35.0


def test_sleep_daily_and_weekly(metrics_repo):
    metrics_repo.add_sleep(TODAY, deep=1, core=4, rem=2)
    metrics_repo.add_sleep(date(2024, 5, 14), deep=1, core=3, rem=1)
    metrics_repo.add_sleep(date(2024, 5, 8), deep=1, core=3, rem=2)
    out = TrendsService(metrics=metrics_repo, clock=lambda: TODAY).summary()
    assert (out["daily"]["sleep_current"], out["daily"]["sleep_previous"]) == (7, 5)
    assert out["weekly"]["sleep_current"] == 6
    assert out["weekly"]["sleep_previous"] == 6
    assert out["weekly"]["sleep_pct_change"] == 0
