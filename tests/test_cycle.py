"""
Tests for next period prediction.
"""
import pytest
from datetime import date

from src.models.cycle import CycleRecord
from src.models.insights import StoreDashboard
from src.services.cycle import (
    calculate_fertile_window,
    predict_from_records,
    predict_next_period,
    resolve_cycle_length
)

def test_predict_with_average():
    """Test prediction from a 30-day average."""
    prediction = predict_next_period(date(2025, 1, 1), 30, today=date(2025, 1, 10))

    assert prediction.predicted_date == date(2025, 1, 31)
    assert prediction.days_until_next == 21
    assert prediction.cycle_length_used == 30
    assert prediction.source == "local"

def test_predict_without_average_uses_default():
    """Missing averages fall back to 28 days."""
    prediction = predict_next_period(date(2025, 1, 1), None, today=date(2025, 1, 10))
    assert prediction.predicted_date == date(2025, 1, 29)
    assert prediction.cycle_length_used == 28

def test_resolve_cycle_length_rounds_half_up():
    """Test rounding of fractional averages."""
    assert resolve_cycle_length(28.5) == 29
    assert resolve_cycle_length(28.4) == 28
    assert resolve_cycle_length(27.5) == 28
    assert resolve_cycle_length(0) == 28
    assert resolve_cycle_length(-3) == 28

def test_overdue_period_clamps_countdown():
    """A predicted date in the past gives zero days, never negative."""
    prediction = predict_next_period(date(2025, 1, 1), 28, today=date(2025, 3, 1))
    assert prediction.days_until_next == 0

def test_ovulation_and_fertile_window():
    """Ovulation sits 14 days before the predicted date with two days either side."""
    prediction = predict_next_period(date(2025, 1, 1), 30, today=date(2025, 1, 10))

    assert prediction.ovulation_date == date(2025, 1, 17)
    assert prediction.fertile_window.start_date == date(2025, 1, 15)
    assert prediction.fertile_window.end_date == date(2025, 1, 19)
    assert prediction.fertile_window.length_days == 5
    assert prediction.fertile_window.contains(date(2025, 1, 17))
    assert not prediction.fertile_window.contains(date(2025, 1, 20))

def test_fertile_window_direct():
    """Test window for a standalone date."""
    window = calculate_fertile_window(date(2025, 3, 1))
    assert window.start_date == date(2025, 2, 13)
    assert window.end_date == date(2025, 2, 17)

def test_confidence_is_fixed():
    """Test confidence and its display label."""
    prediction = predict_next_period(date(2025, 1, 1), 28, today=date(2025, 1, 2))
    assert prediction.confidence == 0.98
    assert prediction.confidence_label == "98%"

def test_server_prediction_takes_precedence():
    """A server next period date overrides local recomputation."""
    dashboard = StoreDashboard(next_period_date=date(2025, 2, 3), next_period_days=5)

    prediction = predict_next_period(
        date(2025, 1, 1), 30, today=date(2025, 1, 10), server_prediction=dashboard
    )

    assert prediction.predicted_date == date(2025, 2, 3)
    assert prediction.days_until_next == 5
    assert prediction.ovulation_date == date(2025, 1, 20)
    assert prediction.source == "server"

def test_server_prediction_without_countdown():
    """The countdown is computed locally when the server omits it."""
    dashboard = StoreDashboard(next_period_date="2025-02-03T00:00:00.000Z")

    prediction = predict_next_period(
        date(2025, 1, 1), 30, today=date(2025, 1, 30), server_prediction=dashboard
    )

    assert prediction.predicted_date == date(2025, 2, 3)
    assert prediction.days_until_next == 4

def test_empty_server_prediction_is_ignored():
    """A dashboard without a date does not override anything."""
    prediction = predict_next_period(
        date(2025, 1, 1), 30, today=date(2025, 1, 10), server_prediction=StoreDashboard()
    )
    assert prediction.predicted_date == date(2025, 1, 31)
    assert prediction.source == "local"

def test_predict_from_records_uses_latest_start(irregular_records):
    """Unsorted histories predict from the most recent start."""
    prediction = predict_from_records(irregular_records, 27, today=date(2024, 3, 25))

    assert prediction.predicted_date == date(2024, 4, 18)
    assert prediction.days_until_next == 24

def test_predict_from_records_without_history():
    """No records, no prediction."""
    assert predict_from_records([], 28, today=date(2025, 1, 1)) is None

def test_predict_from_single_record():
    """A single record predicts with the default cycle length."""
    records = [CycleRecord(id="1", period_start_date=date(2025, 1, 1))]
    prediction = predict_from_records(records, None, today=date(2025, 1, 2))
    assert prediction.predicted_date == date(2025, 1, 29)

def test_predict_from_server_date_without_records():
    """The server prediction is kept when there is no local history."""
    dashboard = StoreDashboard(next_period_date=date(2025, 2, 1))

    prediction = predict_from_records([], None, today=date(2025, 1, 20), server_prediction=dashboard)

    assert prediction.predicted_date == date(2025, 2, 1)
    assert prediction.days_until_next == 12
    assert prediction.source == "server"

def test_predict_without_start_or_server_date():
    """A local prediction needs a last period start."""
    with pytest.raises(ValueError):
        predict_next_period(None, 28, today=date(2025, 1, 20), server_prediction=StoreDashboard())
