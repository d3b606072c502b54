"""
Service module for next period prediction.

This module turns the most recent period start and an average cycle length
into a predicted next period, the estimated ovulation day and the fertile
window around it.

Typical usage:
    average = compute_average_cycle_length(records, insights.avg_cycle_length)
    prediction = predict_next_period(latest.period_start_date, average)
    print(f"Next period in {prediction.days_until_next} days")
"""
import math
from typing import Iterable, Optional
from datetime import date, timedelta

from aws_lambda_powertools import Logger

from src.models.cycle import CycleRecord
from src.models.insights import FertileWindow, NextPeriodPrediction, StoreDashboard
from src.services.constants import (
    DEFAULT_CYCLE_LENGTH,
    FERTILE_WINDOW_MARGIN,
    LUTEAL_PHASE_DAYS,
    PREDICTION_CONFIDENCE
)
from src.services.normalizer import sort_records

logger = Logger()

def resolve_cycle_length(average_cycle_length: Optional[float]) -> int:
    """
    Turn an optional average into the whole number of days used for prediction.

    Halves round up; missing or non-positive averages fall back to 28 days.
    """
    if average_cycle_length is None or average_cycle_length <= 0:
        return DEFAULT_CYCLE_LENGTH
    return int(math.floor(average_cycle_length + 0.5))

def calculate_fertile_window(predicted_date: date) -> FertileWindow:
    """
    Calculate the fertile window for a predicted period date.

    Ovulation is estimated 14 days before the predicted period; the window
    spans two days either side of it.

    Args:
        predicted_date: Predicted start of the next period

    Returns:
        Inclusive five-day FertileWindow
    """
    ovulation_date = predicted_date - timedelta(days=LUTEAL_PHASE_DAYS)
    return FertileWindow(
        start_date=ovulation_date - timedelta(days=FERTILE_WINDOW_MARGIN),
        end_date=ovulation_date + timedelta(days=FERTILE_WINDOW_MARGIN)
    )

def predict_next_period(
    last_period_start: Optional[date],
    average_cycle_length: Optional[float],
    today: Optional[date] = None,
    server_prediction: Optional[StoreDashboard] = None
) -> NextPeriodPrediction:
    """
    Predict the next period from the last period start.

    Args:
        last_period_start: Start date of the most recent period; may be None
            only when the server prediction carries a date
        average_cycle_length: Average cycle length, None to use 28 days
        today: Reference date for the countdown, defaults to today
        server_prediction: Optional server dashboard; its next_period_date
            takes precedence over local recomputation

    Returns:
        NextPeriodPrediction with countdown, ovulation date and fertile window

    Raises:
        ValueError: If neither a last period start nor a server date is given

    Example:
        >>> prediction = predict_next_period(date(2025, 1, 1), 30)
        >>> prediction.predicted_date
        datetime.date(2025, 1, 31)
    """
    if today is None:
        today = date.today()

    cycle_length = resolve_cycle_length(average_cycle_length)

    if server_prediction is not None and server_prediction.next_period_date is not None:
        predicted_date = server_prediction.next_period_date
        if server_prediction.next_period_days is not None:
            days_until_next = max(0, server_prediction.next_period_days)
        else:
            days_until_next = max(0, (predicted_date - today).days)
        source = "server"
    elif last_period_start is None:
        raise ValueError("last_period_start is required without a server prediction")
    else:
        predicted_date = last_period_start + timedelta(days=cycle_length)
        days_until_next = max(0, (predicted_date - today).days)
        source = "local"

    fertile_window = calculate_fertile_window(predicted_date)

    logger.debug("Predicted next period", extra={
        "last_period_start": str(last_period_start),
        "predicted_date": str(predicted_date),
        "cycle_length": cycle_length,
        "source": source
    })

    return NextPeriodPrediction(
        predicted_date=predicted_date,
        days_until_next=days_until_next,
        cycle_length_used=cycle_length,
        ovulation_date=predicted_date - timedelta(days=LUTEAL_PHASE_DAYS),
        fertile_window=fertile_window,
        confidence=PREDICTION_CONFIDENCE,
        source=source
    )

def predict_from_records(
    records: Iterable[CycleRecord],
    average_cycle_length: Optional[float],
    today: Optional[date] = None,
    server_prediction: Optional[StoreDashboard] = None
) -> Optional[NextPeriodPrediction]:
    """
    Predict the next period from the most recent record in a history.

    Args:
        records: Cycle records in any order
        average_cycle_length: Average cycle length, None to use 28 days
        today: Reference date, defaults to today
        server_prediction: Optional server dashboard shortcut

    Returns:
        NextPeriodPrediction, or None when there are no records and no
        server date to fall back on
    """
    ordered = sort_records(records, reverse=True)
    last_period_start = ordered[0].period_start_date if ordered else None
    has_server_date = server_prediction is not None and server_prediction.next_period_date is not None
    if last_period_start is None and not has_server_date:
        return None
    return predict_next_period(
        last_period_start,
        average_cycle_length,
        today=today,
        server_prediction=server_prediction
    )
