"""
Length statistics for cycle tracking data.

This module computes average cycle and period lengths from a record history,
with outlier rejection and the fallback order each metric uses:

- cycle length: server aggregate -> locally derived mean -> None
- period length: locally derived from each record's own dates -> stored
  per-record scalar -> server aggregate -> None
- monthly cycle length: month-window mean -> overall average -> 28

The asymmetry is deliberate: stored period lengths go stale when a record's
dates are edited, while the server's cycle average is the reference value.
"""
import calendar
from typing import Iterable, List, Optional
from datetime import date
from statistics import mean

from aws_lambda_powertools import Logger

from src.models.cycle import CycleRecord
from src.models.insights import MonthlyCycleLength
from src.services.constants import (
    DEFAULT_CYCLE_LENGTH,
    MAX_CYCLE_LENGTH,
    MAX_PERIOD_LENGTH,
    MIN_PERIOD_LENGTH
)
from src.services.normalizer import (
    calculate_period_length,
    get_cycle_lengths,
    raw_period_length,
    sort_records
)

logger = Logger()

def _is_positive(value: Optional[float]) -> bool:
    return value is not None and value > 0

def compute_average_cycle_length(
    records: Iterable[CycleRecord],
    server_average: Optional[float] = None
) -> Optional[float]:
    """
    Compute the average cycle length of a record history.

    Args:
        records: Cycle records in any order
        server_average: Optional server-computed average; preferred when positive

    Returns:
        Average length in days, or None when there is not enough data

    Example:
        >>> records = [record_on(date(2025, 1, 1)), record_on(date(2025, 1, 29))]
        >>> compute_average_cycle_length(records)
        28
    """
    lengths = get_cycle_lengths(records)

    if _is_positive(server_average):
        logger.debug("Using server cycle length average", extra={
            "server_average": server_average,
            "local_lengths": len(lengths)
        })
        return server_average

    if lengths:
        return mean(lengths)

    return None

def get_period_lengths(records: Iterable[CycleRecord]) -> List[int]:
    """
    Collect valid period lengths, one per record, oldest first.

    A record's own start/end dates win over its stored period_length. The
    stored value is only used when the dates cannot give a length at all.

    Args:
        records: Cycle records in any order

    Returns:
        Period lengths within the 1-14 day validity window
    """
    lengths = []
    for record in sort_records(records):
        if raw_period_length(record) is not None:
            length = calculate_period_length(record)
            if length is None:
                logger.debug("Discarding period length outside validity window", extra={
                    "record_id": record.id,
                    "start_date": str(record.period_start_date),
                    "end_date": str(record.period_end_date)
                })
                continue
            lengths.append(length)
        elif record.period_length is not None and \
                MIN_PERIOD_LENGTH <= record.period_length <= MAX_PERIOD_LENGTH:
            lengths.append(record.period_length)
    return lengths

def compute_average_period_length(
    records: Iterable[CycleRecord],
    server_average: Optional[float] = None
) -> Optional[float]:
    """
    Compute the average period length of a record history.

    Args:
        records: Cycle records in any order
        server_average: Optional server-computed average, used only when no
            record yields a valid length

    Returns:
        Average length in days, or None when there is not enough data
    """
    lengths = get_period_lengths(records)
    if lengths:
        return mean(lengths)

    if _is_positive(server_average):
        return server_average

    return None

def _next_month(year: int, month: int) -> tuple:
    return (year + 1, 1) if month == 12 else (year, month + 1)

def _previous_month(year: int, month: int) -> tuple:
    return (year - 1, 12) if month == 1 else (year, month - 1)

def compute_monthly_average_cycle_length(
    records: Iterable[CycleRecord],
    year: int,
    month: int,
    overall_average: Optional[float] = None
) -> float:
    """
    Compute the average cycle length for cycles starting around a month.

    Only records starting in the target month or the following month are
    considered, since a cycle that starts in one month usually completes in
    the next.

    Args:
        records: Cycle records in any order
        year: Target year
        month: Target month (1-12)
        overall_average: Fallback average; computed from all records when omitted

    Returns:
        Average cycle length; never None
    """
    records = list(records)
    window = {(year, month), _next_month(year, month)}
    in_window = [
        r for r in records
        if (r.period_start_date.year, r.period_start_date.month) in window
    ]

    lengths = get_cycle_lengths(in_window)
    if lengths:
        return mean(lengths)

    if overall_average is None:
        overall_average = compute_average_cycle_length(records)
    if _is_positive(overall_average):
        return overall_average

    return DEFAULT_CYCLE_LENGTH

def get_monthly_cycle_timeline(
    records: Iterable[CycleRecord],
    year: int,
    month: int,
    overall_average: Optional[float] = None
) -> List[MonthlyCycleLength]:
    """
    Build the two-row monthly cycle length timeline for the insights screen.

    Args:
        records: Cycle records in any order
        year: Selected year
        month: Selected month (1-12)
        overall_average: Fallback average for months without data

    Returns:
        Rows for the selected month and the month before it, newest first
    """
    records = list(records)
    if overall_average is None:
        overall_average = compute_average_cycle_length(records)

    timeline = []
    for row_year, row_month in [(year, month), _previous_month(year, month)]:
        _, following_month = _next_month(row_year, row_month)
        timeline.append(MonthlyCycleLength(
            label=f"{calendar.month_name[row_month]} - {calendar.month_name[following_month]}",
            year=row_year,
            month=row_month,
            average_cycle_length=compute_monthly_average_cycle_length(
                records, row_year, row_month, overall_average
            )
        ))
    return timeline

def get_previous_cycle_length(
    records: Iterable[CycleRecord],
    today: Optional[date] = None
) -> Optional[int]:
    """
    Get the length of the previous cycle for the insights screen.

    Uses the second most recent record, or the only record there is. Its
    stored cycle_length is preferred; otherwise the distance between the two
    most recent starts; otherwise the days elapsed since that record started.

    Args:
        records: Cycle records in any order
        today: Reference date, defaults to today

    Returns:
        Length in days, or None without records
    """
    if today is None:
        today = date.today()

    ordered = sort_records(records, reverse=True)
    if not ordered:
        return None

    current = ordered[0]
    previous = ordered[1] if len(ordered) > 1 else ordered[0]

    if previous.cycle_length is not None and 0 < previous.cycle_length <= MAX_CYCLE_LENGTH:
        return previous.cycle_length

    if len(ordered) > 1:
        days = (current.period_start_date - previous.period_start_date).days
        if days > 0:
            return days

    return max(1, (today - previous.period_start_date).days + 1)

def get_previous_period_length(
    records: Iterable[CycleRecord],
    today: Optional[date] = None
) -> Optional[int]:
    """
    Get the length of the previous period, always recomputed from dates.

    Args:
        records: Cycle records in any order
        today: Reference date for a period without an end date

    Returns:
        Inclusive length in days within 1-14, or None
    """
    if today is None:
        today = date.today()

    ordered = sort_records(records, reverse=True)
    if not ordered:
        return None

    previous = ordered[1] if len(ordered) > 1 else ordered[0]

    if previous.period_end_date is not None:
        return calculate_period_length(previous)

    days_so_far = max(1, (today - previous.period_start_date).days + 1)
    if days_so_far <= MAX_PERIOD_LENGTH:
        return days_so_far
    return None
