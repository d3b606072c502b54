"""
Service module for calendar and history views of cycle records.

This module answers day-level membership questions for calendar rendering
and groups, filters and searches records for the history listing.

Typical usage:
    records = store.list_cycles()
    if is_period_day(date(2025, 2, 12), records):
        ...
    for date_key, group in group_by_start_date(search_records(records, "cramps")):
        print(date_key, len(group))
"""
import calendar
from typing import Iterable, List, Optional, Set, Tuple
from datetime import date, timedelta

from src.models.cycle import CycleRecord
from src.services.constants import HISTORY_DATE_FORMAT
from src.services.phase import calculate_cycle_day, classify_phase, phase_label

def get_period_span(record: CycleRecord) -> Tuple[date, date]:
    """
    Get the inclusive span of days a record covers.

    A missing end date, or one before the start, covers the start day only.
    """
    start = record.period_start_date
    end = record.period_end_date
    if end is None or end < start:
        end = start
    return start, end

def is_period_day(day: date, records: Iterable[CycleRecord]) -> bool:
    """
    Check if a calendar day falls inside any logged period.

    Args:
        day: Calendar day to check
        records: Cycle records in any order

    Returns:
        True if the day lies between a record's start and end, inclusive

    Example:
        >>> record = CycleRecord(id="1", period_start_date=date(2025, 2, 10),
        ...                      period_end_date=date(2025, 2, 14))
        >>> is_period_day(date(2025, 2, 12), [record])
        True
    """
    for record in records:
        start, end = get_period_span(record)
        if start <= day <= end:
            return True
    return False

def has_logged_entry(day: date, records: Iterable[CycleRecord]) -> bool:
    """
    Check if a period was logged as starting on a calendar day.

    Unlike is_period_day this only matches start dates.
    """
    return any(record.period_start_date == day for record in records)

def get_period_days(records: Iterable[CycleRecord], year: int, month: int) -> Set[date]:
    """
    Collect every period day within a calendar month.

    Args:
        records: Cycle records in any order
        year: Calendar year
        month: Calendar month (1-12)

    Returns:
        Set of dates in the month that are period days
    """
    month_start = date(year, month, 1)
    month_end = date(year, month, calendar.monthrange(year, month)[1])

    days = set()
    for record in records:
        start, end = get_period_span(record)
        current = max(start, month_start)
        last = min(end, month_end)
        while current <= last:
            days.add(current)
            current += timedelta(days=1)
    return days

def format_start_date(record: CycleRecord) -> str:
    """History date key for a record, e.g. '12 Feb 2025'."""
    return record.period_start_date.strftime(HISTORY_DATE_FORMAT)

def group_by_start_date(records: Iterable[CycleRecord]) -> List[Tuple[str, List[CycleRecord]]]:
    """
    Group records by their formatted start date.

    Args:
        records: Cycle records in any order

    Returns:
        (date key, records) pairs ordered newest first; records keep their
        input order within a group
    """
    groups = {}
    group_dates = {}
    for record in records:
        date_key = format_start_date(record)
        groups.setdefault(date_key, []).append(record)
        group_dates.setdefault(date_key, record.period_start_date)

    ordered_keys = sorted(groups, key=lambda key: group_dates[key], reverse=True)
    return [(key, groups[key]) for key in ordered_keys]

def get_search_fields(record: CycleRecord, today: Optional[date] = None) -> List[str]:
    """
    Build the lowercase text fields a history search matches against.

    Args:
        record: Cycle record
        today: Reference date for the record's day number

    Returns:
        Formatted date, notes, flow intensity, phase label and "day N" label
    """
    day_number = calculate_cycle_day(record.period_start_date, today)
    fields = [
        format_start_date(record),
        record.notes or "",
        record.flow_intensity or "",
        phase_label(classify_phase(day_number)),
        f"day {day_number}"
    ]
    return [field.lower() for field in fields]

def search_records(
    records: Iterable[CycleRecord],
    query: Optional[str],
    today: Optional[date] = None
) -> List[CycleRecord]:
    """
    Filter records by a case-insensitive substring query.

    A record matches when any of its search fields contains the query.
    A blank query matches every record.

    Args:
        records: Cycle records in any order
        query: Search text
        today: Reference date for day numbers, defaults to today

    Returns:
        Matching records in input order
    """
    records = list(records)
    needle = (query or "").strip().lower()
    if not needle:
        return records

    if today is None:
        today = date.today()

    return [
        record for record in records
        if any(needle in field for field in get_search_fields(record, today))
    ]

def filter_records(
    records: Iterable[CycleRecord],
    year: Optional[int] = None,
    month: Optional[int] = None
) -> List[CycleRecord]:
    """
    Filter records by start-date year and/or calendar month.

    The month filter matches that month in any year unless a year is given.
    """
    return [
        record for record in records
        if (year is None or record.period_start_date.year == year)
        and (month is None or record.period_start_date.month == month)
    ]
