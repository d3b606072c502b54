"""
Normalization of raw cycle records.

This module validates records coming from the cycle store and derives the
per-record lengths every other service builds on. Lengths outside their
validity window are discarded rather than reported.

Typical usage:
    records = coerce_records(store_payload)
    cycles = normalize_records(records)
    lengths = [c.cycle_length_days for c in cycles if c.cycle_length_days]
"""
from typing import Iterable, List, Optional, Union

from aws_lambda_powertools import Logger
from pydantic import ValidationError

from src.models.cycle import CycleRecord, NormalizedCycle
from src.services.constants import (
    MAX_CYCLE_LENGTH,
    MAX_PERIOD_LENGTH,
    MIN_PERIOD_LENGTH
)

logger = Logger()

def coerce_records(items: Iterable[Union[CycleRecord, dict]]) -> List[CycleRecord]:
    """
    Validate raw store items into CycleRecord objects.

    Items that fail validation (e.g. no start date) are dropped with a
    warning instead of failing the whole batch.

    Args:
        items: CycleRecord instances or raw dictionaries from the store

    Returns:
        List of valid records in input order
    """
    records = []
    for item in items or []:
        if isinstance(item, CycleRecord):
            records.append(item)
            continue
        try:
            records.append(CycleRecord.model_validate(item))
        except ValidationError as e:
            logger.warning("Dropping malformed cycle record", extra={
                "record_id": item.get("id") if isinstance(item, dict) else None,
                "error_count": e.error_count()
            })
    return records

def sort_records(records: Iterable[CycleRecord], reverse: bool = False) -> List[CycleRecord]:
    """
    Sort records by period start date without touching the caller's list.

    Args:
        records: Cycle records in any order
        reverse: Whether to sort newest first

    Returns:
        New sorted list
    """
    return sorted(records, key=lambda r: r.period_start_date, reverse=reverse)

def raw_period_length(record: CycleRecord) -> Optional[int]:
    """Inclusive day count from start to end, unvalidated. None without an end date."""
    if record.period_end_date is None:
        return None
    return (record.period_end_date - record.period_start_date).days + 1

def calculate_period_length(record: CycleRecord) -> Optional[int]:
    """
    Calculate the period length of a record from its own dates.

    Args:
        record: Cycle record

    Returns:
        Inclusive length in days, or None when the end date is missing or the
        result falls outside the 1-14 day validity window

    Example:
        >>> record = CycleRecord(id="1", period_start_date=date(2025, 2, 10),
        ...                      period_end_date=date(2025, 2, 14))
        >>> calculate_period_length(record)
        5
    """
    length = raw_period_length(record)
    if length is None or not MIN_PERIOD_LENGTH <= length <= MAX_PERIOD_LENGTH:
        return None
    return length

def calculate_cycle_length(earlier: CycleRecord, later: CycleRecord) -> Optional[int]:
    """
    Calculate the cycle length between two chronologically adjacent records.

    Args:
        earlier: Record with the earlier start date
        later: Record with the later start date

    Returns:
        Days between the two start dates, or None when not in (0, 60]
    """
    length = (later.period_start_date - earlier.period_start_date).days
    if 0 < length <= MAX_CYCLE_LENGTH:
        return length
    return None

def get_cycle_lengths(records: Iterable[CycleRecord]) -> List[int]:
    """
    Collect the valid cycle lengths between consecutive records.

    Args:
        records: Cycle records in any order

    Returns:
        Valid lengths in chronological order
    """
    ordered = sort_records(records)
    lengths = []
    for earlier, later in zip(ordered, ordered[1:]):
        length = calculate_cycle_length(earlier, later)
        if length is None:
            logger.debug("Discarding cycle length outside validity window", extra={
                "start_date": str(earlier.period_start_date),
                "next_start_date": str(later.period_start_date)
            })
            continue
        lengths.append(length)
    return lengths

def normalize_records(items: Iterable[Union[CycleRecord, dict]]) -> List[NormalizedCycle]:
    """
    Validate records and derive their period and cycle lengths.

    The cycle length of a record is the distance to the next record's start,
    so the most recent record never has one.

    Args:
        items: CycleRecord instances or raw dictionaries from the store

    Returns:
        NormalizedCycle objects sorted oldest first
    """
    ordered = sort_records(coerce_records(items))
    normalized = []
    for index, record in enumerate(ordered):
        raw_period = raw_period_length(record)
        period_length = calculate_period_length(record)

        cycle_length = None
        cycle_outlier = False
        if index + 1 < len(ordered):
            cycle_length = calculate_cycle_length(record, ordered[index + 1])
            cycle_outlier = cycle_length is None

        normalized.append(NormalizedCycle(
            record=record,
            period_length_days=period_length,
            cycle_length_days=cycle_length,
            period_outlier=raw_period is not None and period_length is None,
            cycle_outlier=cycle_outlier
        ))
    return normalized
