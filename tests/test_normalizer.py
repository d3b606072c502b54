"""
Tests for cycle record normalization.
"""
from datetime import date

from src.models.cycle import CycleRecord
from src.services.normalizer import (
    calculate_cycle_length,
    calculate_period_length,
    coerce_records,
    get_cycle_lengths,
    normalize_records,
    sort_records
)

def _record(record_id, start, end=None, **kwargs):
    return CycleRecord(id=record_id, period_start_date=start, period_end_date=end, **kwargs)

def test_period_length_is_inclusive():
    """Start and end day both count."""
    assert calculate_period_length(_record("1", date(2025, 2, 10), date(2025, 2, 14))) == 5
    assert calculate_period_length(_record("1", date(2025, 2, 10), date(2025, 2, 10))) == 1

def test_period_length_validity_window():
    """Lengths above 14 days or end dates before the start are discarded."""
    assert calculate_period_length(_record("1", date(2025, 1, 1), date(2025, 1, 14))) == 14
    assert calculate_period_length(_record("1", date(2025, 1, 1), date(2025, 1, 15))) is None
    assert calculate_period_length(_record("1", date(2025, 2, 10), date(2025, 2, 9))) is None

def test_period_length_without_end_date():
    """An open period has no known length."""
    assert calculate_period_length(_record("1", date(2025, 1, 1))) is None

def test_cycle_length_validity_window():
    """Cycle lengths must be in (0, 60]."""
    first = _record("1", date(2025, 1, 1))
    assert calculate_cycle_length(first, _record("2", date(2025, 1, 29))) == 28
    assert calculate_cycle_length(first, _record("2", date(2025, 3, 2))) == 60
    assert calculate_cycle_length(first, _record("2", date(2025, 3, 3))) is None
    assert calculate_cycle_length(first, _record("2", date(2025, 1, 1))) is None

def test_cycle_lengths_sort_defensively(irregular_records):
    """Unsorted input yields chronological lengths and is left untouched."""
    original_order = [r.id for r in irregular_records]

    assert get_cycle_lengths(irregular_records) == [24, 31, 26]
    assert [r.id for r in irregular_records] == original_order

def test_sort_records_newest_first(irregular_records):
    """Test reverse ordering."""
    assert [r.id for r in sort_records(irregular_records, reverse=True)] == ["4", "3", "2", "1"]

def test_coerce_records_drops_malformed(raw_store_items):
    """Items without a start date are dropped, others validated."""
    records = coerce_records(raw_store_items)

    assert [r.id for r in records] == ["7", "6"]
    assert records[0].period_start_date == date(2025, 1, 29)
    assert records[0].period_end_date == date(2025, 2, 2)
    assert records[0].symptoms == ["cramps"]
    assert records[1].period_end_date is None

def test_coerce_records_keeps_models():
    """Already validated records pass through."""
    record = _record("1", date(2025, 1, 1))
    assert coerce_records([record]) == [record]
    assert coerce_records(None) == []

def test_normalize_records(raw_store_items):
    """Derived fields are attached oldest first."""
    cycles = normalize_records(raw_store_items)

    assert [c.record.id for c in cycles] == ["6", "7"]

    first, second = cycles
    assert first.period_length_days is None
    assert first.period_outlier is False
    assert first.cycle_length_days == 28
    assert first.cycle_outlier is False

    assert second.period_length_days == 5
    assert second.cycle_length_days is None
    assert second.cycle_outlier is False

def test_normalize_records_flags_outliers():
    """Computable but implausible lengths are flagged and discarded."""
    cycles = normalize_records([
        _record("1", date(2025, 1, 1), date(2025, 1, 15)),
        _record("2", date(2025, 4, 1), date(2025, 4, 5))
    ])

    assert cycles[0].period_length_days is None
    assert cycles[0].period_outlier is True
    assert cycles[0].cycle_length_days is None
    assert cycles[0].cycle_outlier is True
    assert cycles[1].period_outlier is False
