"""
Pytest configuration and shared fixtures.
"""
import pytest
from datetime import date, timedelta
from typing import List

from src.models.cycle import CycleRecord

def make_record(
    record_id: str,
    start: date,
    end: date = None,
    **kwargs
) -> CycleRecord:
    """Build a CycleRecord with only the fields a test cares about."""
    return CycleRecord(
        id=record_id,
        period_start_date=start,
        period_end_date=end,
        **kwargs
    )

@pytest.fixture
def regular_records() -> List[CycleRecord]:
    """Create five records 28 days apart, each with a 5-day period."""
    return [
        make_record(
            str(i),
            date(2025, 1, 1) + timedelta(days=i * 28),
            date(2025, 1, 5) + timedelta(days=i * 28)
        )
        for i in range(5)
    ]

@pytest.fixture
def irregular_records() -> List[CycleRecord]:
    """Create records with 24, 31 and 26 day cycles, deliberately unsorted."""
    return [
        make_record("3", date(2024, 2, 25), date(2024, 3, 1)),
        make_record("1", date(2024, 1, 1), date(2024, 1, 4)),
        make_record("4", date(2024, 3, 22)),
        make_record("2", date(2024, 1, 25), date(2024, 1, 30)),
    ]

@pytest.fixture
def symptom_records() -> List[CycleRecord]:
    """Create records with logged symptoms and history search fields."""
    return [
        make_record(
            "10",
            date(2025, 3, 2),
            date(2025, 3, 6),
            symptoms=["cramps", "fatigue", "headache"],
            flow_intensity="Heavy",
            notes="Stayed home on day two"
        ),
        make_record(
            "11",
            date(2025, 3, 30),
            date(2025, 4, 3),
            symptoms=["cramps"],
            flow_intensity="Light"
        ),
        make_record("12", date(2025, 4, 27), symptoms=[]),
    ]

@pytest.fixture
def raw_store_items() -> List[dict]:
    """Raw cycle dictionaries as the store returns them."""
    return [
        {
            "id": 7,
            "period_start_date": "2025-01-29T00:00:00.000Z",
            "period_end_date": "2025-02-02T00:00:00.000Z",
            "flow_intensity": "Medium",
            "notes": None,
            "cycle_length": 28,
            "period_length": 5,
            "symptoms": [{"id": 1, "symptom_type": "cramps", "severity": "mild"}]
        },
        {
            "id": 6,
            "period_start_date": "2025-01-01",
            "period_end_date": None,
            "symptoms": ["bloating"]
        },
        {
            "id": 5,
            "period_start_date": None
        }
    ]
