"""
Service module for cycle day and phase determination.

Every screen that shows a phase goes through classify_phase so the day
boundaries live in one place (see PHASE_BOUNDARIES).

Typical usage:
    >>> cycle_day = get_current_cycle_day(records)
    >>> phase = classify_phase(cycle_day)
    >>> print(phase_label(phase))
"""
from typing import Iterable, Optional
from datetime import date

from src.models.cycle import CycleRecord
from src.models.phase import CyclePhase, FertilityStatus
from src.services.constants import FERTILE_DAYS, PHASE_BOUNDARIES, PHASE_LABELS
from src.services.normalizer import sort_records

def classify_phase(cycle_day_number: Optional[int]) -> CyclePhase:
    """
    Map a cycle day number to a menstrual phase.

    Args:
        cycle_day_number: Day in the cycle (1-based), may be None

    Returns:
        Phase for the day; UNKNOWN for None or days below 1

    Example:
        >>> classify_phase(3)
        <CyclePhase.MENSTRUAL: 'Menstrual'>
        >>> classify_phase(0)
        <CyclePhase.UNKNOWN: 'Unknown'>
    """
    if cycle_day_number is None or cycle_day_number <= 0:
        return CyclePhase.UNKNOWN

    for first_day, last_day, phase in PHASE_BOUNDARIES:
        if cycle_day_number >= first_day and (last_day is None or cycle_day_number <= last_day):
            return phase

    return CyclePhase.UNKNOWN

def phase_label(phase: CyclePhase) -> str:
    """Display label for a phase, e.g. 'Luteal Phase'."""
    return PHASE_LABELS[phase]

def calculate_cycle_day(period_start_date: date, today: Optional[date] = None) -> int:
    """
    Calculate the day number of `today` within the cycle starting on a date.

    Day 1 is the start date itself. Start dates in the future yield values
    below 1, which classify as UNKNOWN.

    Args:
        period_start_date: First day of the period that opened the cycle
        today: Date to calculate for, defaults to today

    Returns:
        Cycle day number (unclamped)
    """
    if today is None:
        today = date.today()
    return (today - period_start_date).days + 1

def get_current_cycle_day(records: Iterable[CycleRecord], today: Optional[date] = None) -> Optional[int]:
    """
    Calculate the current cycle day from the most recent period start.

    Args:
        records: Cycle records in any order
        today: Date to calculate for, defaults to today

    Returns:
        Cycle day clamped to a minimum of 1, or None without records
    """
    ordered = sort_records(records, reverse=True)
    if not ordered:
        return None
    return max(1, calculate_cycle_day(ordered[0].period_start_date, today))

def get_fertility_status(cycle_day_number: Optional[int]) -> FertilityStatus:
    """
    Tell whether a cycle day falls on the typical fertile days (12-16).

    Args:
        cycle_day_number: Day in the cycle (1-based), may be None

    Returns:
        ACTIVE inside the fertile days, INACTIVE outside, UNKNOWN without a day
    """
    if not cycle_day_number:
        return FertilityStatus.UNKNOWN
    first_day, last_day = FERTILE_DAYS
    if first_day <= cycle_day_number <= last_day:
        return FertilityStatus.ACTIVE
    return FertilityStatus.INACTIVE
