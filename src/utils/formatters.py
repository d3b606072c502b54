"""
Display formatting for cycle metrics.
"""
import math
from typing import Any, Dict, Optional, Union
from datetime import date

from src.models.insights import CycleOverview

PLACEHOLDER = "--"

def format_days(value: Optional[Union[int, float]]) -> str:
    """Format a length in days, '--' when unknown. Halves round up."""
    if value is None:
        return PLACEHOLDER
    return f"{int(math.floor(value + 0.5))} days"

def format_display_date(value: Optional[date]) -> str:
    """Format a date like 'January 31, 2025', '--' when unknown."""
    if value is None:
        return PLACEHOLDER
    return f"{value.strftime('%B')} {value.day}, {value.year}"

def format_overview(overview: CycleOverview) -> Dict[str, Any]:
    """
    Format an overview into the display strings the dashboard renders.

    Args:
        overview: Computed cycle overview

    Returns:
        Dictionary of display-ready strings
    """
    prediction = overview.prediction
    return {
        "cycle_day": f"Day {overview.current_cycle_day}" if overview.current_cycle_day else PLACEHOLDER,
        "phase": overview.phase_label,
        "average_cycle_length": format_days(overview.average_cycle_length),
        "average_period_length": format_days(overview.average_period_length),
        "previous_cycle_length": format_days(overview.previous_cycle_length),
        "previous_period_length": format_days(overview.previous_period_length),
        "next_period_date": format_display_date(prediction.predicted_date if prediction else None),
        "next_period_in": format_days(prediction.days_until_next if prediction else None),
        "confidence": prediction.confidence_label if prediction else PLACEHOLDER,
        "fertile_window": (
            f"{format_display_date(prediction.fertile_window.start_date)} - "
            f"{format_display_date(prediction.fertile_window.end_date)}"
        ) if prediction else PLACEHOLDER
    }
