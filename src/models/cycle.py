"""
Cycle record model definitions.

CycleRecord mirrors what the cycle store returns for a logged period. The
engine treats it as read-only; NormalizedCycle carries the derived lengths.
"""
from datetime import date
from typing import Any, List, Optional, Union
from pydantic import BaseModel, Field, field_validator


class CycleRecord(BaseModel):
    """
    Represents one logged period as stored by the cycle store.
    """
    id: str
    period_start_date: date
    period_end_date: Optional[date] = None
    notes: Optional[str] = None
    symptoms: List[str] = Field(default_factory=list)
    flow_intensity: Optional[str] = None
    # Scalars persisted by the store; may be stale relative to the dates
    cycle_length: Optional[int] = None
    period_length: Optional[int] = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value: Union[str, int]) -> str:
        """Store ids may be numeric."""
        return str(value)

    @field_validator("period_start_date", "period_end_date", mode="before")
    @classmethod
    def strip_time_component(cls, value: Any) -> Any:
        """Reduce ISO datetime strings like 2025-01-01T00:00:00.000Z to the date."""
        if isinstance(value, str):
            value = value.strip()
            if not value:
                return None
            return value[:10]
        return value

    @field_validator("symptoms", mode="before")
    @classmethod
    def flatten_symptoms(cls, value: Any) -> List[str]:
        """Accept plain labels or symptom objects with a symptom_type key."""
        if value is None:
            return []
        labels = []
        for item in value:
            if isinstance(item, dict):
                item = item.get("symptom_type")
            if item:
                labels.append(str(item))
        return labels


class NormalizedCycle(BaseModel):
    """
    A cycle record together with its derived lengths.

    Invalid lengths are None; the outlier flags tell a discarded value apart
    from one that could not be computed at all.
    """
    record: CycleRecord
    period_length_days: Optional[int] = None
    cycle_length_days: Optional[int] = None
    period_outlier: bool = False
    cycle_outlier: bool = False


class SymptomStat(BaseModel):
    """
    Aggregated occurrence count for one symptom label.
    """
    symptom_type: str
    occurrence_count: int = Field(..., ge=0)
