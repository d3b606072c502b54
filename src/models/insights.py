"""
Model definitions for server aggregates and engine outputs.
"""
from datetime import date
from typing import List, Optional
from pydantic import BaseModel, Field, computed_field, field_validator

from src.models.cycle import CycleRecord, SymptomStat
from src.models.phase import (
    CyclePhase,
    FertilityStatus,
    Regularity,
    SymptomIntensity,
    Variability
)
from src.services.normalizer import coerce_records


class StoreInsights(BaseModel):
    """
    Server-computed insight aggregates. Every scalar is optional.
    """
    avg_cycle_length: Optional[float] = None
    avg_period_length: Optional[float] = None
    previous_cycle_length: Optional[int] = None
    previous_period_length: Optional[int] = None
    total_cycles: int = 0
    recent_cycles: List[CycleRecord] = Field(default_factory=list)
    most_common_symptoms: List[SymptomStat] = Field(default_factory=list)

    @field_validator("recent_cycles", mode="before")
    @classmethod
    def drop_malformed_cycles(cls, value):
        """Undated or unparseable recent cycles are dropped, not fatal."""
        return coerce_records(value)

    @field_validator("most_common_symptoms", mode="before")
    @classmethod
    def accept_count_alias(cls, value):
        """The store reports either occurrence_count or count."""
        if not value:
            return []
        return [
            {
                "symptom_type": item.get("symptom_type"),
                "occurrence_count": item.get("occurrence_count", item.get("count", 0))
            } if isinstance(item, dict) else item
            for item in value
        ]


class StoreDashboard(BaseModel):
    """
    Server-computed dashboard shortcut.
    """
    next_period_days: Optional[int] = None
    next_period_date: Optional[date] = None
    avg_period_length: Optional[float] = None

    @field_validator("next_period_date", mode="before")
    @classmethod
    def strip_time_component(cls, value):
        if isinstance(value, str):
            return value[:10] or None
        return value


class FertileWindow(BaseModel):
    """
    Inclusive span of days around the estimated ovulation day.
    """
    start_date: date
    end_date: date

    @computed_field
    def length_days(self) -> int:
        """Number of days in the window, both ends included."""
        return (self.end_date - self.start_date).days + 1

    def contains(self, day: date) -> bool:
        """Check if a calendar day falls inside the window."""
        return self.start_date <= day <= self.end_date


class NextPeriodPrediction(BaseModel):
    """
    Predicted next period with the derived ovulation estimate.
    """
    predicted_date: date
    days_until_next: int = Field(..., ge=0)
    cycle_length_used: int
    ovulation_date: date
    fertile_window: FertileWindow
    confidence: float
    source: str = Field(..., pattern="^(server|local)$")

    @computed_field
    def confidence_label(self) -> str:
        """Confidence rendered as a whole percentage."""
        return f"{round(self.confidence * 100)}%"


class MonthlyCycleLength(BaseModel):
    """
    Average cycle length for a month range, as shown on the insights timeline.
    """
    label: str
    year: int
    month: int = Field(..., ge=1, le=12)
    average_cycle_length: float


class CycleOverview(BaseModel):
    """
    Everything the dashboard and insights screens display for one user.

    Raw averages stay None when data is insufficient; the display_* fields
    carry the fixed defaults applied at the display boundary.
    """
    current_cycle_day: Optional[int] = None
    phase: CyclePhase = CyclePhase.UNKNOWN
    phase_label: str
    fertility_status: FertilityStatus = FertilityStatus.UNKNOWN
    average_cycle_length: Optional[float] = None
    average_period_length: Optional[float] = None
    display_cycle_length: int
    display_period_length: int
    cycle_regularity: Regularity = Regularity.UNKNOWN
    period_regularity: Regularity = Regularity.UNKNOWN
    variability: Variability = Variability.UNKNOWN
    previous_cycle_length: Optional[int] = None
    previous_period_length: Optional[int] = None
    prediction: Optional[NextPeriodPrediction] = None
    symptom_stats: List[SymptomStat] = Field(default_factory=list)
    latest_symptom_intensity: SymptomIntensity = SymptomIntensity.NONE
    total_cycles: int = 0


class CachedCycleMetrics(BaseModel):
    """
    Cache entry for derived metrics of one user.
    """
    user_id: str
    overview: CycleOverview
    record_count: int = 0
    latest_start_date: Optional[date] = None
    fingerprint: Optional[str] = None
    computed_on: date
    cached_at: str
    ttl: int
