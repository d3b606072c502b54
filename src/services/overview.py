"""
Service module composing the cycle overview shown on dashboard screens.

This is where the server-vs-local authority of each metric is resolved and
where display defaults are applied, so individual screens do not repeat it.

Typical usage:
    records = store.list_cycles()
    overview = build_cycle_overview(records, insights=store.get_insights())
    print(overview.phase_label, overview.display_cycle_length)
"""
from typing import Iterable, List, Optional, Union
from datetime import date

from aws_lambda_powertools import Logger

from src.models.cycle import CycleRecord, SymptomStat
from src.models.insights import CycleOverview, StoreDashboard, StoreInsights
from src.models.phase import LengthKind
from src.services.constants import DEFAULT_PERIOD_LENGTH
from src.services.cycle import predict_from_records, resolve_cycle_length
from src.services.normalizer import coerce_records, normalize_records, sort_records
from src.services.phase import (
    classify_phase,
    get_current_cycle_day,
    get_fertility_status,
    phase_label
)
from src.services.regularity import classify_regularity, classify_variability
from src.services.statistics import (
    compute_average_cycle_length,
    compute_average_period_length,
    get_previous_cycle_length,
    get_previous_period_length
)
from src.services.symptoms import classify_record_intensity, resolve_symptom_stats

logger = Logger()

def build_cycle_overview(
    records: Iterable[Union[CycleRecord, dict]],
    insights: Optional[StoreInsights] = None,
    dashboard: Optional[StoreDashboard] = None,
    server_symptoms: Optional[List[SymptomStat]] = None,
    today: Optional[date] = None
) -> CycleOverview:
    """
    Compute every displayed cycle metric from a record snapshot.

    Args:
        records: Cycle records (or raw store dictionaries) in any order
        insights: Optional server insight aggregates
        dashboard: Optional server dashboard shortcut
        server_symptoms: Optional server symptom statistics
        today: Reference date, defaults to today

    Returns:
        CycleOverview for the snapshot
    """
    if today is None:
        today = date.today()

    records = coerce_records(records)
    if not records and insights is not None:
        records = list(insights.recent_cycles)

    server_cycle_average = insights.avg_cycle_length if insights else None
    server_period_average = insights.avg_period_length if insights else None

    average_cycle_length = compute_average_cycle_length(records, server_cycle_average)
    average_period_length = compute_average_period_length(records, server_period_average)

    # Dashboard period length is pre-filled with 5 by the store: display only
    display_period_length = DEFAULT_PERIOD_LENGTH
    if average_period_length:
        display_period_length = int(average_period_length + 0.5)
    elif dashboard is not None and dashboard.avg_period_length:
        display_period_length = int(dashboard.avg_period_length + 0.5)

    cycles = normalize_records(records)
    cycle_lengths = [c.cycle_length_days for c in cycles if c.cycle_length_days is not None]

    current_cycle_day = get_current_cycle_day(records, today)
    phase = classify_phase(current_cycle_day)

    previous_cycle_length = get_previous_cycle_length(records, today)
    previous_period_length = get_previous_period_length(records, today)
    if not records and insights is not None:
        previous_cycle_length = insights.previous_cycle_length
        previous_period_length = insights.previous_period_length

    if server_symptoms is None and insights is not None:
        server_symptoms = insights.most_common_symptoms

    latest = sort_records(records, reverse=True)[0] if records else None

    overview = CycleOverview(
        current_cycle_day=current_cycle_day,
        phase=phase,
        phase_label=phase_label(phase),
        fertility_status=get_fertility_status(current_cycle_day),
        average_cycle_length=average_cycle_length,
        average_period_length=average_period_length,
        display_cycle_length=resolve_cycle_length(average_cycle_length),
        display_period_length=display_period_length,
        cycle_regularity=classify_regularity(average_cycle_length, LengthKind.CYCLE),
        period_regularity=classify_regularity(average_period_length, LengthKind.PERIOD),
        variability=classify_variability(cycle_lengths),
        previous_cycle_length=previous_cycle_length,
        previous_period_length=previous_period_length,
        prediction=predict_from_records(records, average_cycle_length, today, dashboard),
        symptom_stats=resolve_symptom_stats(records, server_symptoms),
        latest_symptom_intensity=classify_record_intensity(latest),
        total_cycles=len(records) or (insights.total_cycles if insights else 0)
    )

    logger.info("Cycle overview computed", extra={
        "record_count": len(records),
        "discarded_periods": sum(1 for c in cycles if c.period_outlier),
        "discarded_cycles": sum(1 for c in cycles if c.cycle_outlier),
        "current_cycle_day": current_cycle_day,
        "phase": phase.value,
        "has_server_insights": insights is not None,
        "has_server_dashboard": dashboard is not None
    })

    return overview
