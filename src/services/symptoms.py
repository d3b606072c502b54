"""
Symptom statistics for cycle records.
"""
from typing import Iterable, List, Optional

from src.models.cycle import CycleRecord, SymptomStat
from src.models.phase import SymptomIntensity
from src.services.constants import MOST_COMMON_SYMPTOMS_LIMIT, SYMPTOM_INTENSITY_LIMITS

def aggregate_symptoms(records: Iterable[CycleRecord]) -> List[SymptomStat]:
    """
    Count how often each symptom was logged across records.

    Args:
        records: Cycle records, in the order their symptoms were first seen

    Returns:
        SymptomStat list sorted by occurrence count, most frequent first;
        ties keep first-seen order

    Example:
        >>> stats = aggregate_symptoms(records)
        >>> [(s.symptom_type, s.occurrence_count) for s in stats]
        [('cramps', 2), ('fatigue', 1)]
    """
    counts = {}
    for record in records:
        for symptom in record.symptoms:
            label = symptom.strip()
            if not label:
                continue
            counts[label] = counts.get(label, 0) + 1

    # sorted() is stable, so dict insertion order breaks ties
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [
        SymptomStat(symptom_type=label, occurrence_count=count)
        for label, count in ranked
    ]

def get_most_common_symptoms(
    records: Iterable[CycleRecord],
    limit: int = MOST_COMMON_SYMPTOMS_LIMIT
) -> List[SymptomStat]:
    """Top `limit` symptoms by occurrence count."""
    return aggregate_symptoms(records)[:limit]

def resolve_symptom_stats(
    records: Iterable[CycleRecord],
    server_stats: Optional[List[SymptomStat]] = None,
    limit: int = MOST_COMMON_SYMPTOMS_LIMIT
) -> List[SymptomStat]:
    """
    Pick the most common symptoms to display.

    Server statistics are preferred when present; otherwise they are
    aggregated from the records. Either way at most `limit` are returned.
    """
    if server_stats:
        return sorted(server_stats, key=lambda stat: stat.occurrence_count, reverse=True)[:limit]
    return get_most_common_symptoms(records, limit)

def classify_intensity(symptom_count: int) -> SymptomIntensity:
    """
    Bucket the number of symptoms logged for one cycle.

    Args:
        symptom_count: Number of symptoms logged for the cycle

    Returns:
        NONE for 0, MILD for 1-2, MODERATE for 3-4, SEVERE for 5 or more
    """
    if symptom_count is None or symptom_count <= 0:
        return SymptomIntensity.NONE
    if symptom_count <= SYMPTOM_INTENSITY_LIMITS["mild"]:
        return SymptomIntensity.MILD
    if symptom_count <= SYMPTOM_INTENSITY_LIMITS["moderate"]:
        return SymptomIntensity.MODERATE
    return SymptomIntensity.SEVERE

def classify_record_intensity(record: Optional[CycleRecord]) -> SymptomIntensity:
    """Intensity bucket for the symptoms logged on a single record."""
    if record is None:
        return SymptomIntensity.NONE
    return classify_intensity(len(record.symptoms))
