"""
Regularity classification for cycle and period lengths.
"""
from typing import Iterable, Optional, Union
from statistics import pstdev

from src.models.phase import LengthKind, Regularity, Variability
from src.services.constants import NORMAL_RANGES, VARIABILITY_THRESHOLDS

def classify_regularity(
    value: Optional[float],
    kind: Union[LengthKind, str]
) -> Regularity:
    """
    Classify a length against its fixed physiological normal range.

    Args:
        value: Cycle or period length in days, None when unknown
        kind: "cycle" (normal 21-35) or "period" (normal 3-7)

    Returns:
        NORMAL inside the range, IRREGULAR outside, UNKNOWN for None

    Example:
        >>> classify_regularity(28, "cycle")
        <Regularity.NORMAL: 'Normal'>
        >>> classify_regularity(None, "period")
        <Regularity.UNKNOWN: 'Unknown'>
    """
    if value is None:
        return Regularity.UNKNOWN

    low, high = NORMAL_RANGES[LengthKind(kind)]
    if low <= value <= high:
        return Regularity.NORMAL
    return Regularity.IRREGULAR

def classify_variability(cycle_lengths: Iterable[float]) -> Variability:
    """
    Classify how much cycle lengths vary, by population standard deviation.

    Args:
        cycle_lengths: Valid cycle lengths in days

    Returns:
        REGULAR below 3 days, NORMAL below 7, IRREGULAR otherwise;
        UNKNOWN with fewer than two lengths
    """
    lengths = [length for length in cycle_lengths if length is not None]
    if len(lengths) < 2:
        return Variability.UNKNOWN

    deviation = pstdev(lengths)
    if deviation < VARIABILITY_THRESHOLDS["regular"]:
        return Variability.REGULAR
    if deviation < VARIABILITY_THRESHOLDS["normal"]:
        return Variability.NORMAL
    return Variability.IRREGULAR
