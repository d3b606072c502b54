"""
Classification enums for cycle phases, regularity and symptom intensity.
"""
from enum import Enum


class CyclePhase(str, Enum):
    """
    Menstrual cycle phases keyed by cycle day.
    """
    MENSTRUAL = "Menstrual"
    FOLLICULAR = "Follicular"
    OVULATION = "Ovulation"
    LUTEAL = "Luteal"
    UNKNOWN = "Unknown"


class LengthKind(str, Enum):
    """
    Which physiological range a length is checked against.
    """
    CYCLE = "cycle"
    PERIOD = "period"


class Regularity(str, Enum):
    """
    Classification of a single length against its normal range.
    """
    NORMAL = "Normal"
    IRREGULAR = "Irregular"
    UNKNOWN = "Unknown"


class Variability(str, Enum):
    """
    Classification of how much cycle lengths vary between cycles.
    """
    REGULAR = "Regular"
    NORMAL = "Normal"
    IRREGULAR = "Irregular"
    UNKNOWN = "Unknown"


class SymptomIntensity(str, Enum):
    """
    Intensity bucket for the number of symptoms logged in one cycle.
    """
    NONE = "None"
    MILD = "Mild"
    MODERATE = "Moderate"
    SEVERE = "Severe"


class FertilityStatus(str, Enum):
    """
    Whether the current cycle day sits in the fertile days.
    """
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    UNKNOWN = "Unknown"
