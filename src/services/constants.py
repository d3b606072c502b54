"""
Constants and shared thresholds for cycle analytics services.
"""
from src.models.phase import CyclePhase, LengthKind

# Fallbacks applied at the display/prediction boundary only
DEFAULT_CYCLE_LENGTH = 28
DEFAULT_PERIOD_LENGTH = 5

# Validity windows for derived lengths (inclusive upper bounds)
MIN_PERIOD_LENGTH = 1
MAX_PERIOD_LENGTH = 14
MAX_CYCLE_LENGTH = 60

# Inclusive normal ranges used for regularity classification
NORMAL_RANGES = {
    LengthKind.CYCLE: (21, 35),
    LengthKind.PERIOD: (3, 7)
}

# (first day, last day, phase); the last phase is open-ended
PHASE_BOUNDARIES = [
    (1, 5, CyclePhase.MENSTRUAL),
    (6, 13, CyclePhase.FOLLICULAR),
    (14, 16, CyclePhase.OVULATION),
    (17, None, CyclePhase.LUTEAL)
]

PHASE_LABELS = {
    CyclePhase.MENSTRUAL: "Menstrual Phase",
    CyclePhase.FOLLICULAR: "Follicular Phase",
    CyclePhase.OVULATION: "Ovulation Phase",
    CyclePhase.LUTEAL: "Luteal Phase",
    CyclePhase.UNKNOWN: "Unknown Phase"
}

FERTILE_DAYS = (12, 16)

# Prediction geometry
LUTEAL_PHASE_DAYS = 14
FERTILE_WINDOW_MARGIN = 2
PREDICTION_CONFIDENCE = 0.98

# Standard deviation cut-offs for cycle length variability
VARIABILITY_THRESHOLDS = {
    "regular": 3,
    "normal": 7
}

# Upper bounds of the symptom intensity buckets
SYMPTOM_INTENSITY_LIMITS = {
    "mild": 2,
    "moderate": 4
}

MOST_COMMON_SYMPTOMS_LIMIT = 10

HISTORY_DATE_FORMAT = "%d %b %Y"
