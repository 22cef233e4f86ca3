"""
Configuration constants for the training calendar engine.

All tunable numbers used by the scorers, the projector and the progress
aggregator live here.  Runtime settings (data directory, identity, log level)
come from settings.yaml via core.engine.config_loader.
"""

from typing import Final

# =============================================================================
# CALENDAR
# =============================================================================

DAYS_PER_WEEK: Final[int] = 7
MONTH_GRID_CELLS: Final[int] = 42  # 6 rows x 7 columns
MONTH_INDICATOR_CAP: Final[int] = 4  # indicators shown per month cell before "+N"

VIEW_KINDS: Final[tuple[str, ...]] = ("day", "week", "month", "year")
SESSION_TYPES: Final[tuple[str, ...]] = ("strength", "cardio", "flexibility")

# =============================================================================
# SUBJECTIVE READINESS (sleep/energy/soreness/stress, each 1..10)
# =============================================================================

READINESS_INPUT_MIN: Final[int] = 1
READINESS_INPUT_MAX: Final[int] = 10

SLEEP_WEIGHT: Final[float] = 0.30
ENERGY_WEIGHT: Final[float] = 0.30
SORENESS_WEIGHT: Final[float] = 0.20  # applied to (11 - soreness)
STRESS_WEIGHT: Final[float] = 0.20  # applied to (11 - stress)
INVERSION_BASE: Final[int] = 11

SCORE_MIN: Final[float] = 1.0
SCORE_MAX: Final[float] = 10.0

# =============================================================================
# DATA-BASED READINESS (trailing training window)
# =============================================================================

READINESS_WINDOW_DAYS: Final[int] = 7
RESTED_SCORE: Final[float] = 8.5  # no training in the window
DEFAULT_RPE: Final[float] = 5.0  # used when an attempt has no overall_rpe

# (threshold, penalty) pairs, checked in order; first match wins
LOAD_PENALTIES: Final[tuple[tuple[float, float], ...]] = (
    (500.0, 3.0),
    (300.0, 2.0),
    (150.0, 1.0),
)
RPE_PENALTIES: Final[tuple[tuple[float, float], ...]] = (
    (8.0, 2.0),
    (7.0, 1.0),
    (6.0, 0.5),
)
REST_DAYS_BONUS_MIN: Final[int] = 2
REST_DAYS_BONUS: Final[float] = 1.0
NO_REST_PENALTY: Final[float] = 1.0
TREND_RPE_DELTA: Final[float] = 0.5

# =============================================================================
# PROGRESS
# =============================================================================

WEEKLY_BUCKETS_BACK: Final[int] = 8
TOP_RECORDS_LIMIT: Final[int] = 5

# =============================================================================
# SET LOGGING
# =============================================================================

RPE_MIN: Final[int] = 1
RPE_MAX: Final[int] = 10
