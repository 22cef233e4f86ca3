"""
Readiness scoring.

Two independent scores on a 1..10 scale:

- score(): subjective check-in, weighted from sleep, energy, soreness and
  stress.  Soreness and stress are inverted (11 - x) because a high raw value
  means worse readiness.
- data_based_score(): derived from the trailing week of completed attempts
  (training load, average RPE, rest days and RPE trend).
"""

import math
from datetime import datetime, timedelta
from numbers import Integral
from typing import Iterable

from .config import (
    DEFAULT_RPE,
    ENERGY_WEIGHT,
    INVERSION_BASE,
    LOAD_PENALTIES,
    NO_REST_PENALTY,
    READINESS_INPUT_MAX,
    READINESS_INPUT_MIN,
    READINESS_WINDOW_DAYS,
    RESTED_SCORE,
    REST_DAYS_BONUS,
    REST_DAYS_BONUS_MIN,
    RPE_PENALTIES,
    SCORE_MAX,
    SCORE_MIN,
    SLEEP_WEIGHT,
    SORENESS_WEIGHT,
    STRESS_WEIGHT,
    TREND_RPE_DELTA,
)
from .errors import InvalidInput
from .models import DataBasedReadiness, SessionAttempt, Trend


def _round_half_up(value: float, digits: int) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def _clamp(value: float, low: float = SCORE_MIN, high: float = SCORE_MAX) -> float:
    return max(low, min(high, value))


def _validate_input(value: int, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise InvalidInput(f"{name} must be an integer, got {value!r}")
    if not READINESS_INPUT_MIN <= value <= READINESS_INPUT_MAX:
        raise InvalidInput(
            f"{name} must be between {READINESS_INPUT_MIN} and {READINESS_INPUT_MAX}, got {value}"
        )
    return int(value)


def score(sleep_quality: int, energy_level: int, muscle_soreness: int, stress_level: int) -> float:
    """
    Weighted subjective readiness.

    score = 0.30*sleep + 0.30*energy + 0.20*(11 - soreness) + 0.20*(11 - stress)

    Rounded half-up to 2 decimals; always within [1.0, 10.0].

    Raises:
        InvalidInput: any input outside 1..10 (never silently clamped)
    """
    sleep = _validate_input(sleep_quality, "sleep_quality")
    energy = _validate_input(energy_level, "energy_level")
    soreness = _validate_input(muscle_soreness, "muscle_soreness")
    stress = _validate_input(stress_level, "stress_level")

    raw = (
        sleep * SLEEP_WEIGHT
        + energy * ENERGY_WEIGHT
        + (INVERSION_BASE - soreness) * SORENESS_WEIGHT
        + (INVERSION_BASE - stress) * STRESS_WEIGHT
    )
    return _clamp(_round_half_up(raw, 2))


def _mean_rpe(attempts: list[SessionAttempt]) -> float:
    return sum(
        a.overall_rpe if a.overall_rpe is not None else DEFAULT_RPE for a in attempts
    ) / len(attempts)


def _first_penalty(value: float, table: tuple[tuple[float, float], ...]) -> float:
    for threshold, penalty in table:
        if value > threshold:
            return penalty
    return 0.0


def rpe_trend(newest_first: list[SessionAttempt]) -> Trend:
    """
    Compare the RPE of the more recent half of attempts to the earlier half.

    The recent half takes ceil(n/2) attempts; with a single attempt there is
    nothing to compare and the trend is stable.
    """
    if not newest_first:
        return "stable"
    split = math.ceil(len(newest_first) / 2)
    recent = newest_first[:split]
    earlier = newest_first[split:]
    recent_avg = _mean_rpe(recent)
    earlier_avg = _mean_rpe(earlier) if earlier else recent_avg

    if recent_avg <= earlier_avg - TREND_RPE_DELTA:
        return "improving"
    if recent_avg >= earlier_avg + TREND_RPE_DELTA:
        return "declining"
    return "stable"


def data_based_score(
    attempts: Iterable[SessionAttempt],
    now: datetime,
    window_days: int = READINESS_WINDOW_DAYS,
) -> DataBasedReadiness:
    """
    Readiness derived from the trailing window of completed attempts.

    training_load = total_minutes * (avg_rpe / 10), then starting from 10:
    -3/-2/-1 for load > 500/300/150, -2/-1/-0.5 for avg RPE > 8/7/6,
    +1 with >= 2 rest days, -1 with none; clamped to [1, 10].

    Args:
        attempts: Attempt history (open ones and those outside the window are ignored)
        now: Caller's clock; the window is [now - window_days, now]
        window_days: Window length in days

    Returns:
        DataBasedReadiness (score 1 decimal, load integer, avg_rpe 1 decimal)
    """
    window_start = now - timedelta(days=window_days)
    recent = sorted(
        (
            a
            for a in attempts
            if a.completed_at is not None and window_start <= a.completed_at <= now
        ),
        key=lambda a: a.completed_at,
        reverse=True,
    )

    if not recent:
        return DataBasedReadiness(
            score=RESTED_SCORE,
            training_load=0,
            avg_rpe=0.0,
            rest_days=window_days,
            trend="stable",
        )

    total_minutes = sum(a.duration_minutes or 0 for a in recent)
    avg_rpe = _mean_rpe(recent)
    training_days = {a.completed_at.date() for a in recent}
    rest_days = max(0, window_days - len(training_days))
    training_load = total_minutes * (avg_rpe / 10)

    value = SCORE_MAX
    value -= _first_penalty(training_load, LOAD_PENALTIES)
    value -= _first_penalty(avg_rpe, RPE_PENALTIES)
    if rest_days >= REST_DAYS_BONUS_MIN:
        value += REST_DAYS_BONUS
    elif rest_days == 0:
        value -= NO_REST_PENALTY

    return DataBasedReadiness(
        score=_round_half_up(_clamp(value), 1),
        training_load=int(_round_half_up(training_load, 0)),
        avg_rpe=_round_half_up(avg_rpe, 1),
        rest_days=rest_days,
        trend=rpe_trend(recent),
    )
