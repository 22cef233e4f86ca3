"""
Readiness check-ins and scores for one athlete.
"""

from dataclasses import replace
from datetime import date, datetime, timedelta

from loguru import logger

from ..core import lifecycle
from ..core import readiness as scorer
from ..core.config import READINESS_WINDOW_DAYS
from ..core.errors import InvalidInput
from ..core.models import DataBasedReadiness, ReadinessLog
from ..io.store import READINESS_LOGS, SESSION_ATTEMPTS, DataStore


def log_readiness(
    store: DataStore,
    athlete_id: str,
    now: datetime,
    sleep_quality: int,
    energy_level: int,
    muscle_soreness: int,
    stress_level: int,
    notes: str | None = None,
) -> ReadinessLog:
    """
    Record today's check-in (upsert).

    A second submission on the same day overwrites the first one instead of
    adding a row.

    Raises:
        InvalidInput: If any input is outside 1..10 (nothing is written)
    """
    try:
        overall = scorer.score(sleep_quality, energy_level, muscle_soreness, stress_level)
    except InvalidInput as e:
        logger.warning(f"[READINESS] Rejected check-in for athlete_id={athlete_id}: {e}")
        raise

    today = now.date()
    clean_notes = (notes or "").strip() or None
    values = dict(
        sleep_quality=sleep_quality,
        energy_level=energy_level,
        muscle_soreness=muscle_soreness,
        stress_level=stress_level,
        overall_score=overall,
        notes=clean_notes,
    )

    log, created = store.get_or_create(
        READINESS_LOGS,
        match=lambda r: r.athlete_id == athlete_id and r.log_date == today,
        factory=lambda: ReadinessLog(
            id=lifecycle.new_id(),
            athlete_id=athlete_id,
            log_date=today,
            created_at=now,
            updated_at=now,
            **values,
        ),
        actor_id=athlete_id,
    )
    if created:
        logger.info(f"[READINESS] Logged readiness {overall} for athlete_id={athlete_id} on {today}")
        return log

    updated = store.update(READINESS_LOGS, replace(log, updated_at=now, **values), actor_id=athlete_id)
    logger.info(f"[READINESS] Updated readiness to {overall} for athlete_id={athlete_id} on {today}")
    return updated


def get_today_readiness(store: DataStore, athlete_id: str, today: date) -> ReadinessLog | None:
    logs = store.find(READINESS_LOGS, athlete_id=athlete_id, log_date=today)
    return logs[0] if logs else None


def get_readiness_history(
    store: DataStore, athlete_id: str, today: date, days: int = 30
) -> list[ReadinessLog]:
    """Check-ins from the last `days` days, newest first."""
    start = today - timedelta(days=days)
    logs = [r for r in store.find(READINESS_LOGS, athlete_id=athlete_id) if r.log_date >= start]
    return sorted(logs, key=lambda r: r.log_date, reverse=True)


def calculate_data_based_readiness(
    store: DataStore,
    athlete_id: str,
    now: datetime,
    window_days: int = READINESS_WINDOW_DAYS,
) -> DataBasedReadiness:
    attempts = store.find(SESSION_ATTEMPTS, athlete_id=athlete_id)
    result = scorer.data_based_score(attempts, now, window_days)
    logger.debug(
        f"[READINESS] Data-based score for athlete_id={athlete_id}: {result.score} "
        f"(load={result.training_load}, rpe={result.avg_rpe}, rest_days={result.rest_days}, trend={result.trend})"
    )
    return result
