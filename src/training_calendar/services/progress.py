"""Progress dashboard for one athlete."""

from datetime import date
from typing import Mapping

from loguru import logger

from ..core import progress
from ..core.config import TOP_RECORDS_LIMIT, WEEKLY_BUCKETS_BACK
from ..core.models import ProgressSummary
from ..io.store import EXERCISE_LOGS, SESSION_ATTEMPTS, DataStore


def get_progress_summary(
    store: DataStore,
    athlete_id: str,
    today: date,
    exercise_names: Mapping[str, str] | None = None,
    weeks_back: int = WEEKLY_BUCKETS_BACK,
    top_n: int = TOP_RECORDS_LIMIT,
) -> ProgressSummary:
    attempts = store.find(SESSION_ATTEMPTS, athlete_id=athlete_id)
    logs = store.find(EXERCISE_LOGS, athlete_id=athlete_id)
    summary = progress.summarize(attempts, logs, today, exercise_names, weeks_back, top_n)
    logger.debug(
        f"[PROGRESS] athlete_id={athlete_id}: total={summary.total_sessions}, "
        f"week={summary.sessions_this_week}, streak={summary.streak}"
    )
    return summary
