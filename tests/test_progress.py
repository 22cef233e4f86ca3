"""
Progress aggregation tests: streaks, weekly buckets, personal records and
the dashboard summary.  Today is Mon Oct 19, 2026.
"""

from datetime import date, datetime, timedelta

from training_calendar.core import progress
from training_calendar.core.models import ExerciseSetLog, SessionAttempt

TODAY = date(2026, 10, 19)


def _days_ago(n: int, hour: int = 18) -> datetime:
    d = TODAY - timedelta(days=n)
    return datetime(d.year, d.month, d.day, hour)


def _log(exercise: str, weight: float | None, reps: int | None = 5, when: datetime | None = None, lid: str = "") -> ExerciseSetLog:
    return ExerciseSetLog(
        id=lid or f"{exercise}-{weight}",
        session_attempt_id="att",
        exercise_id=exercise,
        athlete_id="ath",
        set_number=1,
        created_at=when or _days_ago(1),
        weight_kg=weight,
        reps_completed=reps,
    )


def _attempt(aid: str, completed: datetime | None, minutes: float = 60) -> SessionAttempt:
    return SessionAttempt(
        id=aid,
        session_id="s",
        athlete_id="ath",
        created_at=(completed or _days_ago(0)) - timedelta(minutes=minutes),
        completed_at=completed,
        duration_minutes=minutes if completed else None,
    )


class TestStreak:
    """Consecutive training days with a one-day grace for today."""

    def test_today_and_previous_days(self):
        assert progress.streak([_days_ago(0), _days_ago(1), _days_ago(2)], TODAY) == 3

    def test_today_not_trained_yet_counts_from_yesterday(self):
        assert progress.streak([_days_ago(1), _days_ago(2)], TODAY) == 2

    def test_gap_breaks_streak(self):
        assert progress.streak([_days_ago(1), _days_ago(3)], TODAY) == 1

    def test_two_days_without_training_is_zero(self):
        assert progress.streak([_days_ago(2), _days_ago(3)], TODAY) == 0

    def test_multiple_sessions_per_day_count_once(self):
        assert progress.streak([_days_ago(0, 7), _days_ago(0, 19), _days_ago(1)], TODAY) == 2

    def test_empty_history(self):
        assert progress.streak([], TODAY) == 0


class TestWeeklyBuckets:
    """Trailing Monday-aligned week counts."""

    def test_eight_buckets_oldest_first(self):
        buckets = progress.weekly_buckets([], TODAY)
        assert len(buckets) == 8
        assert buckets[0].week_start == date(2026, 8, 31)
        assert buckets[-1].week_start == date(2026, 10, 19)
        assert buckets[-1].label == "19 Oct"
        assert all(b.count == 0 for b in buckets)

    def test_completions_counted_per_week(self):
        completed = [_days_ago(0), _days_ago(0, 7), _days_ago(1), _days_ago(8), _days_ago(100)]
        buckets = progress.weekly_buckets(completed, TODAY)
        assert buckets[-1].count == 2  # Mon Oct 19, twice
        assert buckets[-2].count == 1  # Sun Oct 18
        assert buckets[-3].count == 1  # Sun Oct 11
        assert sum(b.count for b in buckets) == 4

    def test_monthly_counts(self):
        counts = progress.monthly_counts([_days_ago(0), _days_ago(1), datetime(2026, 1, 2), datetime(2025, 1, 2)], 2026)
        assert counts[9] == 2
        assert counts[0] == 1
        assert sum(counts.values()) == 3


class TestPersonalRecords:
    """Heaviest set per exercise."""

    def test_heaviest_weight_wins(self):
        logs = [_log("bench", 80), _log("bench", 100), _log("bench", 90)]
        records = progress.personal_records(logs)
        assert records["bench"].weight == 100

    def test_unweighted_sets_ignored(self):
        records = progress.personal_records([_log("pullup", None), _log("pullup", 0, lid="zero")])
        assert records == {}

    def test_tie_keeps_first(self):
        first = _log("squat", 120, reps=3, when=_days_ago(10), lid="first")
        second = _log("squat", 120, reps=5, when=_days_ago(2), lid="second")
        record = progress.personal_records([first, second])["squat"]
        assert record.reps == 3
        assert record.date == _days_ago(10)

    def test_display_name_lookup(self):
        records = progress.personal_records([_log("bench", 80)], {"bench": "Bench Press"})
        assert records["bench"].name == "Bench Press"

    def test_top_records_sorted_and_limited(self):
        logs = [_log(f"ex{i}", 10.0 * i) for i in range(1, 8)]
        top = progress.top_records(progress.personal_records(logs), limit=5)
        assert [r.weight for r in top] == [70, 60, 50, 40, 30]

    def test_total_volume(self):
        logs = [_log("bench", 100, 5), _log("squat", 80, 10), _log("run", None, None, lid="run")]
        assert progress.total_volume(logs) == 1300


class TestSummarize:
    """Dashboard aggregate."""

    def test_summary_counts_only_completed(self):
        attempts = [
            _attempt("a1", _days_ago(0), minutes=90),
            _attempt("a2", _days_ago(1), minutes=60),
            _attempt("a3", _days_ago(12), minutes=45),
            _attempt("open", None),
        ]
        logs = [_log("bench", 100, 5), _log("bench", 80, 8)]
        summary = progress.summarize(attempts, logs, TODAY)

        assert summary.total_sessions == 3
        assert summary.sessions_this_week == 1
        assert summary.sessions_this_month == 3
        assert summary.total_minutes == 195
        assert summary.total_hours == 3
        assert summary.total_volume == 1140
        assert summary.streak == 2
        assert len(summary.weekly) == 8
        assert [r.weight for r in summary.top_records] == [100]

    def test_empty_history(self):
        summary = progress.summarize([], [], TODAY)
        assert summary.total_sessions == 0
        assert summary.streak == 0
        assert summary.top_records == []
