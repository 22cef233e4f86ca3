"""
Tests for the storage layer: serializers, InMemoryStore semantics and
JsonlStore persistence.
"""

import threading
from dataclasses import fields
from datetime import date, datetime, timedelta, timezone

import pytest

from training_calendar.core.errors import NotFound, PermissionDenied, ValidationError
from training_calendar.core.models import (
    CoachMessage,
    ExerciseSetLog,
    MotivationalQuote,
    ReadinessLog,
    SessionAttempt,
    SessionTemplate,
)
from training_calendar.io import serializers
from training_calendar.io.store import (
    COACH_MESSAGES,
    EXERCISE_LOGS,
    LOCK_FILE_NAME,
    MOTIVATIONAL_QUOTES,
    READINESS_LOGS,
    SESSION_ATTEMPTS,
    SESSION_TEMPLATES,
    InMemoryStore,
    JsonlStore,
)

T0 = datetime(2026, 10, 19, 10, 0, 0)
CEST = timezone(timedelta(hours=2))
T0_CEST = datetime(2026, 10, 19, 10, 0, 0, tzinfo=CEST)


def _attempt(aid: str = "a1", athlete: str = "ath", **kwargs) -> SessionAttempt:
    return SessionAttempt(id=aid, session_id="s1", athlete_id=athlete, created_at=T0, **kwargs)


def _template(tid: str = "t1", program: str = "p1") -> SessionTemplate:
    return SessionTemplate(id=tid, name="Upper A", program_id=program, day_of_week=1, program_name="Strength")


class TestSerializers:
    """Dict conversion of persisted entities."""

    def test_completed_attempt_round_trip(self):
        attempt = _attempt(
            completed_at=datetime(2026, 10, 19, 11, 0),
            total_paused_seconds=120,
            overall_rpe=8,
            duration_minutes=58.0,
            athlete_notes="solid",
        )
        data = serializers.session_attempt_to_dict(attempt)
        assert data["completed_at"] == "2026-10-19T11:00:00"
        assert serializers.dict_to_session_attempt(data) == attempt

    def test_cardio_fields_only_written_when_set(self):
        strength = ExerciseSetLog(
            id="l1", session_attempt_id="a1", exercise_id="bench", athlete_id="ath",
            set_number=1, created_at=T0, weight_kg=100, reps_completed=5,
        )
        data = serializers.exercise_set_log_to_dict(strength)
        assert "distance_km" not in data
        assert serializers.dict_to_exercise_set_log(data) == strength

    def test_missing_required_field(self):
        data = serializers.session_attempt_to_dict(_attempt())
        del data["athlete_id"]
        with pytest.raises(ValidationError, match="athlete_id"):
            serializers.dict_to_session_attempt(data)

    def test_invalid_timestamp(self):
        data = serializers.session_attempt_to_dict(_attempt())
        data["created_at"] = "yesterday"
        with pytest.raises(ValidationError):
            serializers.dict_to_session_attempt(data)

    def test_model_validation_surfaces_as_validation_error(self):
        data = serializers.session_template_to_dict(_template())
        data["day_of_week"] = 9
        with pytest.raises(ValidationError):
            serializers.dict_to_session_template(data)

    def test_json_line_must_be_object(self):
        with pytest.raises(ValidationError):
            serializers.from_json_line("[1, 2]")
        with pytest.raises(ValidationError):
            serializers.from_json_line("{not json")


class TestInMemoryStore:
    """DataStore contract on the in-memory backend."""

    def test_insert_get_find(self):
        store = InMemoryStore()
        store.insert(SESSION_TEMPLATES, _template("t1", "p1"))
        store.insert(SESSION_TEMPLATES, _template("t2", "p2"))
        assert store.get(SESSION_TEMPLATES, "t1").program_id == "p1"
        assert [t.id for t in store.find(SESSION_TEMPLATES, program_id="p2")] == ["t2"]
        assert len(store.find(SESSION_TEMPLATES)) == 2

    def test_get_unknown_raises_not_found(self):
        with pytest.raises(NotFound):
            InMemoryStore().get(SESSION_TEMPLATES, "missing")

    def test_not_found_is_a_lookup_error(self):
        with pytest.raises(LookupError):
            InMemoryStore().get(SESSION_ATTEMPTS, "missing")

    def test_duplicate_id_rejected(self):
        store = InMemoryStore()
        store.insert(SESSION_TEMPLATES, _template())
        with pytest.raises(ValidationError):
            store.insert(SESSION_TEMPLATES, _template())

    def test_soft_deleted_rows_invisible(self):
        store = InMemoryStore()
        store.insert(SESSION_ATTEMPTS, _attempt("a1"), actor_id="ath")
        store.insert(SESSION_ATTEMPTS, _attempt("a2"), actor_id="ath")
        store.soft_delete(SESSION_ATTEMPTS, "a1", actor_id="ath")

        with pytest.raises(NotFound):
            store.get(SESSION_ATTEMPTS, "a1")
        assert [a.id for a in store.find(SESSION_ATTEMPTS)] == ["a2"]
        with pytest.raises(NotFound):
            store.update(SESSION_ATTEMPTS, _attempt("a1"), actor_id="ath")

    def test_insert_for_another_athlete_denied(self):
        with pytest.raises(PermissionDenied):
            InMemoryStore().insert(SESSION_ATTEMPTS, _attempt(athlete="ath"), actor_id="intruder")

    def test_update_by_non_owner_denied_and_row_unchanged(self):
        store = InMemoryStore()
        store.insert(SESSION_ATTEMPTS, _attempt(), actor_id="ath")
        with pytest.raises(PermissionDenied):
            store.update(SESSION_ATTEMPTS, _attempt(athlete="intruder", athlete_notes="x"), actor_id="intruder")
        assert store.get(SESSION_ATTEMPTS, "a1").athlete_notes is None

    def test_coach_message_owned_by_sender_and_recipient(self):
        store = InMemoryStore()
        message = CoachMessage(
            id="m1", coach_id="coach", athlete_id="ath", content="Go!",
            display_date=date(2026, 10, 19), created_at=T0,
        )
        store.insert(COACH_MESSAGES, message, actor_id="coach")
        store.update(COACH_MESSAGES, message, actor_id="ath")
        with pytest.raises(PermissionDenied):
            store.soft_delete(COACH_MESSAGES, "m1", actor_id="stranger")

    def test_reads_return_fresh_copies(self):
        store = InMemoryStore()
        store.insert(SESSION_ATTEMPTS, _attempt(), actor_id="ath")
        loaded = store.get(SESSION_ATTEMPTS, "a1")
        loaded.athlete_notes = "mutated locally"
        assert store.get(SESSION_ATTEMPTS, "a1").athlete_notes is None

    def test_get_or_create_returns_existing(self):
        store = InMemoryStore()
        first, created = store.get_or_create(
            SESSION_ATTEMPTS, match=lambda a: a.session_id == "s1", factory=lambda: _attempt("a1")
        )
        again, created_again = store.get_or_create(
            SESSION_ATTEMPTS, match=lambda a: a.session_id == "s1", factory=lambda: _attempt("a2")
        )
        assert (created, created_again) == (True, False)
        assert again.id == first.id

    def test_get_or_create_is_atomic_under_threads(self):
        store = InMemoryStore()
        barrier = threading.Barrier(8)
        results: list[tuple[str, bool]] = []
        lock = threading.Lock()

        def worker(n: int) -> None:
            barrier.wait()
            entity, created = store.get_or_create(
                SESSION_ATTEMPTS,
                match=lambda a: a.session_id == "s1",
                factory=lambda: _attempt(f"a{n}"),
                actor_id="ath",
            )
            with lock:
                results.append((entity.id, created))

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sum(created for _, created in results) == 1
        assert len({entity_id for entity_id, _ in results}) == 1
        assert len(store.find(SESSION_ATTEMPTS)) == 1


class TestJsonlStore:
    """Persistence to one JSONL file per collection."""

    def test_init_creates_files(self, tmp_path):
        store = JsonlStore(tmp_path / "data")
        assert not store.exists()
        store.init()
        assert store.exists()
        assert store.path_for(SESSION_ATTEMPTS).exists()
        assert store.path_for(SESSION_ATTEMPTS).name == "session_attempts.jsonl"

    def test_records_survive_reopen(self, tmp_path):
        store = JsonlStore(tmp_path)
        store.init()
        store.insert(SESSION_TEMPLATES, _template())
        store.insert(SESSION_ATTEMPTS, _attempt(overall_rpe=7), actor_id="ath")

        reopened = JsonlStore(tmp_path)
        assert reopened.get(SESSION_TEMPLATES, "t1") == _template()
        assert reopened.get(SESSION_ATTEMPTS, "a1").overall_rpe == 7

    def test_soft_delete_persisted_as_flag(self, tmp_path):
        store = JsonlStore(tmp_path)
        store.insert(SESSION_ATTEMPTS, _attempt(), actor_id="ath")
        store.soft_delete(SESSION_ATTEMPTS, "a1", actor_id="ath")

        content = store.path_for(SESSION_ATTEMPTS).read_text(encoding="utf-8")
        assert '"is_deleted":true' in content
        assert JsonlStore(tmp_path).find(SESSION_ATTEMPTS) == []

    def test_blank_lines_ignored(self, tmp_path):
        store = JsonlStore(tmp_path)
        store.insert(SESSION_TEMPLATES, _template())
        path = store.path_for(SESSION_TEMPLATES)
        path.write_text(path.read_text(encoding="utf-8") + "\n\n", encoding="utf-8")
        assert len(JsonlStore(tmp_path).find(SESSION_TEMPLATES)) == 1

    def test_corrupt_line_reports_line_number(self, tmp_path):
        store = JsonlStore(tmp_path)
        store.init()
        store.path_for(EXERCISE_LOGS).write_text('{"id": "x"}\n', encoding="utf-8")
        with pytest.raises(ValidationError, match="line 1"):
            JsonlStore(tmp_path)

    def test_no_temp_files_left_behind(self, tmp_path):
        store = JsonlStore(tmp_path)
        store.init()
        store.insert(SESSION_TEMPLATES, _template())
        store.update(SESSION_TEMPLATES, _template())
        files = [p for p in tmp_path.iterdir() if p.name != LOCK_FILE_NAME]
        assert sorted(p.suffix for p in files) == [".jsonl"] * 6


def _every_entity() -> list[tuple[str, object]]:
    return [
        (SESSION_TEMPLATES, SessionTemplate(
            id="t9", name="Intervals", program_id="p2", day_of_week=None, week_number=3,
            session_type="cardio", program_name="Endurance", description="6 x 800 m",
            estimated_duration_minutes=50,
        )),
        (SESSION_ATTEMPTS, SessionAttempt(
            id="a9", session_id="t9", athlete_id="ath", created_at=T0_CEST,
            paused_at=T0_CEST + timedelta(minutes=12), total_paused_seconds=45, athlete_notes="windy",
        )),
        (EXERCISE_LOGS, ExerciseSetLog(
            id="l-strength", session_attempt_id="a9", exercise_id="squat", athlete_id="ath",
            set_number=3, created_at=T0_CEST, weight_kg=102.5, reps_completed=5, rpe=8, notes="belt",
        )),
        (EXERCISE_LOGS, ExerciseSetLog(
            id="l-cardio", session_attempt_id="a9", exercise_id="run", athlete_id="ath",
            set_number=1, created_at=T0_CEST, distance_km=10.0, duration_minutes=55,
            heart_rate_avg=150, heart_rate_max=178, pace_per_km_seconds=330,
        )),
        (READINESS_LOGS, ReadinessLog(
            id="r9", athlete_id="ath", log_date=date(2026, 10, 19), sleep_quality=8, energy_level=7,
            muscle_soreness=3, stress_level=4, overall_score=7.25, created_at=T0_CEST,
            updated_at=T0_CEST + timedelta(hours=6), notes="slept well",
        )),
        (MOTIVATIONAL_QUOTES, MotivationalQuote(id="q9", content="Show up.", author="Coach K", is_active=False)),
        (COACH_MESSAGES, CoachMessage(
            id="m9", coach_id="coach", athlete_id="ath", content="Deload week", display_date=date(2026, 10, 19),
            created_at=T0_CEST, expires_at=date(2026, 10, 25), is_read=True,
        )),
    ]


def _offsets(entity: object) -> dict[str, timedelta | None]:
    return {
        f.name: getattr(entity, f.name).utcoffset()
        for f in fields(entity)
        if isinstance(getattr(entity, f.name), datetime)
    }


class TestRoundTrip:
    """Every persisted entity reads back unchanged, tz offsets included."""

    @pytest.mark.parametrize("backend", ["memory", "jsonl"])
    def test_entities_survive_store(self, tmp_path, backend):
        store = InMemoryStore() if backend == "memory" else JsonlStore(tmp_path)
        for collection, entity in _every_entity():
            store.insert(collection, entity)

        reader = store if backend == "memory" else JsonlStore(tmp_path)
        for collection, entity in _every_entity():
            loaded = reader.get(collection, entity.id)
            assert loaded == entity
            assert _offsets(loaded) == _offsets(entity)

    def test_offset_written_to_disk(self, tmp_path):
        store = JsonlStore(tmp_path)
        for collection, entity in _every_entity():
            store.insert(collection, entity)
        content = store.path_for(READINESS_LOGS).read_text(encoding="utf-8")
        assert "2026-10-19T16:00:00+02:00" in content
        assert JsonlStore(tmp_path).get(SESSION_ATTEMPTS, "a9").created_at.utcoffset() == timedelta(hours=2)


class TestJsonlStoreSharedDirectory:
    """Several JsonlStore instances (or processes) on one data directory."""

    @staticmethod
    def _same_session(attempt: SessionAttempt) -> bool:
        return attempt.session_id == "s1" and attempt.athlete_id == "ath"

    def test_get_or_create_sees_other_instance(self, tmp_path):
        first = JsonlStore(tmp_path)
        second = JsonlStore(tmp_path)

        a, created_a = first.get_or_create(SESSION_ATTEMPTS, self._same_session, lambda: _attempt("a1"), actor_id="ath")
        b, created_b = second.get_or_create(SESSION_ATTEMPTS, self._same_session, lambda: _attempt("a2"), actor_id="ath")

        assert (created_a, created_b) == (True, False)
        assert b.id == a.id
        assert [x.id for x in JsonlStore(tmp_path).find(SESSION_ATTEMPTS)] == ["a1"]

    def test_writes_from_both_instances_kept(self, tmp_path):
        first = JsonlStore(tmp_path)
        second = JsonlStore(tmp_path)
        first.insert(SESSION_TEMPLATES, _template("t1"))
        second.insert(SESSION_TEMPLATES, _template("t2"))
        first.soft_delete(SESSION_TEMPLATES, "t2")

        assert [t.id for t in JsonlStore(tmp_path).find(SESSION_TEMPLATES)] == ["t1"]

    def test_concurrent_get_or_create_across_instances(self, tmp_path):
        barrier = threading.Barrier(6)
        results: list[tuple[str, bool]] = []
        lock = threading.Lock()

        def worker(n: int) -> None:
            store = JsonlStore(tmp_path)
            barrier.wait()
            entity, created = store.get_or_create(
                SESSION_ATTEMPTS, self._same_session, lambda: _attempt(f"a{n}"), actor_id="ath"
            )
            with lock:
                results.append((entity.id, created))

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(6)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sum(created for _, created in results) == 1
        assert len({entity_id for entity_id, _ in results}) == 1
        assert len(JsonlStore(tmp_path).find(SESSION_ATTEMPTS)) == 1


class _FailingStore(InMemoryStore):
    fail = False

    def _persist(self, collection, rows):
        if self.fail:
            raise OSError("disk full")


class TestFailedWrites:
    """A write that cannot be persisted leaves the store as it was."""

    def test_update_not_cached_when_persist_fails(self):
        store = _FailingStore()
        store.insert(SESSION_ATTEMPTS, _attempt(), actor_id="ath")
        store.fail = True
        with pytest.raises(OSError):
            store.update(SESSION_ATTEMPTS, _attempt(athlete_notes="lost"), actor_id="ath")
        assert store.get(SESSION_ATTEMPTS, "a1").athlete_notes is None

    def test_insert_and_delete_not_cached_when_persist_fails(self):
        store = _FailingStore()
        store.insert(SESSION_ATTEMPTS, _attempt("a1"), actor_id="ath")
        store.fail = True
        with pytest.raises(OSError):
            store.insert(SESSION_ATTEMPTS, _attempt("a2"), actor_id="ath")
        with pytest.raises(OSError):
            store.soft_delete(SESSION_ATTEMPTS, "a1", actor_id="ath")
        assert [a.id for a in store.find(SESSION_ATTEMPTS)] == ["a1"]

    def test_jsonl_file_untouched_and_temp_removed(self, tmp_path, monkeypatch):
        store = JsonlStore(tmp_path)
        store.init()
        store.insert(SESSION_TEMPLATES, _template("t1"))
        before = store.path_for(SESSION_TEMPLATES).read_text(encoding="utf-8")

        def broken(row):
            raise OSError("disk full")

        monkeypatch.setattr("training_calendar.io.store.to_json_line", broken)
        with pytest.raises(OSError):
            store.insert(SESSION_TEMPLATES, _template("t2"))
        monkeypatch.undo()

        assert store.path_for(SESSION_TEMPLATES).read_text(encoding="utf-8") == before
        assert [t.id for t in store.find(SESSION_TEMPLATES)] == ["t1"]
        files = [p for p in tmp_path.iterdir() if p.name != LOCK_FILE_NAME]
        assert sorted(p.suffix for p in files) == [".jsonl"] * 6
