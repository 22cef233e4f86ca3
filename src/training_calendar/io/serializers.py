"""
JSON serialization for training-calendar models.

Handles conversion between dataclasses and JSON-compatible dicts.
Timestamps are written as ISO-8601 strings with their UTC offset (if any)
preserved, dates as YYYY-MM-DD; numbers are written as-is, so a
serialize/deserialize round trip reproduces every field exactly.
"""

import json
from datetime import date, datetime
from typing import Any, Callable

from ..core.errors import InvalidInput, ValidationError
from ..core.models import (
    CoachMessage,
    ExerciseSetLog,
    MotivationalQuote,
    ReadinessLog,
    SessionAttempt,
    SessionTemplate,
)


def _dt_to_str(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _date_to_str(value: date | None) -> str | None:
    return value.isoformat() if value is not None else None


def parse_datetime(value: str | None, name: str) -> datetime | None:
    """
    Parse an ISO-8601 timestamp.

    Raises:
        ValidationError: If the value is not a valid timestamp
    """
    if value is None:
        return None
    try:
        return datetime.fromisoformat(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid timestamp for {name}: {value!r}") from e


def parse_date(value: str | None, name: str) -> date | None:
    """
    Parse a YYYY-MM-DD date.

    Raises:
        ValidationError: If the value is not a valid date
    """
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid date for {name}: {value!r}. Expected YYYY-MM-DD") from e


def _required(data: dict[str, Any], key: str) -> Any:
    if data.get(key) is None:
        raise ValidationError(f"Missing required field: {key}")
    return data[key]


def _build(factory: Callable[..., Any], **kwargs: Any) -> Any:
    """Construct a model, converting its own validation failures to ValidationError."""
    try:
        return factory(**kwargs)
    except ValidationError:
        raise
    except (InvalidInput, TypeError) as e:
        raise ValidationError(str(e)) from e


def _opt_int(value: Any) -> int | None:
    return int(value) if value is not None else None


def _opt_float(value: Any) -> float | None:
    return float(value) if value is not None else None


# =============================================================================
# SessionTemplate
# =============================================================================


def session_template_to_dict(template: SessionTemplate) -> dict[str, Any]:
    return {
        "id": template.id,
        "name": template.name,
        "program_id": template.program_id,
        "program_name": template.program_name,
        "day_of_week": template.day_of_week,
        "week_number": template.week_number,
        "session_type": template.session_type,
        "description": template.description,
        "estimated_duration_minutes": template.estimated_duration_minutes,
    }


def dict_to_session_template(data: dict[str, Any]) -> SessionTemplate:
    """
    Convert dict to SessionTemplate.

    Raises:
        ValidationError: If data is invalid
    """
    return _build(
        SessionTemplate,
        id=str(_required(data, "id")),
        name=str(_required(data, "name")),
        program_id=str(_required(data, "program_id")),
        program_name=str(data.get("program_name") or ""),
        day_of_week=_opt_int(data.get("day_of_week")),
        week_number=int(data.get("week_number", 1)),
        session_type=data.get("session_type", "strength"),
        description=data.get("description"),
        estimated_duration_minutes=_opt_int(data.get("estimated_duration_minutes")),
    )


# =============================================================================
# SessionAttempt
# =============================================================================


def session_attempt_to_dict(attempt: SessionAttempt) -> dict[str, Any]:
    return {
        "id": attempt.id,
        "session_id": attempt.session_id,
        "athlete_id": attempt.athlete_id,
        "created_at": _dt_to_str(attempt.created_at),
        "paused_at": _dt_to_str(attempt.paused_at),
        "total_paused_seconds": attempt.total_paused_seconds,
        "completed_at": _dt_to_str(attempt.completed_at),
        "overall_rpe": attempt.overall_rpe,
        "duration_minutes": attempt.duration_minutes,
        "athlete_notes": attempt.athlete_notes,
    }


def dict_to_session_attempt(data: dict[str, Any]) -> SessionAttempt:
    """
    Convert dict to SessionAttempt.

    Raises:
        ValidationError: If data is invalid
    """
    return _build(
        SessionAttempt,
        id=str(_required(data, "id")),
        session_id=str(_required(data, "session_id")),
        athlete_id=str(_required(data, "athlete_id")),
        created_at=parse_datetime(_required(data, "created_at"), "created_at"),
        paused_at=parse_datetime(data.get("paused_at"), "paused_at"),
        total_paused_seconds=int(data.get("total_paused_seconds") or 0),
        completed_at=parse_datetime(data.get("completed_at"), "completed_at"),
        overall_rpe=_opt_int(data.get("overall_rpe")),
        duration_minutes=_opt_float(data.get("duration_minutes")),
        athlete_notes=data.get("athlete_notes"),
    )


# =============================================================================
# ExerciseSetLog
# =============================================================================


def exercise_set_log_to_dict(log: ExerciseSetLog) -> dict[str, Any]:
    """
    Convert ExerciseSetLog to a compact dict.

    Cardio fields are only written when set, keeping strength rows short.
    """
    data: dict[str, Any] = {
        "id": log.id,
        "session_attempt_id": log.session_attempt_id,
        "exercise_id": log.exercise_id,
        "athlete_id": log.athlete_id,
        "set_number": log.set_number,
        "created_at": _dt_to_str(log.created_at),
        "weight_kg": log.weight_kg,
        "reps_completed": log.reps_completed,
        "rpe": log.rpe,
        "notes": log.notes,
    }
    for key in ("distance_km", "duration_minutes", "heart_rate_avg", "heart_rate_max", "pace_per_km_seconds"):
        value = getattr(log, key)
        if value is not None:
            data[key] = value
    return data


def dict_to_exercise_set_log(data: dict[str, Any]) -> ExerciseSetLog:
    """
    Convert dict to ExerciseSetLog.

    Raises:
        ValidationError: If data is invalid
    """
    return _build(
        ExerciseSetLog,
        id=str(_required(data, "id")),
        session_attempt_id=str(_required(data, "session_attempt_id")),
        exercise_id=str(_required(data, "exercise_id")),
        athlete_id=str(_required(data, "athlete_id")),
        set_number=int(_required(data, "set_number")),
        created_at=parse_datetime(_required(data, "created_at"), "created_at"),
        weight_kg=_opt_float(data.get("weight_kg")),
        reps_completed=_opt_int(data.get("reps_completed")),
        rpe=_opt_int(data.get("rpe")),
        notes=data.get("notes"),
        distance_km=_opt_float(data.get("distance_km")),
        duration_minutes=_opt_int(data.get("duration_minutes")),
        heart_rate_avg=_opt_int(data.get("heart_rate_avg")),
        heart_rate_max=_opt_int(data.get("heart_rate_max")),
        pace_per_km_seconds=_opt_int(data.get("pace_per_km_seconds")),
    )


# =============================================================================
# ReadinessLog
# =============================================================================


def readiness_log_to_dict(log: ReadinessLog) -> dict[str, Any]:
    return {
        "id": log.id,
        "athlete_id": log.athlete_id,
        "log_date": _date_to_str(log.log_date),
        "sleep_quality": log.sleep_quality,
        "energy_level": log.energy_level,
        "muscle_soreness": log.muscle_soreness,
        "stress_level": log.stress_level,
        "overall_score": log.overall_score,
        "notes": log.notes,
        "created_at": _dt_to_str(log.created_at),
        "updated_at": _dt_to_str(log.updated_at),
    }


def dict_to_readiness_log(data: dict[str, Any]) -> ReadinessLog:
    """
    Convert dict to ReadinessLog.

    Raises:
        ValidationError: If data is invalid
    """
    return _build(
        ReadinessLog,
        id=str(_required(data, "id")),
        athlete_id=str(_required(data, "athlete_id")),
        log_date=parse_date(_required(data, "log_date"), "log_date"),
        sleep_quality=int(_required(data, "sleep_quality")),
        energy_level=int(_required(data, "energy_level")),
        muscle_soreness=int(_required(data, "muscle_soreness")),
        stress_level=int(_required(data, "stress_level")),
        overall_score=float(_required(data, "overall_score")),
        notes=data.get("notes"),
        created_at=parse_datetime(_required(data, "created_at"), "created_at"),
        updated_at=parse_datetime(_required(data, "updated_at"), "updated_at"),
    )


# =============================================================================
# MotivationalQuote / CoachMessage
# =============================================================================


def motivational_quote_to_dict(quote: MotivationalQuote) -> dict[str, Any]:
    return {
        "id": quote.id,
        "content": quote.content,
        "author": quote.author,
        "is_active": quote.is_active,
    }


def dict_to_motivational_quote(data: dict[str, Any]) -> MotivationalQuote:
    return _build(
        MotivationalQuote,
        id=str(_required(data, "id")),
        content=str(_required(data, "content")),
        author=data.get("author"),
        is_active=bool(data.get("is_active", True)),
    )


def coach_message_to_dict(message: CoachMessage) -> dict[str, Any]:
    return {
        "id": message.id,
        "coach_id": message.coach_id,
        "athlete_id": message.athlete_id,
        "content": message.content,
        "display_date": _date_to_str(message.display_date),
        "expires_at": _date_to_str(message.expires_at),
        "is_read": message.is_read,
        "created_at": _dt_to_str(message.created_at),
    }


def dict_to_coach_message(data: dict[str, Any]) -> CoachMessage:
    return _build(
        CoachMessage,
        id=str(_required(data, "id")),
        coach_id=str(_required(data, "coach_id")),
        athlete_id=str(_required(data, "athlete_id")),
        content=str(_required(data, "content")),
        display_date=parse_date(_required(data, "display_date"), "display_date"),
        expires_at=parse_date(data.get("expires_at"), "expires_at"),
        is_read=bool(data.get("is_read", False)),
        created_at=parse_datetime(_required(data, "created_at"), "created_at"),
    )


# =============================================================================
# JSON lines
# =============================================================================


def to_json_line(data: dict[str, Any]) -> str:
    """Serialize one record dict to a single compact JSON line."""
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)


def from_json_line(line: str) -> dict[str, Any]:
    """
    Parse one JSON line.

    Raises:
        ValidationError: If the line is not a JSON object
    """
    try:
        data = json.loads(line)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ValidationError("Each line must be a JSON object")
    return data
