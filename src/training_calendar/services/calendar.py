"""
Calendar feed: load templates and attempt history, then project them.
"""

from datetime import datetime
from typing import Iterable

from loguru import logger

from ..core.config import MONTH_INDICATOR_CAP
from ..core.lifecycle import new_id
from ..core.models import CalendarWindow, SessionTemplate
from ..core.projector import CalendarProjection, CompletionIndex, project
from ..io.store import SESSION_ATTEMPTS, SESSION_TEMPLATES, DataStore


def dedupe_templates(templates: Iterable[SessionTemplate]) -> list[SessionTemplate]:
    """
    Merge template lists (e.g. own programs + assigned programs) keeping the
    first occurrence of each id.
    """
    seen: set[str] = set()
    unique: list[SessionTemplate] = []
    for template in templates:
        if template.id in seen:
            continue
        seen.add(template.id)
        unique.append(template)
    return unique


def load_templates(store: DataStore, program_ids: Iterable[str] | None = None) -> list[SessionTemplate]:
    """All templates, or only those belonging to program_ids."""
    if program_ids is None:
        return dedupe_templates(store.find(SESSION_TEMPLATES))
    found: list[SessionTemplate] = []
    for program_id in program_ids:
        found.extend(store.find(SESSION_TEMPLATES, program_id=program_id))
    return dedupe_templates(found)


def get_calendar_view(
    store: DataStore,
    athlete_id: str,
    window: CalendarWindow,
    now: datetime,
    program_ids: Iterable[str] | None = None,
    indicator_cap: int = MONTH_INDICATOR_CAP,
) -> CalendarProjection:
    templates = load_templates(store, program_ids)
    attempts = store.find(SESSION_ATTEMPTS, athlete_id=athlete_id)
    logger.debug(
        f"[CALENDAR] {window.kind} view at {window.anchor} for athlete_id={athlete_id}: "
        f"{len(templates)} templates, {len(attempts)} attempts"
    )
    return project(templates, window, CompletionIndex.from_attempts(attempts), now, indicator_cap)


def add_template(
    store: DataStore,
    name: str,
    program_id: str,
    day_of_week: int | None,
    program_name: str = "",
    week_number: int = 1,
    session_type: str = "strength",
    description: str | None = None,
    estimated_duration_minutes: int | None = None,
) -> SessionTemplate:
    """Register a session template (normally authored in the program editor)."""
    template = SessionTemplate(
        id=new_id(),
        name=name.strip(),
        program_id=program_id,
        program_name=program_name,
        day_of_week=day_of_week,
        week_number=week_number,
        session_type=session_type,  # type: ignore[arg-type]
        description=description,
        estimated_duration_minutes=estimated_duration_minutes,
    )
    saved = store.insert(SESSION_TEMPLATES, template)
    logger.info(f"[CALENDAR] Added template '{saved.name}' ({saved.id}) on day {saved.day_of_week}")
    return saved
