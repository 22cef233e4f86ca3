"""
Daily quotes and coach messages.

Messages are written by their coach and only read (or marked read) by the
recipient athlete.
"""

from dataclasses import replace
from datetime import date, datetime

from loguru import logger

from ..core import lifecycle, motivation
from ..core.errors import InvalidInput, PermissionDenied
from ..core.models import CoachMessage, DailyMessage, MotivationalQuote
from ..io.store import COACH_MESSAGES, MOTIVATIONAL_QUOTES, DataStore


def add_quote(store: DataStore, content: str, author: str | None = None) -> MotivationalQuote:
    content = content.strip()
    if not content:
        raise InvalidInput("Quote content must not be empty")
    quote = MotivationalQuote(id=lifecycle.new_id(), content=content, author=author)
    return store.insert(MOTIVATIONAL_QUOTES, quote)


def get_daily_message(store: DataStore, athlete_id: str, today: date) -> DailyMessage | None:
    quotes = store.find(MOTIVATIONAL_QUOTES, is_active=True)
    messages = store.find(COACH_MESSAGES, athlete_id=athlete_id)
    return motivation.daily_message(quotes, messages, athlete_id, today)


def send_coach_message(
    store: DataStore,
    coach_id: str,
    athlete_id: str,
    content: str,
    now: datetime,
    display_date: date | None = None,
    expires_at: date | None = None,
) -> CoachMessage:
    content = content.strip()
    if not content:
        raise InvalidInput("Message content must not be empty")
    message = CoachMessage(
        id=lifecycle.new_id(),
        coach_id=coach_id,
        athlete_id=athlete_id,
        content=content,
        display_date=display_date or now.date(),
        expires_at=expires_at,
        created_at=now,
    )
    saved = store.insert(COACH_MESSAGES, message, actor_id=coach_id)
    logger.info(f"[MOTIVATION] Coach {coach_id} sent message {saved.id} to athlete_id={athlete_id}")
    return saved


def mark_message_read(store: DataStore, message_id: str, athlete_id: str) -> CoachMessage:
    message: CoachMessage = store.get(COACH_MESSAGES, message_id)
    if message.athlete_id != athlete_id:
        raise PermissionDenied(COACH_MESSAGES, message_id, athlete_id)
    if message.is_read:
        return message
    return store.update(COACH_MESSAGES, replace(message, is_read=True), actor_id=athlete_id)


def delete_coach_message(store: DataStore, message_id: str, coach_id: str) -> None:
    """Soft-delete a message; only the coach who sent it may do so."""
    message: CoachMessage = store.get(COACH_MESSAGES, message_id)
    if message.coach_id != coach_id:
        logger.warning(f"[MOTIVATION] {coach_id} tried to delete message {message_id} sent by {message.coach_id}")
        raise PermissionDenied(COACH_MESSAGES, message_id, coach_id)
    store.soft_delete(COACH_MESSAGES, message_id, actor_id=coach_id)
