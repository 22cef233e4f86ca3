"""
Daily message selection: coach message first, quote of the day otherwise.
"""

from datetime import date, datetime
from typing import Iterable, Sequence

from .models import CoachMessage, DailyMessage, MotivationalQuote


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def day_of_year(value: date | datetime) -> int:
    """1 for January 1st."""
    return _as_date(value).timetuple().tm_yday


def quote_of_the_day(
    quotes: Sequence[MotivationalQuote], today: date | datetime
) -> MotivationalQuote | None:
    """
    Deterministic daily pick: index = day-of-year mod active-quote count.

    Every athlete sees the same quote on the same day, provided the quotes
    are passed in a stable order.
    """
    active = [q for q in quotes if q.is_active]
    if not active:
        return None
    return active[day_of_year(today) % len(active)]


def active_coach_messages(
    messages: Iterable[CoachMessage], athlete_id: str, today: date | datetime
) -> list[CoachMessage]:
    """Messages visible to the athlete today, newest first."""
    day = _as_date(today)
    visible = [
        m
        for m in messages
        if m.athlete_id == athlete_id
        and m.display_date <= day
        and (m.expires_at is None or m.expires_at >= day)
    ]
    return sorted(visible, key=lambda m: m.created_at, reverse=True)


def daily_message(
    quotes: Sequence[MotivationalQuote],
    messages: Iterable[CoachMessage],
    athlete_id: str,
    today: date | datetime,
) -> DailyMessage | None:
    """
    Pick what the athlete sees today.

    The newest unread coach message wins, then the newest coach message,
    then the quote of the day.  None when there is nothing to show.
    """
    visible = active_coach_messages(messages, athlete_id, today)
    if visible:
        unread = [m for m in visible if not m.is_read]
        chosen = unread[0] if unread else visible[0]
        return DailyMessage(
            source="coach",
            content=chosen.content,
            message_id=chosen.id,
            is_read=chosen.is_read,
        )

    quote = quote_of_the_day(quotes, today)
    if quote is None:
        return None
    return DailyMessage(source="quote", content=quote.content, author=quote.author)
