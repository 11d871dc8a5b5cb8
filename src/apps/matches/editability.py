"""
Time window for editing availability.

A match stays open for postulation changes while it is at least
``REFDESK_EDIT_WINDOW_HOURS`` whole hours away. Once it gets closer, or once
it has started, the window is closed for good.
"""
import logging
from datetime import date, datetime, time

from django.conf import settings
from django.utils import dateparse, timezone

logger = logging.getLogger(__name__)

SECONDS_PER_HOUR = 3600


def to_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        # "2024-07-28" and "2024-07-28T00:00:00.000Z" both appear in stored rows.
        parsed = dateparse.parse_date(value)
        if parsed is not None:
            return parsed
        stamp = dateparse.parse_datetime(value)
        if stamp is not None:
            return stamp.date()
    raise ValueError(f"invalid match date: {value!r}")


def _to_time(value) -> time:
    if isinstance(value, time):
        return value
    if isinstance(value, str):
        parsed = dateparse.parse_time(value.strip())
        if parsed is not None:
            return parsed
    raise ValueError(f"invalid match time: {value!r}")


def match_start(match_date, match_time) -> datetime:
    """Return the aware instant a match starts, in the project time zone."""
    naive = datetime.combine(to_date(match_date), _to_time(match_time))
    return timezone.make_aware(naive, timezone.get_current_timezone())


def is_match_editable(match_date, match_time, now=None) -> bool:
    try:
        start = match_start(match_date, match_time)
    except (TypeError, ValueError) as exc:
        logger.warning("cannot evaluate edit window for %r %r: %s", match_date, match_time, exc)
        return False

    now = now or timezone.now()
    if start < now:
        return False
    whole_hours = int((start - now).total_seconds() // SECONDS_PER_HOUR)
    return whole_hours >= settings.REFDESK_EDIT_WINDOW_HOURS


def is_editable(match, now=None) -> bool:
    return is_match_editable(match.date, match.time, now=now)
