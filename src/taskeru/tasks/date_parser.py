# src/taskeru/tasks/date_parser.py

"""
Date phrase resolver.

Turns the text after `due:` / `scheduled:` / `sched:` into a timestamp:
- exact forms first: today, tomorrow, weekday names, YYYY-MM-DD, YYYY/MM/DD,
  MM-DD, MM/DD, M-D, M/D (year-less dates roll over to next year once passed);
- relative phrases ("next week", "in 3 days", "2 weeks ago", "tomorrow at 3pm")
  via parsedatetime, only when the phrase carries a relative cue. The
  library accepts almost anything, so the cue list is the gate.

Anything else resolves to None ("no date"), never to an error.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta
from enum import StrEnum

import parsedatetime

from .task_models import end_of_day, resolve_now, start_of_day

logger = logging.getLogger(__name__)


class DateKind(StrEnum):
    DEADLINE = "deadline"
    SCHEDULED = "scheduled"


WEEKDAYS: dict[str, int] = {
    "monday": 0,
    "mon": 0,
    "tuesday": 1,
    "tue": 1,
    "wednesday": 2,
    "wed": 2,
    "thursday": 3,
    "thu": 3,
    "friday": 4,
    "fri": 4,
    "saturday": 5,
    "sat": 5,
    "sunday": 6,
    "sun": 6,
}

# Without one of these the phrase is not handed to the relative grammar.
NATURAL_CUES: tuple[str, ...] = (
    "next ",
    "last ",
    "in ",
    "ago",
    "from now",
    "tomorrow at",
    "yesterday at",
    "this ",
    "coming ",
    "following ",
)

_FULL_DATE = re.compile(r"^(\d{4})([-/])(\d{2})\2(\d{2})$")
_MONTH_DAY = re.compile(r"^(\d{1,2})([-/])(\d{1,2})$")

_CALENDAR = parsedatetime.Calendar(version=parsedatetime.VERSION_CONTEXT_STYLE)


def next_weekday(start: datetime, weekday: int) -> datetime:
    """Next occurrence strictly after `start` (same weekday -> one week later)."""
    days = (weekday - start.weekday()) % 7 or 7
    return start + timedelta(days=days)


def parse_traditional_date(text: str, now: datetime | None = None) -> datetime | None:
    """Exact keywords and numeric formats; result is end-of-day."""
    now = resolve_now(now)
    today = start_of_day(now)
    key = text.strip().lower()

    if key == "today":
        return end_of_day(today)
    if key == "tomorrow":
        return end_of_day(today + timedelta(days=1))
    if key in WEEKDAYS:
        return end_of_day(next_weekday(today, WEEKDAYS[key]))

    m = _FULL_DATE.match(key)
    if m:
        try:
            return now.replace(
                year=int(m.group(1)),
                month=int(m.group(3)),
                day=int(m.group(4)),
                hour=23,
                minute=59,
                second=59,
                microsecond=0,
            )
        except ValueError:
            return None

    m = _MONTH_DAY.match(key)
    if m:
        try:
            deadline = now.replace(
                month=int(m.group(1)),
                day=int(m.group(3)),
                hour=23,
                minute=59,
                second=59,
                microsecond=0,
            )
        except ValueError:
            return None
        if deadline < now:
            try:
                deadline = deadline.replace(year=deadline.year + 1)
            except ValueError:
                # Feb 29 with no leap day next year.
                return None
        return deadline

    return None


def parse_natural_date(text: str, now: datetime | None = None) -> datetime | None:
    """
    Resolve a date phrase as a deadline (23:59:59 on the resolved date).

    Returns None for empty or unrecognized input.
    """
    if not text or not text.strip():
        return None
    now = resolve_now(now)

    result = parse_traditional_date(text, now)
    if result is not None:
        return result

    phrase = " ".join(text.strip().lower().split())
    if not any(cue in phrase for cue in NATURAL_CUES):
        return None

    moment, ctx = _CALENDAR.parseDT(phrase, sourceTime=now.timetuple(), tzinfo=now.tzinfo)
    if not ctx.hasDateOrTime:
        logger.debug("Unrecognized relative date phrase: %r", text)
        return None
    return end_of_day(moment)


def resolve_date(text: str, kind: DateKind = DateKind.DEADLINE, now: datetime | None = None) -> datetime | None:
    """Resolve `text` and normalize it for `kind` (deadline 23:59:59, scheduled 00:00:00)."""
    deadline = parse_natural_date(text, now)
    if deadline is None:
        return None
    if kind == DateKind.SCHEDULED:
        return start_of_day(deadline)
    return deadline
