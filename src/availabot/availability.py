# Evening availability: next free evenings from a list of busy intervals.
# Created: 2026-10-18

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta

from availabot.errors import TimestampParseError

logger = logging.getLogger(__name__)

EVENING_START_HOUR = 19
SEARCH_DAYS = 7
MAX_EVENINGS = 3


@dataclass(frozen=True)
class BusyInterval:
    """A busy period as reported by the calendar provider.

    ``start`` and ``end`` are RFC 3339 strings (or aware datetimes).
    """

    start: str | datetime
    end: str | datetime

    @classmethod
    def from_dict(cls, data: dict[str, str]) -> BusyInterval:
        return cls(start=data.get("start", ""), end=data.get("end", ""))

    def parse(self) -> tuple[datetime, datetime]:
        return parse_timestamp(self.start), parse_timestamp(self.end)


def parse_timestamp(value: str | datetime) -> datetime:
    """Parse an RFC 3339 timestamp into an aware datetime.

    Raises:
        TimestampParseError: if *value* is not a timestamp with a UTC offset.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError as exc:
            raise TimestampParseError(value, str(exc)) from exc
    else:
        raise TimestampParseError(value, "not a string")

    if parsed.tzinfo is None or parsed.utcoffset() is None:
        raise TimestampParseError(value, "missing UTC offset")
    return parsed


def candidate_evenings(reference_time: datetime, days: int = SEARCH_DAYS) -> list[datetime]:
    """Return the starts of the next *days* evenings in the reference timezone.

    The first one is today's if *reference_time* is before 19:00, otherwise
    tomorrow's.
    """
    first = reference_time.replace(hour=EVENING_START_HOUR, minute=0, second=0, microsecond=0)
    if reference_time.hour >= EVENING_START_HOUR:
        first += timedelta(days=1)
    return [first + timedelta(days=day) for day in range(days)]


def _evening_end(evening_start: datetime) -> datetime:
    # Midnight that closes the evening, same tzinfo.
    return (evening_start + timedelta(days=1)).replace(hour=0)


def compute_free_evenings(
    reference_time: datetime,
    busy_intervals: Iterable[BusyInterval],
    limit: int = MAX_EVENINGS,
) -> list[datetime]:
    """Return up to *limit* free evenings within the next seven days.

    An evening runs from 19:00 to midnight in *reference_time*'s timezone and
    is free when no busy interval overlaps it. An interval ending exactly at
    19:00 leaves the evening free; one starting exactly at midnight does not.

    Raises:
        ValueError: if *reference_time* is naive.
        TimestampParseError: if any interval has a malformed timestamp. No
            partial result is returned in that case.
    """
    if reference_time.tzinfo is None:
        raise ValueError("reference_time must be timezone-aware")

    busy = [interval.parse() for interval in busy_intervals]

    free: list[datetime] = []
    for evening_start in candidate_evenings(reference_time):
        evening_end = _evening_end(evening_start)
        overlaps = any(
            busy_start <= evening_end and busy_end > evening_start for busy_start, busy_end in busy
        )
        if not overlaps:
            free.append(evening_start)
            if len(free) == limit:
                break

    logger.debug("Found %d free evening(s) from %s", len(free), reference_time.isoformat())
    return free


def format_evenings(evenings: list[datetime]) -> str:
    """Render free evenings as a chat reply."""
    if not evenings:
        return "No free evenings in the next week."

    lines = ["Your next free evenings:"]
    for evening in evenings:
        lines.append(f"- {evening.strftime('%A %d %B')} from {evening.strftime('%H:%M')}")
    return "\n".join(lines)
