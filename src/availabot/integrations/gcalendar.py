# Google Calendar Client: free/busy queries with a user's OAuth credential.
# Created: 2026-10-18

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any

import httpx

from availabot.availability import SEARCH_DAYS, BusyInterval
from availabot.errors import CalendarError
from availabot.integrations.session_store import Credential

logger = logging.getLogger(__name__)

_CALENDAR_BASE = "https://www.googleapis.com/calendar/v3"


class CalendarClient:
    """HTTP client for the Google Calendar free/busy API."""

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None):
        self._transport = transport

    async def get_busy_intervals(
        self,
        start: datetime,
        credential: Credential,
        calendar_id: str = "primary",
        days: int = SEARCH_DAYS,
    ) -> list[BusyInterval]:
        """List busy intervals of a calendar for the *days* following *start*.

        Args:
            start: Beginning of the window (timezone-aware).
            credential: The user's OAuth credential.
            calendar_id: Calendar ID (default: "primary").
            days: Length of the window in days.

        Returns:
            Busy intervals exactly as the provider reported them.

        Raises:
            CalendarError: if the request fails or the calendar reports errors.
        """
        body: dict[str, Any] = {
            "timeMin": start.isoformat(),
            "timeMax": (start + timedelta(days=days)).isoformat(),
            "calendarExpansionMax": 2,
            "items": [{"id": calendar_id}],
        }

        try:
            async with httpx.AsyncClient(timeout=15, transport=self._transport) as client:
                resp = await client.post(
                    f"{_CALENDAR_BASE}/freeBusy",
                    json=body,
                    headers={"Authorization": credential.authorization_header},
                )
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPError as exc:
            logger.error("Free/busy query failed: %s", exc)
            raise CalendarError(f"free/busy query failed: {exc}") from exc
        except ValueError as exc:
            logger.error("Free/busy response is not JSON: %s", exc)
            raise CalendarError(f"free/busy response is not JSON: {exc}") from exc

        calendar = data.get("calendars", {}).get(calendar_id)
        if calendar is None:
            raise CalendarError(f"calendar {calendar_id} missing from free/busy response")

        errors = calendar.get("errors")
        if errors:
            reasons = ", ".join(e.get("reason", "unknown") for e in errors)
            raise CalendarError(f"calendar {calendar_id} returned errors: {reasons}")

        return [BusyInterval.from_dict(item) for item in calendar.get("busy", [])]
