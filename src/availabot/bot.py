# Availability bot: turns an inbound chat message into a reply.
# Created: 2026-10-18

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from availabot.availability import candidate_evenings, compute_free_evenings, format_evenings
from availabot.errors import CalendarError, TimestampParseError
from availabot.integrations.auth_flow import AuthFlowController
from availabot.integrations.gcalendar import CalendarClient

logger = logging.getLogger(__name__)

UNAVAILABLE_REPLY = "Sorry, I was unable to compute your availability."


def _local_now() -> datetime:
    return datetime.now().astimezone()


class AvailabilityBot:
    """Answers every message with the sender's next free evenings.

    Users without a valid credential get an authorization link instead.
    """

    def __init__(
        self,
        controller: AuthFlowController,
        calendar: CalendarClient,
        calendar_id: str = "primary",
        clock: Callable[[], datetime] = _local_now,
    ):
        self.controller = controller
        self.calendar = calendar
        self.calendar_id = calendar_id
        self._clock = clock

    async def handle_message(self, user_id: str, display_name: str) -> str:
        credential = self.controller.get_credential(user_id)
        if credential is None:
            try:
                auth_url = self.controller.start_flow(user_id)
            except Exception as e:
                logger.exception("Could not start auth flow for user %s", user_id)
                return f"oops: {e}"
            return f"@{display_name} auth please: {auth_url}"

        now = self._clock()
        # Query from the first candidate evening so the window covers the last one.
        window_start = candidate_evenings(now)[0]
        try:
            busy = await self.calendar.get_busy_intervals(
                window_start, credential, calendar_id=self.calendar_id
            )
            evenings = compute_free_evenings(now, busy)
        except (CalendarError, TimestampParseError) as e:
            logger.error("Availability lookup failed for user %s: %s", user_id, e)
            return UNAVAILABLE_REPLY

        return format_evenings(evenings)
