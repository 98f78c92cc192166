# Tests for integrations/gcalendar.py
# Created: 2026-10-18

import json
from datetime import datetime

import httpx
import pytest

from availabot.availability import BusyInterval
from availabot.errors import CalendarError
from availabot.integrations.gcalendar import CalendarClient
from availabot.integrations.oauth import OAuthCredential

START = datetime.fromisoformat("2018-02-15T15:04:05+01:00")
CRED = OAuthCredential(access_token="ya29.token")
BUSY = [
    {"start": "2018-02-15T16:04:05+01:00", "end": "2018-02-15T17:04:05+01:00"},
    {"start": "2018-02-16T18:04:05+01:00", "end": "2018-02-16T21:04:05+01:00"},
]


def _client(handler) -> CalendarClient:
    return CalendarClient(transport=httpx.MockTransport(handler))


async def test_get_busy_intervals():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={"calendars": {"primary": {"busy": BUSY}}},
        )

    busy = await _client(handler).get_busy_intervals(START, CRED)

    assert seen["url"] == "https://www.googleapis.com/calendar/v3/freeBusy"
    assert seen["auth"] == "Bearer ya29.token"
    assert seen["body"]["timeMin"] == "2018-02-15T15:04:05+01:00"
    assert seen["body"]["timeMax"] == "2018-02-22T15:04:05+01:00"
    assert seen["body"]["items"] == [{"id": "primary"}]
    assert busy == [
        BusyInterval("2018-02-15T16:04:05+01:00", "2018-02-15T17:04:05+01:00"),
        BusyInterval("2018-02-16T18:04:05+01:00", "2018-02-16T21:04:05+01:00"),
    ]


async def test_get_busy_intervals_other_calendar():
    def handler(request: httpx.Request) -> httpx.Response:
        assert json.loads(request.content)["items"] == [{"id": "work@example.com"}]
        return httpx.Response(200, json={"calendars": {"work@example.com": {"busy": []}}})

    busy = await _client(handler).get_busy_intervals(START, CRED, calendar_id="work@example.com")
    assert busy == []


async def test_http_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"error": {"message": "Invalid Credentials"}})

    with pytest.raises(CalendarError):
        await _client(handler).get_busy_intervals(START, CRED)


async def test_calendar_missing_from_response():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"calendars": {}})

    with pytest.raises(CalendarError, match="missing"):
        await _client(handler).get_busy_intervals(START, CRED)


async def test_calendar_errors_reported():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "calendars": {"primary": {"errors": [{"domain": "global", "reason": "notFound"}]}}
            },
        )

    with pytest.raises(CalendarError, match="notFound"):
        await _client(handler).get_busy_intervals(START, CRED)


async def test_non_json_body():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>Service Unavailable</html>")

    with pytest.raises(CalendarError, match="not JSON"):
        await _client(handler).get_busy_intervals(START, CRED)
