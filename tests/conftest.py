import sys
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

from datetime import datetime, timezone
from pathlib import Path

import httpx
import pytest

from eventgate.config import Settings

SAMPLE_EVENTS = {
    "_embedded": {
        "events": [
            {"name": "Night Concert", "url": "https://example.test/e/1", "dates": {"start": {"localDate": "2026-11-02"}}},
            {"name": "Morning Jazz", "url": "https://example.test/e/2"},
        ]
    },
    "page": {"size": 30, "totalElements": 2, "number": 0},
}


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'eventgate.db'}",
        session_secret="test-secret",
        api_key="test-key",
        events_url="https://events.example.test/discovery/v2/events.json",
    )


class RecordingTransport(httpx.MockTransport):
    """MockTransport that remembers every request it served."""

    def __init__(self, handler):
        self.requests = []

        def _record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)


@pytest.fixture()
def events_ok() -> RecordingTransport:
    return RecordingTransport(lambda request: httpx.Response(200, json=SAMPLE_EVENTS))


@pytest.fixture()
def events_down() -> RecordingTransport:
    return RecordingTransport(lambda request: httpx.Response(500, json={"fault": "boom"}))


class FakeClock:
    def __init__(self):
        self.now = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def __call__(self):
        return self.now
