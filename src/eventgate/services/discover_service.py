# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx
from loguru import logger

from eventgate.config import Settings
from eventgate.errors import ExternalServiceFailure

FAILURE_MESSAGE = "Failed to load events. Please try again later."


@dataclass
class DiscoverResult:
    events: List[Dict[str, Any]] = field(default_factory=list)
    error: bool = False
    message: str = ""


def extract_events(payload: Any) -> List[Dict[str, Any]]:
    """Pull ``_embedded.events`` out of the API envelope, or [] when absent."""
    if not isinstance(payload, dict):
        return []
    embedded = payload.get("_embedded")
    if not isinstance(embedded, dict):
        return []
    events = embedded.get("events")
    return list(events) if isinstance(events, list) else []


class EventDiscoveryClient:
    """Client for the third-party events search endpoint.

    One request per call: no retries, no caching, first page only.
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        *,
        keyword: str = "concert",
        size: int = 30,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url
        self.api_key = api_key
        self.keyword = keyword
        self.size = size
        self._transport = transport

    @classmethod
    def from_settings(
        cls, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> "EventDiscoveryClient":
        return cls(
            settings.events_url,
            settings.api_key,
            keyword=settings.events_keyword,
            size=settings.events_page_size,
            transport=transport,
        )

    def _params(self) -> Dict[str, Any]:
        return {"apikey": self.api_key, "keyword": self.keyword, "size": self.size}

    async def fetch(self) -> Any:
        """Return the decoded JSON body; raises ExternalServiceFailure on any transport or HTTP error."""
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.get(
                    self.url,
                    params=self._params(),
                    headers={"Accept-Encoding": "application/json"},
                )
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            raise ExternalServiceFailure(f"Events API returned {e.response.status_code}") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise ExternalServiceFailure(f"Events API request failed: {e}") from e
        except ValueError as e:
            raise ExternalServiceFailure(f"Events API returned invalid JSON: {e}") from e

    async def search(self) -> DiscoverResult:
        try:
            payload = await self.fetch()
        except ExternalServiceFailure as e:
            logger.error(f"Error fetching events: {e}")
            return DiscoverResult(events=[], error=True, message=FAILURE_MESSAGE)
        return DiscoverResult(events=extract_events(payload))
