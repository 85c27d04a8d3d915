"""Geocoding, location resolution and debounced suggestions."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Callable, List, Optional

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from models.errors import MalformedResponse, NotFound, TransportError, WeatherWearError
from models.weather import Location, LocationCandidate
from tools.observability import instrument_call
from weatherwear_app.logging_config import get_logger


LOGGER = get_logger(__name__)


class _SearchResult(BaseModel):
    name: str
    country: str = ""
    lat: float
    lon: float


_SEARCH_RESULTS = TypeAdapter(List[_SearchResult])


class GeocodingProvider(ABC):
    """Turns a free-text query into location candidates."""

    @abstractmethod
    async def search(self, query: str) -> List[LocationCandidate]:
        """Return candidates, raising :class:`TransportError` on failure."""


class WeatherApiGeocoder(GeocodingProvider):
    """weatherapi.com ``search.json`` client."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = "https://api.weatherapi.com/v1",
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.transport = transport

    @instrument_call("geocoding.search")
    async def search(self, query: str) -> List[LocationCandidate]:
        params = {"key": self.api_key or "", "q": query}
        async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self.transport) as client:
            try:
                response = await client.get(f"{self.base_url}/search.json", params=params)
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                raise TransportError(
                    f"Failed to fetch location data (status {exc.response.status_code})"
                ) from exc
            except httpx.HTTPError as exc:
                raise TransportError("Failed to fetch location data") from exc

        try:
            results = _SEARCH_RESULTS.validate_python(response.json())
        except (ValueError, ValidationError) as exc:
            raise MalformedResponse("Unexpected geocoding payload") from exc
        return [
            LocationCandidate(name=item.name, country=item.country, lat=item.lat, lon=item.lon)
            for item in results
        ]


class LocationResolver:
    """Suggestion lookups that fail soft and strict single-location resolution."""

    def __init__(self, geocoder: GeocodingProvider, min_chars: int = 2) -> None:
        self.geocoder = geocoder
        self.min_chars = min_chars

    async def suggest(self, query: str) -> List[LocationCandidate]:
        """Candidates for a partial query; empty on short input or any failure."""

        if len(query) < self.min_chars:
            return []
        try:
            return await self.geocoder.search(query)
        except WeatherWearError as exc:
            LOGGER.warning("Suggestion lookup failed", extra={"error": str(exc)})
            return []

    async def resolve(self, query: str) -> Location:
        """First candidate of a fresh lookup as the confirmed location."""

        candidates = await self.geocoder.search(query)
        if not candidates:
            raise NotFound(f"Location not found: {query}")
        return candidates[0].to_location()


class SuggestionDebouncer:
    """Debounces suggestion lookups so only the latest query is rendered.

    Each request cancels the pending one; a result is applied only if its
    token still matches the most recently issued request. ``query`` is the
    latest request, ``results_query`` the one ``suggestions`` belong to.
    """

    def __init__(
        self,
        resolver: LocationResolver,
        delay_seconds: float = 0.3,
        on_update: Optional[Callable[[str, List[LocationCandidate]], None]] = None,
    ) -> None:
        self.resolver = resolver
        self.delay_seconds = delay_seconds
        self.on_update = on_update
        self.query = ""
        self.results_query = ""
        self.suggestions: List[LocationCandidate] = []
        self._issued = 0
        self._pending: Optional[asyncio.Task] = None

    def request(self, query: str) -> asyncio.Task:
        """Schedule a lookup; must be called from a running event loop."""

        self._issued += 1
        token = self._issued
        self.query = query
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = asyncio.get_running_loop().create_task(self._run(query, token))
        return self._pending

    def cancel(self) -> None:
        self._issued += 1
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()

    async def settle(self) -> List[LocationCandidate]:
        """Wait for the most recent request and return the shown suggestions."""

        task = self._pending
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                if not task.cancelled():
                    raise
        return self.suggestions

    async def _run(self, query: str, token: int) -> None:
        await asyncio.sleep(self.delay_seconds)
        results = await self.resolver.suggest(query)
        if token != self._issued:
            return
        self.results_query = query
        self.suggestions = results
        if self.on_update:
            self.on_update(query, results)


__all__ = [
    "GeocodingProvider",
    "WeatherApiGeocoder",
    "LocationResolver",
    "SuggestionDebouncer",
]
