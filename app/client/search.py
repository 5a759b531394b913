"""Place search against Nominatim, with debounced suggestions."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

import httpx

log = logging.getLogger(__name__)

NOMINATIM_URL = "https://nominatim.openstreetmap.org"
MIN_QUERY_LENGTH = 3
SUGGESTION_LIMIT = 5
DEBOUNCE_SECONDS = 0.3

Bounds = tuple[tuple[float, float], tuple[float, float]]  # ((south, west), (north, east))


class LocationNotFound(Exception):
    pass


@dataclass(frozen=True)
class SearchSuggestion:
    name: str
    latitude: float
    longitude: float
    osm_class: str = ""
    osm_type: str = ""
    address_type: str = ""
    bounding_box: tuple[float, float, float, float] | None = None  # south, north, west, east


@dataclass(frozen=True)
class SearchResult:
    name: str
    latitude: float
    longitude: float
    zoom: int
    bounds: Bounds | None = None


_PLACE_ZOOM = {"city": 10, "town": 12, "village": 14}
_CLASS_ZOOM = {
    "boundary": 8,
    "highway": 16,
    "amenity": 17,
    "building": 18,
    "tourism": 17,
    "historic": 17,
}


def zoom_for(osm_class: str, osm_type: str, address_type: str = "") -> int:
    """Map zoom level that frames a result of the given OSM class/type."""
    if address_type == "country" or osm_type == "country":
        return 4
    if address_type == "state" or osm_type == "state":
        return 6
    if osm_class == "place":
        return _PLACE_ZOOM.get(osm_type, 13)
    return _CLASS_ZOOM.get(osm_class, 15)


def _parse_item(item: dict) -> SearchSuggestion:
    box = item.get("boundingbox")
    return SearchSuggestion(
        name=item.get("display_name", ""),
        latitude=float(item["lat"]),
        longitude=float(item["lon"]),
        osm_class=item.get("class", ""),
        osm_type=item.get("type", ""),
        address_type=item.get("addresstype", ""),
        bounding_box=tuple(float(x) for x in box) if box and len(box) == 4 else None,
    )


def to_result(s: SearchSuggestion) -> SearchResult:
    bounds = None
    if s.bounding_box:
        south, north, west, east = s.bounding_box
        bounds = ((south, west), (north, east))
    return SearchResult(
        name=s.name,
        latitude=s.latitude,
        longitude=s.longitude,
        zoom=zoom_for(s.osm_class, s.osm_type, s.address_type),
        bounds=bounds,
    )


class NominatimGeocoder:
    def __init__(self, http: httpx.AsyncClient | None = None, base_url: str = NOMINATIM_URL):
        self._http = http or httpx.AsyncClient(timeout=10.0, headers={"User-Agent": "vivimap"})
        self._base_url = base_url.rstrip("/")

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _query(self, q: str, limit: int) -> list[SearchSuggestion]:
        r = await self._http.get(
            f"{self._base_url}/search",
            params={"q": q, "format": "json", "addressdetails": 1, "limit": limit},
        )
        r.raise_for_status()
        return [_parse_item(item) for item in r.json() or []]

    async def suggest(self, query: str) -> list[SearchSuggestion]:
        """Up to five suggestions; short queries and provider failures give none."""
        query = query.strip()
        if len(query) < MIN_QUERY_LENGTH:
            return []
        try:
            return await self._query(query, SUGGESTION_LIMIT)
        except (httpx.HTTPError, ValueError, KeyError) as e:
            log.error("Failed to fetch suggestions: %s", e)
            return []

    async def search(self, term: str) -> SearchResult:
        """Top match for a submitted search. Raises LocationNotFound when nothing matches."""
        term = term.strip()
        if not term:
            raise LocationNotFound("Empty search.")
        items = await self._query(term, 1)
        if not items:
            raise LocationNotFound("Location not found.")
        return to_result(items[0])


class SuggestionDebouncer:
    """Single-slot debounce timer for suggestion fetches.

    A new schedule() cancels a pending timer. A fetch that has already started
    keeps running, but its result is only delivered if no later query has been
    scheduled in the meantime.
    """

    def __init__(
        self,
        fetch: Callable[[str], Awaitable[list]],
        on_result: Callable[[str, list], None],
        delay: float = DEBOUNCE_SECONDS,
    ):
        self._fetch = fetch
        self._on_result = on_result
        self._delay = delay
        self._timer: asyncio.Task | None = None
        self._generation = 0
        self._inflight: set[asyncio.Task] = set()

    def schedule(self, query: str) -> None:
        self.cancel()
        self._generation += 1
        if len(query.strip()) < MIN_QUERY_LENGTH:
            self._on_result(query, [])
            return
        self._timer = asyncio.get_running_loop().create_task(self._fire(query, self._generation))

    def cancel(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    async def _fire(self, query: str, generation: int) -> None:
        await asyncio.sleep(self._delay)
        # From here on the fetch belongs to its own task, so cancel() no longer reaches it.
        task = asyncio.get_running_loop().create_task(self._run(query, generation))
        self._inflight.add(task)
        task.add_done_callback(self._fetch_done)

    def _fetch_done(self, task: asyncio.Task) -> None:
        self._inflight.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            log.error("Suggestion fetch failed: %s", exc, exc_info=exc)

    async def _run(self, query: str, generation: int) -> None:
        results = await self._fetch(query)
        if generation == self._generation:
            self._on_result(query, results)

    async def drain(self) -> None:
        """Wait for the pending timer and any in-flight fetches."""
        if self._timer is not None:
            try:
                await self._timer
            except asyncio.CancelledError:
                pass
        while self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)
