"""HTTP client for a hosted Distance Matrix service (Google Maps format)."""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from typing import Optional, Sequence

import httpx

from ...config import settings

logger = logging.getLogger(__name__)

Coordinate = tuple[float, float]
DurationMatrix = list[list[Optional[float]]]

# Responses keyed by (origins, destinations, mode); least recently used
# entries are evicted beyond settings.distance_matrix_cache_size.
_cache: OrderedDict[tuple[str, str, str], DurationMatrix] = OrderedDict()
_cache_lock = threading.Lock()


class DistanceMatrixError(RuntimeError):
    """Raised when the Distance Matrix service rejects a request."""


def format_coordinates(coordinates: Sequence[Coordinate]) -> str:
    return "|".join(f"{lat},{lng}" for lat, lng in coordinates)


def clear_cache() -> None:
    with _cache_lock:
        _cache.clear()


def parse_durations(payload: dict) -> DurationMatrix:
    """Extract travel durations in seconds; unusable elements become ``None``."""
    status = payload.get("status")
    if status != "OK":
        message = payload.get("error_message") or status or "missing status"
        raise DistanceMatrixError(f"Distance Matrix request failed: {message}")

    durations: DurationMatrix = []
    for row in payload.get("rows", []):
        parsed_row: list[Optional[float]] = []
        for element in row.get("elements", []):
            if element.get("status") != "OK" or "duration" not in element:
                parsed_row.append(None)
            else:
                parsed_row.append(float(element["duration"]["value"]))
        durations.append(parsed_row)
    return durations


class DistanceMatrixClient:
    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.api_key = api_key or settings.google_maps_api_key
        if not self.api_key:
            raise ValueError("Distance Matrix API key is not configured.")
        self.base_url = (base_url or settings.distance_matrix_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.distance_matrix_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.distance_matrix_max_retries
        self.backoff_seconds = (
            backoff_seconds if backoff_seconds is not None else settings.distance_matrix_backoff_seconds
        )
        self._transport = transport

    def _get_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=10.0),
            transport=self._transport,
        )

    def _request(self, params: dict) -> dict:
        url = f"{self.base_url}/distancematrix/json"
        client = self._get_client()
        try:
            attempt = 0
            while True:
                try:
                    response = client.get(url, params=params)
                    response.raise_for_status()
                    try:
                        return response.json()
                    except ValueError as exc:
                        raise DistanceMatrixError("Distance Matrix returned an unreadable response") from exc
                except httpx.HTTPStatusError:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise
                    time.sleep(self.backoff_seconds * attempt)
                except httpx.TimeoutException as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        logger.warning(f"Distance Matrix request timed out after {self.max_retries} retries: {e}")
                        raise
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(
                        f"Distance Matrix timeout, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries})"
                    )
                    time.sleep(wait_time)
                except httpx.TransportError as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise ConnectionError(
                            f"Failed to connect to Distance Matrix service at {self.base_url}: {e}"
                        ) from e
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"Distance Matrix network error, retrying in {wait_time:.1f}s: {e}")
                    time.sleep(wait_time)
        finally:
            client.close()

    def durations(
        self,
        origins: Sequence[Coordinate],
        destinations: Sequence[Coordinate] | None = None,
        mode: str | None = None,
    ) -> DurationMatrix:
        """Travel durations in seconds, rows per origin and columns per destination."""
        if not origins:
            raise ValueError("At least one origin is required for a distance matrix.")
        mode = mode or settings.default_travel_mode
        origins_str = format_coordinates(origins)
        destinations_str = format_coordinates(destinations) if destinations else origins_str

        cache_key = (origins_str, destinations_str, mode)
        with _cache_lock:
            cached = _cache.get(cache_key)
            if cached is not None:
                _cache.move_to_end(cache_key)
        if cached is not None:
            logger.debug("Serving distance matrix from cache (%d origins, mode=%s)", len(origins), mode)
            return [list(row) for row in cached]

        payload = self._request(
            {
                "origins": origins_str,
                "destinations": destinations_str,
                "mode": mode,
                "key": self.api_key,
            }
        )
        durations = parse_durations(payload)
        with _cache_lock:
            _cache[cache_key] = durations
            _cache.move_to_end(cache_key)
            while len(_cache) > settings.distance_matrix_cache_size:
                _cache.popitem(last=False)
        return [list(row) for row in durations]


def check_health(api_key: str | None = None) -> bool:
    """Check Distance Matrix availability with a minimal two-point request."""
    try:
        client = DistanceMatrixClient(api_key=api_key, max_retries=0)
        # Two points in central Paris
        client.durations([(48.8584, 2.2945), (48.8606, 2.3376)])
        return True
    except (ValueError, DistanceMatrixError, ConnectionError, httpx.HTTPError):
        return False
