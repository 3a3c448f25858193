"""USGS API Client - Imperative Shell.

This module handles HTTP communication with the USGS Earthquake API.
All I/O is contained here; parsing is in the core module.
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable

import requests

from quakewatch.core.geo import BoundingBox
from quakewatch.core.retry import RetryPolicy, compute_backoff_delay


logger = logging.getLogger(__name__)


# USGS FDSN Event Web Service base URL
USGS_API_BASE = "https://earthquake.usgs.gov/fdsnws/event/1/query"

# Default timeout for API requests (seconds)
DEFAULT_TIMEOUT = 30

ISO_FORMAT = "%Y-%m-%dT%H:%M:%S"


@dataclass
class USGSQueryParams:
    """Parameters for USGS API query.

    Attributes:
        start_time: Fetch earthquakes after this time
        end_time: Fetch earthquakes before this time
        bounds: Geographic bounding box (optional)
        min_magnitude: Minimum magnitude to fetch
        limit: Maximum number of results (None for the feed default)
    """
    start_time: datetime | None = None
    end_time: datetime | None = None
    bounds: BoundingBox | None = None
    min_magnitude: float | None = None
    limit: int | None = None


class USGSClient:
    """Client for fetching earthquake data from USGS API.

    This is part of the imperative shell - it handles HTTP I/O.
    """

    def __init__(
        self,
        base_url: str = USGS_API_BASE,
        timeout: int = DEFAULT_TIMEOUT,
        retry: RetryPolicy | None = None,
        min_magnitude: float | None = None,
        bounds: BoundingBox | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize USGS client.

        Args:
            base_url: USGS API base URL
            timeout: Request timeout in seconds
            retry: Retry policy for failed requests
            min_magnitude: Default minimum magnitude for window fetches
            bounds: Default region for window fetches
            sleep: Sleep function used between retries
        """
        self.base_url = base_url
        self.timeout = timeout
        self.retry = retry or RetryPolicy()
        self.min_magnitude = min_magnitude
        self.bounds = bounds
        self._sleep = sleep

    def _build_params(self, query: USGSQueryParams) -> dict[str, str]:
        """Build query parameters for USGS API request.

        Args:
            query: Query parameters

        Returns:
            Dict of URL query parameters
        """
        params: dict[str, str] = {
            "format": "geojson",
            "orderby": "time",
        }

        if query.start_time is not None:
            params["starttime"] = query.start_time.astimezone(timezone.utc).strftime(ISO_FORMAT)

        if query.end_time is not None:
            params["endtime"] = query.end_time.astimezone(timezone.utc).strftime(ISO_FORMAT)

        if query.bounds is not None:
            params["minlatitude"] = str(query.bounds.min_latitude)
            params["maxlatitude"] = str(query.bounds.max_latitude)
            params["minlongitude"] = str(query.bounds.min_longitude)
            params["maxlongitude"] = str(query.bounds.max_longitude)

        if query.min_magnitude is not None:
            params["minmagnitude"] = str(query.min_magnitude)

        if query.limit is not None:
            params["limit"] = str(query.limit)

        return params

    def fetch_earthquakes(self, query: USGSQueryParams) -> dict[str, Any]:
        """Fetch earthquake data from USGS API.

        This method performs HTTP I/O, retrying per the client's policy.

        Args:
            query: Query parameters

        Returns:
            Raw GeoJSON response from USGS

        Raises:
            requests.RequestException: If every attempt fails
        """
        params = self._build_params(query)

        logger.info(
            "Fetching earthquakes from USGS",
            extra={"params": params},
        )

        attempts = self.retry.max_attempts
        for attempt in range(1, attempts + 1):
            try:
                response = requests.get(
                    self.base_url,
                    params=params,
                    timeout=self.timeout,
                )
                response.raise_for_status()
                data = response.json()
                break
            except (requests.RequestException, ValueError) as e:
                if attempt == attempts:
                    logger.error("USGS fetch failed after %d attempt(s): %s", attempts, e)
                    if isinstance(e, requests.RequestException):
                        raise
                    raise requests.RequestException(f"Invalid JSON from USGS: {e}") from e

                delay = compute_backoff_delay(self.retry, attempt)
                logger.warning(
                    "USGS fetch attempt %d/%d failed: %s (retrying in %.1fs)",
                    attempt,
                    attempts,
                    e,
                    delay,
                )
                self._sleep(delay)

        count = len(data.get("features") or [])

        logger.info(
            "Fetched %d earthquakes from USGS",
            count,
        )

        return data

    def fetch_window(self, start: datetime, end: datetime) -> dict[str, Any]:
        """Fetch all earthquakes between two instants.

        Args:
            start: Window start
            end: Window end

        Returns:
            Raw GeoJSON response
        """
        query = USGSQueryParams(
            start_time=start,
            end_time=end,
            bounds=self.bounds,
            min_magnitude=self.min_magnitude,
        )
        return self.fetch_earthquakes(query)
