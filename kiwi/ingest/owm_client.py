"""Async OpenWeatherMap client for the current-weather and forecast endpoints."""

import logging
import os
import re
from dataclasses import dataclass
from typing import Any

import httpx

from kiwi.ingest.errors import MalformedResponse, NetworkError

logger = logging.getLogger(__name__)

OWM_BASE_URL = "https://api.openweathermap.org/data/2.5"
API_KEY_ENV = "KIWI_API_KEY"

_APPID_RE = re.compile(r"(appid=)[^&\s\"]+")


class RedactApiKeyFilter(logging.Filter):
    """Masks the appid query parameter in request URLs logged by httpx."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        if "appid=" in message:
            record.msg = _APPID_RE.sub(r"\1***", message)
            record.args = ()
        return True


_redact_filter = RedactApiKeyFilter()
for _name in ("httpx", "httpcore"):
    logging.getLogger(_name).addFilter(_redact_filter)


class OpenWeatherClientError(Exception):
    """Raised when the client cannot be configured."""


@dataclass(frozen=True)
class LocationQuery:
    """What to look up: a city name or a coordinate pair."""

    city: str | None = None
    latitude: float | None = None
    longitude: float | None = None

    @classmethod
    def for_city(cls, city: str) -> "LocationQuery":
        return cls(city=city)

    @classmethod
    def for_coordinates(cls, latitude: float, longitude: float) -> "LocationQuery":
        return cls(latitude=latitude, longitude=longitude)

    @property
    def is_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def params(self) -> dict[str, str | float]:
        if self.is_coordinates:
            return {"lat": self.latitude, "lon": self.longitude}
        return {"q": self.city or ""}

    def describe(self) -> str:
        if self.is_coordinates:
            return f"{self.latitude},{self.longitude}"
        return self.city or ""


class OpenWeatherClient:
    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = OWM_BASE_URL,
        units: str = "metric",
        timeout: float = 10.0,
    ):
        self.api_key = api_key or os.environ.get(API_KEY_ENV, "")
        if not self.api_key:
            raise OpenWeatherClientError(f"{API_KEY_ENV} not set")
        self.base_url = base_url.rstrip("/")
        self.units = units
        self.timeout = timeout

    async def get_current(self, query: LocationQuery) -> Any:
        """GET /weather for a city or coordinates. Returns the decoded body."""
        return await self._get("/weather", query)

    async def get_forecast(self, query: LocationQuery) -> Any:
        """GET /forecast (5 day / 3 hour feed). Returns the decoded body."""
        return await self._get("/forecast", query)

    async def _get(self, endpoint: str, query: LocationQuery) -> Any:
        url = f"{self.base_url}{endpoint}"
        params = {**query.params(), "appid": self.api_key, "units": self.units}
        logger.info("Fetching %s for %s", endpoint, query.describe())

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.get(url, params=params)
        except httpx.RequestError as e:
            logger.error("Weather API request failed: %s %s -> %s", endpoint, query.describe(), e)
            raise NetworkError(f"Error: {e}") from e

        # Error statuses still carry a JSON body with cod/message, so the
        # body is handed to the parser rather than raising on status.
        if resp.status_code >= 400:
            logger.warning("Weather API %d for %s %s", resp.status_code, endpoint, query.describe())
        try:
            return resp.json()
        except ValueError as e:
            logger.error("Weather API returned non-JSON body for %s: %s", endpoint, e)
            raise MalformedResponse(f"Error parsing data: {e}") from e
