"""Weather service: fetches and parses current conditions and forecasts."""

import logging

from kiwi.ingest.current_parser import (
    CURRENT_LOCATION,
    UNKNOWN_LOCATION,
    parse_current_conditions,
)
from kiwi.ingest.forecast_normalizer import MAX_FORECAST_DAYS, parse_forecast
from kiwi.ingest.owm_client import LocationQuery, OpenWeatherClient
from kiwi.models.weather import CurrentConditions, ForecastEntry

logger = logging.getLogger(__name__)


class WeatherService:
    def __init__(
        self,
        client: OpenWeatherClient,
        day_timezone: str = "local",
        max_days: int = MAX_FORECAST_DAYS,
    ):
        self.client = client
        self.day_timezone = day_timezone
        self.max_days = max_days

    async def fetch_current(self, query: LocationQuery) -> CurrentConditions:
        """Fetch current conditions. Raises a WeatherError subclass on failure."""
        payload = await self.client.get_current(query)
        if query.is_coordinates:
            return parse_current_conditions(
                payload,
                default_location=CURRENT_LOCATION,
                not_found_message="Location not found",
            )
        return parse_current_conditions(
            payload,
            default_location=UNKNOWN_LOCATION,
            not_found_message="City not found",
        )

    async def fetch_forecast(self, query: LocationQuery) -> list[ForecastEntry]:
        """Fetch the 3-hourly feed and reduce it to one entry per day."""
        payload = await self.client.get_forecast(query)
        entries = parse_forecast(
            payload,
            day_timezone=self.day_timezone,
            max_days=self.max_days,
            not_found_message=(
                "Location not found" if query.is_coordinates else "City not found"
            ),
        )
        logger.info("Forecast for %s: %d days", query.describe(), len(entries))
        return entries
