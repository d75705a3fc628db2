"""Collapse the 3-hourly forecast feed into one entry per calendar day."""

import logging
from collections.abc import Iterable
from datetime import UTC, date, datetime, timedelta, timezone, tzinfo
from typing import Any

from kiwi.ingest.current_parser import (
    UNKNOWN_CONDITION,
    as_float,
    as_str,
    check_status_code,
    first_weather,
)
from kiwi.ingest.errors import MalformedResponse
from kiwi.models.weather import ForecastEntry

logger = logging.getLogger(__name__)

MAX_FORECAST_DAYS = 5
DEFAULT_ICON = "01d"


def normalize_forecast(
    samples: Iterable[Any],
    tz: tzinfo | None = None,
    max_days: int = MAX_FORECAST_DAYS,
) -> list[ForecastEntry]:
    """Keep the first sample seen for each calendar day, up to ``max_days``.

    ``tz`` is the timezone used to bucket timestamps into days; ``None``
    means the local machine timezone. Input order is preserved and scanning
    stops as soon as ``max_days`` days are collected. Samples lacking
    ``dt``, ``main`` or a ``weather`` entry are skipped individually.
    """
    entries: list[ForecastEntry] = []
    seen_days: set[date] = set()
    if max_days <= 0:
        return entries

    for index, item in enumerate(samples):
        stamp = _sample_time(item, tz)
        if stamp is None:
            logger.debug("Skipping forecast sample %d: missing dt/main/weather", index)
            continue

        day = stamp.date()
        if day in seen_days:
            continue
        seen_days.add(day)

        main = item["main"]
        weather = first_weather(item) or {}
        entries.append(
            ForecastEntry(
                day=day,
                timestamp=stamp,
                temperature=as_float(main.get("temp")),
                min_temperature=as_float(main.get("temp_min")),
                max_temperature=as_float(main.get("temp_max")),
                condition=as_str(weather.get("main"), UNKNOWN_CONDITION),
                icon=as_str(weather.get("icon"), DEFAULT_ICON),
            )
        )
        if len(entries) >= max_days:
            break

    return entries


def parse_forecast(
    payload: Any,
    day_timezone: str = "local",
    max_days: int = MAX_FORECAST_DAYS,
    not_found_message: str = "City not found",
) -> list[ForecastEntry]:
    """Parse a /forecast response body and normalize its ``list`` feed."""
    if not isinstance(payload, dict):
        raise MalformedResponse("Invalid response format")
    check_status_code(payload, not_found_message)

    samples = payload.get("list")
    if not isinstance(samples, list):
        raise MalformedResponse("Could not parse forecast data")

    tz = resolve_day_timezone(day_timezone, payload)
    return normalize_forecast(samples, tz=tz, max_days=max_days)


def resolve_day_timezone(day_timezone: str, payload: dict) -> tzinfo | None:
    """Pick the timezone used as the day boundary.

    "location" uses the feed's ``city.timezone`` offset (seconds east of
    UTC) and falls back to local time when the feed does not report one.
    """
    if day_timezone == "utc":
        return UTC
    if day_timezone == "location":
        city = payload.get("city")
        offset = city.get("timezone") if isinstance(city, dict) else None
        if isinstance(offset, int) and not isinstance(offset, bool):
            return timezone(timedelta(seconds=offset))
        logger.info("Forecast feed has no city timezone, using local time")
    return None


def _sample_time(item: Any, tz: tzinfo | None) -> datetime | None:
    if not isinstance(item, dict):
        return None
    dt = item.get("dt")
    if isinstance(dt, bool) or not isinstance(dt, int | float):
        return None
    if not isinstance(item.get("main"), dict) or first_weather(item) is None:
        return None
    try:
        stamp = datetime.fromtimestamp(dt, tz=tz or UTC)
        if tz is None:
            stamp = stamp.astimezone()
    except (OverflowError, OSError, ValueError):
        return None
    return stamp
