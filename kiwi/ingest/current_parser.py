"""Parse OpenWeatherMap current-weather payloads into CurrentConditions.

Parsing is lenient about leaf values: a missing or mistyped scalar falls
back to a fixed default instead of failing. Only the nested objects
(``main``, ``wind`` and a first ``weather`` entry) are required.
"""

import logging
from typing import Any

from kiwi.ingest.errors import MalformedResponse, NotFound
from kiwi.models.weather import CurrentConditions

logger = logging.getLogger(__name__)

UNKNOWN_LOCATION = "Unknown"
CURRENT_LOCATION = "Current Location"
UNKNOWN_CONDITION = "Unknown"


def parse_current_conditions(
    payload: Any,
    default_location: str = UNKNOWN_LOCATION,
    not_found_message: str = "City not found",
) -> CurrentConditions:
    """Build a CurrentConditions record from a decoded JSON body.

    Raises:
        NotFound: the body carries a ``cod`` other than "200".
        MalformedResponse: the body is not an object, or ``main``, ``wind``
            or the first ``weather`` entry is missing.
    """
    if not isinstance(payload, dict):
        raise MalformedResponse("Invalid response format")

    check_status_code(payload, not_found_message)

    main = payload.get("main")
    wind = payload.get("wind")
    weather = first_weather(payload)
    if not isinstance(main, dict) or not isinstance(wind, dict) or weather is None:
        logger.warning(
            "Current weather payload missing required fields (keys: %s)",
            sorted(payload),
        )
        raise MalformedResponse("Could not parse weather data")

    coord = payload.get("coord")
    if not isinstance(coord, dict):
        coord = {}

    return CurrentConditions(
        location=as_str(payload.get("name"), default_location),
        temperature=as_float(main.get("temp")),
        feels_like=as_float(main.get("feels_like")),
        humidity=as_int(main.get("humidity")),
        pressure=as_int(main.get("pressure")),
        wind_speed=as_float(wind.get("speed")),
        condition=as_str(weather.get("main"), UNKNOWN_CONDITION),
        latitude=as_optional_float(coord.get("lat")),
        longitude=as_optional_float(coord.get("lon")),
    )


def check_status_code(payload: dict, not_found_message: str) -> None:
    """Raise NotFound when the body reports a non-200 ``cod``.

    OpenWeatherMap sends ``cod`` as the integer 200 on success and as a
    string such as "404" on failure, so both are compared as strings.
    An absent ``cod`` is not an error.
    """
    if "cod" not in payload or payload["cod"] is None:
        return
    code = str(payload["cod"])
    if code == "200":
        return
    server_message = as_str(payload.get("message"), not_found_message)
    raise NotFound(f"Error: {server_message}", server_message, code)


def first_weather(item: dict) -> dict | None:
    weather = item.get("weather")
    if isinstance(weather, list) and weather and isinstance(weather[0], dict):
        return weather[0]
    return None


def as_float(value: Any, default: float = 0.0) -> float:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return default
    return float(value)


def as_optional_float(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    return float(value)


def as_int(value: Any, default: int = 0) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    # Integral floats such as 1013.0 still count.
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return default


def as_str(value: Any, default: str) -> str:
    return value if isinstance(value, str) else default
