"""Text and JSON renderings of the weather state."""

import json

from kiwi.app.store import WeatherState
from kiwi.models.notification import ScheduledNotification
from kiwi.models.weather import CurrentConditions, ForecastEntry

MAP_SPAN_DEGREES = 0.1

# Checked in order; first keyword found wins.
_CONDITION_SYMBOLS = [
    ("clear", "sun"),
    ("cloud", "cloud"),
    ("rain", "rain"),
    ("snow", "snow"),
    ("thunder", "thunder"),
    ("mist", "fog"),
    ("fog", "fog"),
]


def convert_temperature(celsius: float, use_celsius: bool = True) -> str:
    """Format a Celsius reading, truncating toward zero like int()."""
    if use_celsius:
        return f"{int(celsius)}°C"
    fahrenheit = celsius * 9 / 5 + 32
    return f"{int(fahrenheit)}°F"


def condition_symbol(condition: str) -> str:
    lowered = condition.lower()
    for keyword, symbol in _CONDITION_SYMBOLS:
        if keyword in lowered:
            return symbol
    return "cloud"


def map_url(latitude: float, longitude: float, span: float = MAP_SPAN_DEGREES) -> str:
    """OpenStreetMap link centred on a point with a square span in degrees."""
    half = span / 2
    bbox = (
        f"{longitude - half:.4f},{latitude - half:.4f},"
        f"{longitude + half:.4f},{latitude + half:.4f}"
    )
    return (
        f"https://www.openstreetmap.org/export/embed.html?bbox={bbox}"
        f"&layer=mapnik&marker={latitude:.4f},{longitude:.4f}"
    )


def format_current_text(c: CurrentConditions, use_celsius: bool = True) -> str:
    lines = [
        f"=== {c.location} ===",
        f"{convert_temperature(c.temperature, use_celsius)} "
        f"{c.condition} [{condition_symbol(c.condition)}]",
        f"Feels like: {convert_temperature(c.feels_like, use_celsius)}",
        f"Humidity: {c.humidity}%",
        f"Wind speed: {int(c.wind_speed)} km/h",
        f"Pressure: {c.pressure} hPa",
    ]
    if c.latitude is not None and c.longitude is not None:
        lines.append(f"Map: {map_url(c.latitude, c.longitude)}")
    return "\n".join(lines)


def format_forecast_text(
    entries: list[ForecastEntry] | tuple[ForecastEntry, ...],
    use_celsius: bool = True,
) -> str:
    if not entries:
        return "Forecast: unavailable"
    lines = [f"{len(entries)}-Day Forecast"]
    for e in entries:
        lines.append(
            f"  {e.timestamp.strftime('%a')} {e.day.isoformat()}  "
            f"{convert_temperature(e.temperature, use_celsius):>6}  "
            f"L {convert_temperature(e.min_temperature, use_celsius)} "
            f"H {convert_temperature(e.max_temperature, use_celsius)}  "
            f"{e.condition}"
        )
    return "\n".join(lines)


def format_state_json(s: WeatherState) -> str:
    """JSON rendering for programmatic consumption."""
    current = None
    if s.current is not None:
        c = s.current
        current = {
            "location": c.location,
            "temperature": c.temperature,
            "feels_like": c.feels_like,
            "humidity": c.humidity,
            "pressure": c.pressure,
            "wind_speed": c.wind_speed,
            "condition": c.condition,
            "latitude": c.latitude,
            "longitude": c.longitude,
        }
    data = {
        "current": current,
        "forecast": [
            {
                "date": e.day.isoformat(),
                "timestamp": e.timestamp.isoformat(),
                "temperature": e.temperature,
                "min_temperature": e.min_temperature,
                "max_temperature": e.max_temperature,
                "condition": e.condition,
                "icon": e.icon,
            }
            for e in s.forecast
        ],
        "error": s.error_message,
    }
    return json.dumps(data, indent=2, ensure_ascii=False)


def format_notification_text(n: ScheduledNotification) -> str:
    when = n.fire_at.astimezone().strftime("%Y-%m-%d %H:%M")
    repeat = " (daily)" if n.repeats else ""
    return f"[{when}{repeat}] {n.title}: {n.body}"
