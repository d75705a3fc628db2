"""Threshold rules deciding when and what to alert about."""

from datetime import datetime, timedelta, tzinfo

HOT_THRESHOLD_C = 30.0
FREEZING_THRESHOLD_C = 0.0


def should_alert(condition: str, temperature: float) -> bool:
    """True for rain or snow, or temperatures above 30°C or below 0°C."""
    lowered = condition.lower()
    return (
        "rain" in lowered
        or "snow" in lowered
        or temperature > HOT_THRESHOLD_C
        or temperature < FREEZING_THRESHOLD_C
    )


def alert_body(condition: str, temperature: float) -> str:
    lowered = condition.lower()
    degrees = int(temperature)
    if "rain" in lowered:
        return "Rain expected in your area. Don't forget your umbrella!"
    if "snow" in lowered:
        return "Snow expected in your area. Bundle up!"
    if temperature > HOT_THRESHOLD_C:
        return f"High temperature alert: {degrees}°C expected. Stay hydrated!"
    if temperature < FREEZING_THRESHOLD_C:
        return f"Freezing temperature alert: {degrees}°C expected. Stay warm!"
    return f"Current weather: {condition}, {degrees}°C"


def next_daily_fire(
    hour: int, minute: int, now: datetime, tz: tzinfo | None = None
) -> datetime:
    """Next wall-clock hour:minute strictly after ``now``.

    The day is advanced on the naive wall clock and the zone applied
    afterwards, so a reminder keeps its local time across DST changes.
    ``tz=None`` means the system local timezone.
    """
    local = now.astimezone(tz) if tz is not None else now.astimezone()
    wall_now = local.replace(tzinfo=None)
    candidate = wall_now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if candidate <= wall_now:
        candidate += timedelta(days=1)
    if tz is None:
        return candidate.astimezone()
    return candidate.replace(tzinfo=tz)
