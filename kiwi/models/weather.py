"""Current conditions and daily forecast models."""

from dataclasses import dataclass
from datetime import date, datetime


@dataclass(frozen=True)
class CurrentConditions:
    location: str
    temperature: float
    feels_like: float
    humidity: int  # percent
    pressure: int  # hPa
    wind_speed: float
    condition: str
    latitude: float | None = None
    longitude: float | None = None


@dataclass(frozen=True)
class ForecastEntry:
    day: date
    timestamp: datetime
    temperature: float
    min_temperature: float
    max_temperature: float
    condition: str
    icon: str
