"""Pydantic v2 configuration schema with strict validation."""

from enum import StrEnum

from pydantic import BaseModel, Field


class DayTimezone(StrEnum):
    LOCAL = "local"        # machine timezone
    LOCATION = "location"  # forecast city's UTC offset
    UTC = "utc"


class ApiConfig(BaseModel):
    model_config = {"extra": "forbid"}

    base_url: str = "https://api.openweathermap.org/data/2.5"
    api_key: str = ""
    units: str = "metric"
    timeout_seconds: float = Field(default=10.0, gt=0.0)


class DisplayConfig(BaseModel):
    model_config = {"extra": "forbid"}

    celsius: bool = True
    default_city: str = "Auckland"


class ForecastConfig(BaseModel):
    model_config = {"extra": "forbid"}

    max_days: int = Field(default=5, ge=1, le=5)
    day_timezone: DayTimezone = DayTimezone.LOCAL


class NotificationConfig(BaseModel):
    model_config = {"extra": "forbid"}

    enabled: bool = False
    daily_forecast: bool = False
    daily_hour: int = Field(default=8, ge=0, le=23)
    daily_minute: int = Field(default=0, ge=0, le=59)
    weather_alerts: bool = True
    alert_delay_hours: int = Field(default=1, ge=0)


class OpsConfig(BaseModel):
    model_config = {"extra": "forbid"}

    drop_stale_results: bool = False
    db_path: str = "data/kiwi.db"


class KiwiConfig(BaseModel):
    model_config = {"extra": "forbid"}

    api: ApiConfig = ApiConfig()
    display: DisplayConfig = DisplayConfig()
    forecast: ForecastConfig = ForecastConfig()
    notifications: NotificationConfig = NotificationConfig()
    ops: OpsConfig = OpsConfig()
