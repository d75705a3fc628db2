"""Scheduled local notification models."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


class TriggerKind(StrEnum):
    DAILY = "daily"
    ONE_SHOT = "one-shot"


@dataclass(frozen=True)
class ScheduledNotification:
    notification_id: str
    title: str
    body: str
    trigger: TriggerKind
    fire_at: datetime
    hour: int | None = None
    minute: int | None = None

    @property
    def repeats(self) -> bool:
        return self.trigger == TriggerKind.DAILY
