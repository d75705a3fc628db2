"""Local notification scheduler backed by SQLite.

Replaces the platform notification center: notifications are stored as
pending rows and handed back by ``deliver_due`` once their fire time has
passed. Daily reminders are re-armed for the next day after delivery.
"""

import logging
import sqlite3
import uuid
from datetime import datetime, timedelta, tzinfo

from kiwi.models.notification import ScheduledNotification, TriggerKind
from kiwi.notify.rules import alert_body, next_daily_fire
from kiwi.storage import notification_repo

logger = logging.getLogger(__name__)

PERMISSION_KEY = "notification_permission"
ALERT_TITLE = "Weather Alert"


def _local_now() -> datetime:
    return datetime.now().astimezone()


class NotificationScheduler:
    def __init__(
        self,
        conn: sqlite3.Connection,
        enabled: bool = True,
        tz: tzinfo | None = None,
    ):
        self.conn = conn
        self.enabled = enabled
        # None is the system local zone
        self.tz = tz

    @property
    def permission_granted(self) -> bool:
        return notification_repo.get_app_state(self.conn, PERMISSION_KEY) == "granted"

    @property
    def can_schedule(self) -> bool:
        return self.enabled and self.permission_granted

    def request_permission(self) -> bool:
        """Record the permission grant. There is no OS prompt to show."""
        notification_repo.set_app_state(self.conn, PERMISSION_KEY, "granted")
        logger.info("Notification permission granted")
        return True

    def revoke_permission(self) -> None:
        notification_repo.set_app_state(self.conn, PERMISSION_KEY, "denied")

    def schedule_daily(
        self,
        title: str,
        body: str,
        hour: int,
        minute: int,
        now: datetime | None = None,
    ) -> ScheduledNotification | None:
        """Schedule a reminder repeating every day at hour:minute local time."""
        if not 0 <= hour <= 23 or not 0 <= minute <= 59:
            raise ValueError(f"Invalid time {hour:02d}:{minute:02d}")
        if not self.can_schedule:
            logger.debug("Notifications not permitted, skipping daily reminder")
            return None

        now = now or _local_now()
        notification = ScheduledNotification(
            notification_id=str(uuid.uuid4()),
            title=title,
            body=body,
            trigger=TriggerKind.DAILY,
            fire_at=next_daily_fire(hour, minute, now, self.tz),
            hour=hour,
            minute=minute,
        )
        notification_repo.insert_notification(self.conn, notification)
        logger.info("Scheduled daily reminder at %02d:%02d", hour, minute)
        return notification

    def schedule_alert(
        self,
        condition: str,
        temperature: float,
        in_hours: int,
        now: datetime | None = None,
    ) -> ScheduledNotification | None:
        """Schedule a one-shot weather alert ``in_hours`` from now."""
        if in_hours < 0:
            raise ValueError("in_hours must be >= 0")
        if not self.can_schedule:
            logger.debug("Notifications not permitted, skipping alert")
            return None

        now = now or _local_now()
        notification = ScheduledNotification(
            notification_id=str(uuid.uuid4()),
            title=ALERT_TITLE,
            body=alert_body(condition, temperature),
            trigger=TriggerKind.ONE_SHOT,
            fire_at=now + timedelta(hours=in_hours),
        )
        notification_repo.insert_notification(self.conn, notification)
        logger.info(
            "Scheduled weather alert for %s %.1f°C in %dh",
            condition, temperature, in_hours,
        )
        return notification

    def pending(self) -> list[ScheduledNotification]:
        return notification_repo.get_pending(self.conn)

    def deliver_due(self, now: datetime | None = None) -> list[ScheduledNotification]:
        """Return notifications that are due and advance their state.

        One-shot alerts are marked delivered; daily reminders move to their
        next occurrence after ``now``.
        """
        now = now or _local_now()
        due = notification_repo.get_due(self.conn, now)
        for n in due:
            if n.repeats and n.hour is not None and n.minute is not None:
                notification_repo.reschedule(
                    self.conn, n.notification_id,
                    next_daily_fire(n.hour, n.minute, now, self.tz),
                )
            else:
                notification_repo.mark_delivered(self.conn, n.notification_id, now)
        if due:
            logger.info("Delivered %d notification(s)", len(due))
        return due

    def cancel(self, notification_id: str) -> bool:
        return notification_repo.delete_notification(self.conn, notification_id)

    def cancel_all(self) -> int:
        count = notification_repo.delete_pending(self.conn)
        logger.info("Cancelled %d pending notification(s)", count)
        return count
