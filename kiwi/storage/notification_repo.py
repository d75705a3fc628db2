"""Repository for scheduled notifications and app state flags."""

import sqlite3
from datetime import UTC, datetime

from kiwi.models.notification import ScheduledNotification, TriggerKind

# --- Notifications ---

def insert_notification(conn: sqlite3.Connection, n: ScheduledNotification) -> None:
    conn.execute(
        "INSERT INTO notifications "
        "(notification_id, title, body, trigger, fire_at, hour, minute) "
        "VALUES (?, ?, ?, ?, ?, ?, ?)",
        (
            n.notification_id, n.title, n.body, n.trigger.value,
            n.fire_at.astimezone(UTC).isoformat(), n.hour, n.minute,
        ),
    )
    conn.commit()


def get_pending(conn: sqlite3.Connection) -> list[ScheduledNotification]:
    """All undelivered notifications, soonest first."""
    rows = conn.execute(
        "SELECT * FROM notifications WHERE delivered_at IS NULL ORDER BY fire_at"
    ).fetchall()
    return [_row_to_notification(r) for r in rows]


def get_due(conn: sqlite3.Connection, now: datetime) -> list[ScheduledNotification]:
    """Undelivered notifications whose fire time is at or before ``now``."""
    return [n for n in get_pending(conn) if n.fire_at <= now]


def mark_delivered(
    conn: sqlite3.Connection, notification_id: str, delivered_at: datetime
) -> None:
    conn.execute(
        "UPDATE notifications SET delivered_at = ? WHERE notification_id = ?",
        (delivered_at.astimezone(UTC).isoformat(), notification_id),
    )
    conn.commit()


def reschedule(
    conn: sqlite3.Connection, notification_id: str, fire_at: datetime
) -> None:
    conn.execute(
        "UPDATE notifications SET fire_at = ? WHERE notification_id = ?",
        (fire_at.astimezone(UTC).isoformat(), notification_id),
    )
    conn.commit()


def delete_notification(conn: sqlite3.Connection, notification_id: str) -> bool:
    cursor = conn.execute(
        "DELETE FROM notifications WHERE notification_id = ?", (notification_id,)
    )
    conn.commit()
    return cursor.rowcount > 0


def delete_pending(conn: sqlite3.Connection) -> int:
    cursor = conn.execute("DELETE FROM notifications WHERE delivered_at IS NULL")
    conn.commit()
    return cursor.rowcount


def _row_to_notification(row: sqlite3.Row) -> ScheduledNotification:
    return ScheduledNotification(
        notification_id=row["notification_id"],
        title=row["title"],
        body=row["body"],
        trigger=TriggerKind(row["trigger"]),
        fire_at=datetime.fromisoformat(row["fire_at"]),
        hour=row["hour"],
        minute=row["minute"],
    )


# --- App state ---

def get_app_state(conn: sqlite3.Connection, key: str) -> str | None:
    row = conn.execute(
        "SELECT value FROM app_state WHERE key = ?", (key,)
    ).fetchone()
    if row is None:
        return None
    return row[0]


def set_app_state(conn: sqlite3.Connection, key: str, value: str) -> None:
    conn.execute(
        "INSERT INTO app_state (key, value, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP) "
        "ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = CURRENT_TIMESTAMP",
        (key, value),
    )
    conn.commit()
