"""Initial schema: scheduled notifications and app state."""

import sqlite3

DDL = [
    # Pending and delivered local notifications
    """
    CREATE TABLE IF NOT EXISTS notifications (
        notification_id TEXT PRIMARY KEY,
        title TEXT NOT NULL,
        body TEXT NOT NULL,
        trigger TEXT NOT NULL CHECK (trigger IN ('daily', 'one-shot')),
        fire_at TEXT NOT NULL,
        hour INTEGER,
        minute INTEGER,
        delivered_at TEXT,
        created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """,
    (
        "CREATE INDEX IF NOT EXISTS idx_notifications_pending "
        "ON notifications(delivered_at, fire_at)"
    ),

    # Key/value flags such as the notification permission grant
    """
    CREATE TABLE IF NOT EXISTS app_state (
        key TEXT PRIMARY KEY,
        value TEXT NOT NULL,
        updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """,
]


def up(conn: sqlite3.Connection) -> None:
    for stmt in DDL:
        conn.execute(stmt)
    conn.commit()
