"""SQLite store for extracted subscriptions and per-user sync progress."""

from __future__ import annotations

import sqlite3
from datetime import datetime
from pathlib import Path

from subscription_radar.constants import STORE_DB_PATH
from subscription_radar.models import ExtractedSubscription, SyncProgress, SyncStatus

_CREATE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS subscriptions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    merchant_key TEXT NOT NULL,
    name TEXT,
    merchant TEXT,
    amount REAL,
    renewal_date TEXT,
    category TEXT,
    logo_color TEXT,
    email_from TEXT,
    email_subject TEXT,
    email_snippet TEXT,
    confidence INTEGER,
    is_trial INTEGER,
    is_active INTEGER DEFAULT 1,
    message_id TEXT,
    created_at TEXT,
    UNIQUE (user_id, merchant_key)
);

CREATE TABLE IF NOT EXISTS sync_progress (
    user_id TEXT PRIMARY KEY,
    status TEXT,
    progress INTEGER,
    total_emails INTEGER,
    processed_emails INTEGER,
    found_subscriptions INTEGER,
    error TEXT,
    updated_at TEXT
);
"""


class SubscriptionStore:
    """Persistent SQLite store, one row per (user, merchant)."""

    def __init__(self, db_path: Path | None = None) -> None:
        self.db_path = db_path or STORE_DB_PATH
        self.db_path = Path(self.db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self.db_path))
        self._conn.row_factory = sqlite3.Row
        self._create_tables()

    def _create_tables(self) -> None:
        self._conn.executescript(_CREATE_TABLES_SQL)

    # --- subscriptions ---

    def save_subscriptions(self, user_id: str, subscriptions: list[ExtractedSubscription]) -> int:
        """Insert subscriptions for merchants not yet stored. Returns the number inserted.

        A merchant already on file, including one the user removed, is left
        untouched.
        """
        inserted = 0
        created_at = datetime.now().isoformat()
        with self._conn:
            for sub in subscriptions:
                cursor = self._conn.execute(
                    "INSERT OR IGNORE INTO subscriptions (user_id, merchant_key, name, merchant, "
                    "amount, renewal_date, category, logo_color, email_from, email_subject, "
                    "email_snippet, confidence, is_trial, message_id, created_at) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                    (
                        user_id,
                        sub.merchant_key,
                        sub.name,
                        sub.merchant,
                        sub.amount,
                        sub.renewal_date.isoformat(),
                        sub.category,
                        sub.logo_color,
                        sub.email_from,
                        sub.email_subject,
                        sub.email_snippet,
                        sub.confidence,
                        int(sub.is_trial),
                        sub.message_id,
                        created_at,
                    ),
                )
                inserted += cursor.rowcount
        return inserted

    def list_subscriptions(self, user_id: str, include_inactive: bool = False) -> list[ExtractedSubscription]:
        """Return a user's subscriptions, soonest renewal first."""
        sql = "SELECT * FROM subscriptions WHERE user_id = ?"
        if not include_inactive:
            sql += " AND is_active = 1"
        rows = self._conn.execute(sql + " ORDER BY renewal_date ASC", (user_id,)).fetchall()
        return [
            ExtractedSubscription.from_dict(
                {
                    "name": r["name"],
                    "merchant": r["merchant"],
                    "amount": r["amount"],
                    "renewalDate": r["renewal_date"],
                    "category": r["category"],
                    "logoColor": r["logo_color"],
                    "emailFrom": r["email_from"],
                    "emailSubject": r["email_subject"],
                    "emailSnippet": r["email_snippet"],
                    "confidence": r["confidence"],
                    "isTrial": bool(r["is_trial"]),
                },
                message_id=r["message_id"] or "",
            )
            for r in rows
        ]

    def deactivate(self, user_id: str, merchant: str) -> bool:
        """Soft-delete a subscription. Returns True if one was found."""
        with self._conn:
            cursor = self._conn.execute(
                "UPDATE subscriptions SET is_active = 0 WHERE user_id = ? AND merchant_key = ?",
                (user_id, merchant.lower()),
            )
        return cursor.rowcount > 0

    # --- sync progress ---

    def save_progress(self, user_id: str, progress: SyncProgress) -> None:
        """Overwrite the user's progress record (last write wins)."""
        with self._conn:
            self._conn.execute(
                "INSERT OR REPLACE INTO sync_progress (user_id, status, progress, total_emails, "
                "processed_emails, found_subscriptions, error, updated_at) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    user_id,
                    progress.status.value,
                    progress.progress,
                    progress.total_emails,
                    progress.processed_emails,
                    progress.found_subscriptions,
                    progress.error,
                    datetime.now().isoformat(),
                ),
            )

    def load_progress(self, user_id: str) -> SyncProgress | None:
        row = self._conn.execute(
            "SELECT * FROM sync_progress WHERE user_id = ?", (user_id,)
        ).fetchone()
        if row is None:
            return None
        return SyncProgress(
            status=SyncStatus(row["status"]),
            total_emails=row["total_emails"],
            processed_emails=row["processed_emails"],
            found_subscriptions=row["found_subscriptions"],
            progress=row["progress"],
            error=row["error"],
        )

    # --- maintenance ---

    def clear(self) -> None:
        """Drop and recreate all tables."""
        self._conn.executescript(
            "DROP TABLE IF EXISTS subscriptions;"
            "DROP TABLE IF EXISTS sync_progress;"
        )
        self._create_tables()

    def get_info(self) -> dict:
        """Return store statistics."""
        file_size = self.db_path.stat().st_size if self.db_path.exists() else 0

        last_sync_row = self._conn.execute(
            "SELECT updated_at FROM sync_progress ORDER BY updated_at DESC LIMIT 1"
        ).fetchone()
        last_sync_date = last_sync_row["updated_at"] if last_sync_row else None

        subscription_count = self._conn.execute(
            "SELECT COUNT(*) AS c FROM subscriptions WHERE is_active = 1"
        ).fetchone()["c"]
        user_count = self._conn.execute(
            "SELECT COUNT(DISTINCT user_id) AS c FROM subscriptions"
        ).fetchone()["c"]

        return {
            "db_file_size": file_size,
            "last_sync_date": last_sync_date,
            "subscription_count": subscription_count,
            "user_count": user_count,
        }

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    # --- context manager ---

    def __enter__(self) -> SubscriptionStore:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        self.close()
