"""In-memory fallback store used when Supabase is unavailable."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Dict

# Longest history window served by the score endpoints
FALLBACK_RETENTION_DAYS = 365

# Score snapshots keyed by user ID, then by snapshot date (YYYY-MM-DD)
fallback_snapshots: Dict[str, Dict[str, Dict[str, Any]]] = {}


def store_fallback_snapshot(
    user_id: str,
    row: Dict[str, Any],
    retention_days: int = FALLBACK_RETENTION_DAYS,
) -> None:
    """Store a snapshot and drop the user's rows older than the retention window."""
    rows = fallback_snapshots.setdefault(str(user_id), {})
    rows[row["date"]] = row

    newest = date.fromisoformat(max(rows))
    cutoff = (newest - timedelta(days=retention_days - 1)).isoformat()
    for key in [key for key in rows if key < cutoff]:
        del rows[key]


def clear_fallback_snapshots() -> None:
    fallback_snapshots.clear()
