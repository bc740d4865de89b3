"""
Dashboard statistics over a user's scam logs.

All functions are pure: they take scam_logs rows (dicts with at least
``risk_level`` and ``created_at``) and an optional ``now`` for testing.
Day boundaries are UTC.
"""

import math
from datetime import datetime, timedelta, timezone
from typing import Optional

from app.models.analysis import RiskLevel
from app.models.scam_log import CategoryCount, ScamStats, WeeklyThreatPoint

ACTIVE_ALERT_WINDOW = timedelta(hours=24)
TREND_DAYS = 7

# Display order of the category breakdown
_CATEGORIES = [
    ("Phishing", RiskLevel.PHISHING.value),
    ("Scam", RiskLevel.SCAM.value),
    ("Suspicious", RiskLevel.SUSPICIOUS.value),
]


def parse_timestamp(value: str) -> datetime:
    """Parse a Supabase timestamp; naive values are taken as UTC."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _is_threat(row: dict) -> bool:
    return row.get("risk_level") != RiskLevel.SAFE.value


def compute_stats(rows: list[dict], now: Optional[datetime] = None) -> ScamStats:
    """
    Summary counters for the dashboard cards.

    protection_score is the share of safe messages as a whole percentage,
    100 when nothing has been analysed yet.
    """
    now = now or datetime.now(timezone.utc)
    cutoff = now - ACTIVE_ALERT_WINDOW

    total = len(rows)
    threats = [r for r in rows if _is_threat(r)]
    active = [r for r in threats if parse_timestamp(r["created_at"]) > cutoff]
    safe_count = total - len(threats)
    # Halves round up
    protection_score = math.floor(safe_count * 100 / total + 0.5) if total > 0 else 100

    return ScamStats(
        total_threats=len(threats),
        active_alerts=len(active),
        total_analyzed=total,
        protection_score=protection_score,
    )


def weekly_threats(rows: list[dict], now: Optional[datetime] = None) -> list[WeeklyThreatPoint]:
    """Non-safe log counts for each of the last seven days, oldest first."""
    now = now or datetime.now(timezone.utc)
    today = now.astimezone(timezone.utc).date()

    counts: dict = {}
    for row in rows:
        if not _is_threat(row):
            continue
        day = parse_timestamp(row["created_at"]).astimezone(timezone.utc).date()
        counts[day] = counts.get(day, 0) + 1

    points: list[WeeklyThreatPoint] = []
    for offset in range(TREND_DAYS - 1, -1, -1):
        day = today - timedelta(days=offset)
        points.append(
            WeeklyThreatPoint(
                date=day.isoformat(),
                day=day.strftime("%a"),
                count=counts.get(day, 0),
            )
        )
    return points


def category_breakdown(rows: list[dict]) -> list[CategoryCount]:
    """Counts per threat category, omitting categories with no logs."""
    result: list[CategoryCount] = []
    for name, level in _CATEGORIES:
        count = sum(1 for r in rows if r.get("risk_level") == level)
        if count > 0:
            result.append(CategoryCount(name=name, count=count))
    return result


def recent_threats(rows: list[dict], limit: int = 3) -> list[dict]:
    """The first ``limit`` non-safe rows; callers pass rows newest first."""
    return [r for r in rows if _is_threat(r)][:limit]
