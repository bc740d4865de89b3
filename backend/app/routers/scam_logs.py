"""
Scam log read endpoints for the dashboard, messages and reports pages.

Logs are written only by POST /api/analyze; this router never modifies them.

Endpoints:
  GET /              — list logs, newest first, with optional filters
  GET /stats         — summary counters
  GET /dashboard     — counters, 7-day trend, category breakdown, recent threats
  GET /export        — CSV or Excel download, optionally filtered by threat type
  GET /{log_id}      — a single log
"""

import io
import logging
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse
from postgrest import SyncPostgrestClient

from app.auth import CurrentUser, get_current_user
from app.dependencies import get_user_db
from app.models.scam_log import DashboardSummary, ScamLogRecord, ScamStats
from app.services.report_export import (
    export_csv,
    export_filename,
    export_xlsx,
    filter_by_threat_type,
)
from app.services.stats import (
    category_breakdown,
    compute_stats,
    recent_threats,
    weekly_threats,
)

logger = logging.getLogger(__name__)

router = APIRouter()

_RISK_FILTER = "^(all|safe|suspicious|scam|phishing)$"
_TYPE_FILTER = "^(all|email|sms|call)$"

_MEDIA_TYPES = {
    "csv": "text/csv",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


def _fetch_logs(db: SyncPostgrestClient, user_id: str) -> list[dict]:
    """All of the user's scam_logs rows, newest first."""
    result = (
        db.table("scam_logs")
        .select("*")
        .eq("user_id", user_id)
        .order("created_at", desc=True)
        .execute()
    )
    return result.data or []


def _matches_search(row: dict, search: str) -> bool:
    needle = search.lower()
    return (
        needle in (row.get("sender") or "").lower()
        or needle in (row.get("content") or "").lower()
    )


@router.get("/", response_model=List[ScamLogRecord])
async def list_scam_logs(
    risk_level: Optional[str] = Query(default=None, pattern=_RISK_FILTER),
    message_type: Optional[str] = Query(default=None, pattern=_TYPE_FILTER),
    search: Optional[str] = Query(default=None, max_length=255),
    user: CurrentUser = Depends(get_current_user),
    db: SyncPostgrestClient = Depends(get_user_db),
):
    """
    List the user's scam logs, newest first.

    risk_level and message_type filter exactly ("all" means no filter);
    search matches sender or content, case-insensitively.
    """
    query = db.table("scam_logs").select("*").eq("user_id", user.id)
    if risk_level and risk_level != "all":
        query = query.eq("risk_level", risk_level)
    if message_type and message_type != "all":
        query = query.eq("message_type", message_type)

    rows = query.order("created_at", desc=True).execute().data or []

    if search and search.strip():
        rows = [r for r in rows if _matches_search(r, search.strip())]

    return [ScamLogRecord(**row) for row in rows]


@router.get("/stats", response_model=ScamStats)
async def get_scam_stats(
    user: CurrentUser = Depends(get_current_user),
    db: SyncPostgrestClient = Depends(get_user_db),
):
    """Total threats, active alerts (last 24h), messages analysed and protection score."""
    return compute_stats(_fetch_logs(db, user.id))


@router.get("/dashboard", response_model=DashboardSummary)
async def get_dashboard(
    user: CurrentUser = Depends(get_current_user),
    db: SyncPostgrestClient = Depends(get_user_db),
):
    """Everything the dashboard renders, computed from a single query."""
    rows = _fetch_logs(db, user.id)
    now = datetime.now(timezone.utc)
    return DashboardSummary(
        stats=compute_stats(rows, now=now),
        weekly_threats=weekly_threats(rows, now=now),
        categories=category_breakdown(rows),
        recent_threats=[ScamLogRecord(**r) for r in recent_threats(rows)],
    )


@router.get("/export")
async def export_scam_logs(
    format: str = Query(default="csv", pattern="^(csv|xlsx)$"),
    threat_type: Optional[str] = Query(default=None, pattern=_RISK_FILTER),
    user: CurrentUser = Depends(get_current_user),
    db: SyncPostgrestClient = Depends(get_user_db),
) -> StreamingResponse:
    """
    Download the user's logs as CSV or Excel.

    Summary statistics in the Excel report always cover every log; the
    table honours threat_type. An empty result is a header-only file.
    """
    rows = _fetch_logs(db, user.id)
    filtered = filter_by_threat_type(rows, threat_type)
    generated_at = datetime.now(timezone.utc)

    try:
        if format == "xlsx":
            content = export_xlsx(filtered, compute_stats(rows, now=generated_at), generated_at)
        else:
            content = export_csv(filtered)
    except Exception as e:
        logger.error(f"Failed to export scam logs for {user.id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to export scam logs")

    filename = export_filename(format, generated_at)
    return StreamingResponse(
        io.BytesIO(content),
        media_type=_MEDIA_TYPES[format],
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
        },
    )


@router.get("/{log_id}", response_model=ScamLogRecord)
async def get_scam_log(
    log_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: SyncPostgrestClient = Depends(get_user_db),
):
    """Return one of the user's scam logs."""
    result = (
        db.table("scam_logs")
        .select("*")
        .eq("id", log_id)
        .eq("user_id", user.id)
        .execute()
    )
    if not result.data:
        raise HTTPException(status_code=404, detail="Scam log not found")
    return ScamLogRecord(**result.data[0])
