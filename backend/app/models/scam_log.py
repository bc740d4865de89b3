"""
Pydantic models for scam logs and the dashboard views built on them.
"""

from typing import Any, List, Optional

from pydantic import BaseModel

from app.models.analysis import MessageType, RiskLevel


class ScamLogRecord(BaseModel):
    """Full scam_logs record from the database."""
    model_config = {"from_attributes": True}

    id: str
    user_id: str
    message_type: MessageType
    sender: str
    subject: Optional[str] = None
    content: str = ""
    risk_level: RiskLevel
    risk_score: Optional[float] = None
    flagged_reasons: Optional[List[str]] = None
    # The complete AnalysisResult as returned to the caller
    ai_analysis: Optional[Any] = None
    created_at: str


class ScamStats(BaseModel):
    total_threats: int
    active_alerts: int
    total_analyzed: int
    protection_score: int


class WeeklyThreatPoint(BaseModel):
    date: str   # YYYY-MM-DD
    day: str    # e.g. "Mon"
    count: int


class CategoryCount(BaseModel):
    name: str
    count: int


class DashboardSummary(BaseModel):
    """Everything the dashboard page renders in one response."""
    stats: ScamStats
    weekly_threats: List[WeeklyThreatPoint]
    categories: List[CategoryCount]
    recent_threats: List[ScamLogRecord]
