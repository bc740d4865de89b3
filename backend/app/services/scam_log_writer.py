"""
Persistence for analysis verdicts.

Each successful analysis appends exactly one scam_logs row. The writer is
given a Supabase client authenticated as the calling user, so row-level
security ties the row to that user regardless of what the request body
contained.
"""

import logging

from postgrest import SyncPostgrestClient

from app.errors import PersistenceError
from app.models.analysis import AnalysisRequest, AnalysisResult

logger = logging.getLogger(__name__)


class ScamLogWriter:

    def __init__(self, client: SyncPostgrestClient):
        self.client = client

    def build_row(self, user_id: str, request: AnalysisRequest, result: AnalysisResult) -> dict:
        return {
            "user_id": user_id,
            "message_type": request.message_type.value,
            "sender": request.sender,
            "subject": request.subject or None,
            "content": request.content or "",
            "risk_level": result.risk_level.value,
            "risk_score": result.risk_score,
            "flagged_reasons": result.flagged_reasons or [],
            "ai_analysis": result.model_dump(mode="json"),
        }

    def write(self, user_id: str, request: AnalysisRequest, result: AnalysisResult) -> dict:
        """
        Insert one scam_logs row and return the stored row as the database echoed it.

        The committed row is never re-validated, so an unexpected column
        value cannot fail a request whose verdict is already stored.

        Raises:
            PersistenceError: if the insert fails or returns no row. The
                database message is passed through in ``details``.
        """
        row = self.build_row(user_id, request, result)

        try:
            response = self.client.table("scam_logs").insert(row).execute()
        except Exception as e:
            logger.error(f"Error saving to scam_logs: {e}")
            raise PersistenceError(details=str(e))

        if not response.data:
            logger.error("scam_logs insert returned no data")
            raise PersistenceError(details="Insert returned no data")

        logger.info("Saved analysis to scam_logs")
        return response.data[0]
