"""
Message analysis endpoint.

  POST /api/analyze   — classify a suspected email, SMS or call (auth: JWT)
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from postgrest import SyncPostgrestClient

from app.auth import CurrentUser, get_current_user
from app.dependencies import get_classifier, get_user_db
from app.errors import UnknownError
from app.models.analysis import AnalysisResult
from app.services.classifier import Classifier
from app.services.pipeline import AnalysisPipeline

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=AnalysisResult,
    responses={
        200: {
            "description": "Verdict computed and saved to the user's scam logs",
            "content": {
                "application/json": {
                    "example": {
                        "risk_level": "phishing",
                        "risk_score": 0.92,
                        "flagged_reasons": ["Urgency tactics", "Credential request"],
                        "analysis": "The message pressures the reader to verify an account via a link.",
                        "recommendations": "Do not click the link. Contact the provider directly.",
                    }
                }
            },
        },
        400: {"description": "Invalid input fields"},
        401: {"description": "Missing or invalid auth token"},
        402: {"description": "AI credits exhausted"},
        429: {"description": "AI rate limit exceeded"},
        500: {"description": "Analysis could not be saved"},
        502: {"description": "Classification service failed"},
    },
)
def analyze_message(
    payload: Any = Body(None),
    user: CurrentUser = Depends(get_current_user),
    db: SyncPostgrestClient = Depends(get_user_db),
    classifier: Classifier = Depends(get_classifier),
) -> AnalysisResult:
    """
    Validate, classify and store one message for the authenticated user.

    Body: ``{messageType, sender, subject?, content?, audioData?}``.
    The verdict is returned only once it has been saved.
    """
    pipeline = AnalysisPipeline(classifier=classifier, db=db)
    try:
        return pipeline.run(payload, user.id)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Error in analyze endpoint")
        raise UnknownError(str(e) or None)
