"""
Trusted-contact override.

A sender on the user's trusted-contact list is forced to a safe verdict,
unless the model already called the message a scam.
"""

import logging

from postgrest import SyncPostgrestClient

from app.models.analysis import AnalysisResult, RiskLevel

logger = logging.getLogger(__name__)

TRUSTED_CONTACT_REASON = "Trusted contact"


def fetch_trusted_contacts(client: SyncPostgrestClient, user_id: str) -> set[str]:
    """
    Return the user's trusted contact values, lower-cased.

    A failed lookup is logged and treated as an empty list, which leaves
    the model's verdict untouched.
    """
    try:
        result = (
            client.table("trusted_contacts")
            .select("contact_value")
            .eq("user_id", user_id)
            .execute()
        )
    except Exception as e:
        logger.warning(f"Failed to fetch trusted contacts for user {user_id!r}: {e}")
        return set()

    return {
        row["contact_value"].strip().lower()
        for row in result.data or []
        if row.get("contact_value")
    }


def apply_trust_override(
    result: AnalysisResult,
    sender: str,
    trusted_contacts: set[str],
) -> AnalysisResult:
    """
    Downgrade ``result`` to safe when ``sender`` is a trusted contact.

    Matching is a case-insensitive exact comparison. A ``scam`` verdict is
    never overridden. The input result is not modified.
    """
    if sender.strip().lower() not in trusted_contacts:
        return result
    if result.risk_level == RiskLevel.SCAM:
        logger.info("Trusted sender classified as scam; override skipped")
        return result

    logger.info("Trusted sender; downgrading %s verdict to safe", result.risk_level.value)
    return result.model_copy(
        update={
            "risk_level": RiskLevel.SAFE,
            "risk_score": 0.0,
            "flagged_reasons": [TRUSTED_CONTACT_REASON],
        }
    )
