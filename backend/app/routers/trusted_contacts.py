"""
Trusted contact management API endpoints.

Senders on this list are downgraded to "safe" by the analysis pipeline
unless the model classifies the message as a scam.

Endpoints:
  GET    /                 — list the user's trusted contacts (auth: JWT)
  POST   /                 — add a trusted email or phone number (auth: JWT)
  DELETE /{contact_id}     — remove a trusted contact (auth: JWT)
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from postgrest import SyncPostgrestClient

from app.auth import CurrentUser, get_current_user
from app.dependencies import get_user_db
from app.models.trusted_contact import TrustedContact, TrustedContactCreate
from app.services.validator import sanitize_text

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=List[TrustedContact])
async def list_trusted_contacts(
    user: CurrentUser = Depends(get_current_user),
    db: SyncPostgrestClient = Depends(get_user_db),
):
    """List trusted contacts for the authenticated user, newest first."""
    result = (
        db.table("trusted_contacts")
        .select("*")
        .eq("user_id", user.id)
        .order("created_at", desc=True)
        .execute()
    )
    return [TrustedContact(**row) for row in result.data or []]


@router.post("/", response_model=TrustedContact, status_code=201)
async def add_trusted_contact(
    body: TrustedContactCreate,
    user: CurrentUser = Depends(get_current_user),
    db: SyncPostgrestClient = Depends(get_user_db),
):
    """
    Add a trusted contact.

    Raises:
        409 if the user already trusts this value (case-insensitive).
        500 if the insert fails.
    """
    contact_value = sanitize_text(body.contact_value)

    existing = (
        db.table("trusted_contacts")
        .select("id, contact_value")
        .eq("user_id", user.id)
        .execute()
    )
    if any(
        (row.get("contact_value") or "").lower() == contact_value.lower()
        for row in existing.data or []
    ):
        raise HTTPException(status_code=409, detail="Contact is already trusted")

    try:
        result = (
            db.table("trusted_contacts")
            .insert({"user_id": user.id, "contact_value": contact_value})
            .execute()
        )
    except Exception as e:
        logger.error(f"Failed to insert trusted contact: {e}")
        raise HTTPException(status_code=500, detail="Failed to save trusted contact")

    if not result.data:
        raise HTTPException(status_code=500, detail="Failed to save trusted contact")

    return TrustedContact(**result.data[0])


@router.delete("/{contact_id}")
async def delete_trusted_contact(
    contact_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: SyncPostgrestClient = Depends(get_user_db),
):
    """Remove one of the user's trusted contacts."""
    result = (
        db.table("trusted_contacts")
        .delete()
        .eq("id", contact_id)
        .eq("user_id", user.id)
        .execute()
    )

    if not result.data:
        raise HTTPException(status_code=404, detail="Trusted contact not found")

    return {"message": "Trusted contact deleted"}
