"""
FastAPI dependencies that wire configured components into the routers.

Tests replace these through ``app.dependency_overrides`` to substitute a
fake classifier or database client.
"""

from typing import Iterator

from fastapi import Depends
from postgrest import SyncPostgrestClient

from app.auth import CurrentUser, get_current_user
from app.config import get_settings
from app.db import create_user_client
from app.services.classifier import Classifier, build_classifier


def get_classifier() -> Classifier:
    return build_classifier(get_settings())


def get_user_db(user: CurrentUser = Depends(get_current_user)) -> Iterator[SyncPostgrestClient]:
    """PostgREST client scoped to the authenticated user (RLS applies), closed after the request."""
    client = create_user_client(user.access_token)
    try:
        yield client
    finally:
        client.session.close()
