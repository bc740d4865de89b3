"""
Database client configuration.
Uses Supabase for PostgreSQL + Auth.
"""

from postgrest import SyncPostgrestClient
from supabase import create_client, Client

from app.config import get_settings

settings = get_settings()

# Client for auth verification (uses anon key)
supabase: Client = create_client(settings.supabase_url, settings.supabase_key)

# Admin client for service-level operations (bypasses RLS)
supabase_admin: Client = (
    create_client(settings.supabase_url, settings.supabase_service_key)
    if settings.supabase_service_key
    else None
)


def create_user_client(access_token: str) -> SyncPostgrestClient:
    """
    Build a PostgREST client that acts as the user who owns ``access_token``.

    Requests carry the user's JWT, so the row-level security policies on
    scam_logs and trusted_contacts restrict every read and write to that
    user's rows. Only the PostgREST part of the Supabase API is needed per
    request; the caller closes the client's HTTP session when done.
    """
    return SyncPostgrestClient(
        f"{settings.supabase_url}/rest/v1",
        headers={
            "apikey": settings.supabase_key,
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/json",
            "Content-Type": "application/json",
        },
    )
