"""
Shared test setup.

Environment variables must exist before any ``app`` module is imported,
because settings and the Supabase clients are created at import time.
The keys are JWT-shaped so the Supabase client accepts them offline.
"""

import os

os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon.key-payload.signature")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service.key-payload.signature")
os.environ.setdefault("AI_GATEWAY_API_KEY", "test-gateway-key")
os.environ.pop("SUPABASE_JWT_SECRET", None)
os.environ.pop("CLASSIFIER_PROVIDER", None)
