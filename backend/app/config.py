"""
Application configuration.

Settings are read from the environment (and a local ``.env`` file via
python-dotenv) exactly once, then handed explicitly to the components that
need them: the Supabase clients, the classifier and the CORS middleware.
Nothing inside the analysis pipeline reads ``os.environ`` directly.

Environment variables
---------------------
SUPABASE_URL                Supabase project URL (required).
SUPABASE_KEY                Supabase anon key (required).
SUPABASE_SERVICE_KEY        Service-role key, used only by health checks.
SUPABASE_JWT_SECRET         When set, JWTs are verified locally (HS256).
CLASSIFIER_PROVIDER         "gateway" (default) or "anthropic".
AI_GATEWAY_URL              OpenAI-compatible chat-completions endpoint.
AI_GATEWAY_API_KEY          Bearer key for the gateway.
ANTHROPIC_API_KEY           Key for the anthropic provider.
CLASSIFIER_MODEL            Model used for text analysis.
CLASSIFIER_AUDIO_MODEL      Model used when a call recording is attached.
CLASSIFIER_TIMEOUT_SECONDS  Outbound timeout for the classifier (default 60).
CORS_ORIGINS                Comma-separated allowed origins (default "*").
"""

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

DEFAULT_GATEWAY_URL = "https://ai.gateway.lovable.dev/v1/chat/completions"

# Provider -> (text model, audio model); the Messages API takes no audio input
DEFAULT_MODELS = {
    "gateway": ("google/gemini-2.5-flash", "google/gemini-2.5-pro"),
    "anthropic": ("claude-haiku-4-5", None),
}

DEFAULT_TIMEOUT_SECONDS = 60.0


@dataclass(frozen=True)
class Settings:
    supabase_url: str
    supabase_key: str
    supabase_service_key: Optional[str] = None
    supabase_jwt_secret: Optional[str] = None
    classifier_provider: str = "gateway"
    gateway_url: str = DEFAULT_GATEWAY_URL
    gateway_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    classifier_model: str = DEFAULT_MODELS["gateway"][0]
    classifier_audio_model: Optional[str] = DEFAULT_MODELS["gateway"][1]
    classifier_timeout: float = DEFAULT_TIMEOUT_SECONDS
    cors_origins: tuple = ("*",)


def _parse_origins(raw: str) -> tuple:
    origins = [o.strip() for o in raw.split(",") if o.strip()]
    return tuple(origins) if origins else ("*",)


def load_settings() -> Settings:
    """
    Build a Settings object from the current environment.

    Raises:
        ValueError: if SUPABASE_URL or SUPABASE_KEY is missing, or
            CLASSIFIER_PROVIDER names an unknown provider.
    """
    load_dotenv()

    supabase_url = os.getenv("SUPABASE_URL")
    supabase_key = os.getenv("SUPABASE_KEY")
    if not supabase_url or not supabase_key:
        raise ValueError("SUPABASE_URL and SUPABASE_KEY must be set in environment variables")

    provider = os.getenv("CLASSIFIER_PROVIDER", "gateway").strip().lower()
    if provider not in DEFAULT_MODELS:
        raise ValueError(
            f"Unsupported CLASSIFIER_PROVIDER {provider!r}. "
            f"Supported: {sorted(DEFAULT_MODELS)}"
        )
    default_text_model, default_audio_model = DEFAULT_MODELS[provider]

    timeout_raw = os.getenv("CLASSIFIER_TIMEOUT_SECONDS", "").strip()
    try:
        timeout = float(timeout_raw) if timeout_raw else DEFAULT_TIMEOUT_SECONDS
    except ValueError:
        raise ValueError(f"CLASSIFIER_TIMEOUT_SECONDS must be a number, got {timeout_raw!r}")

    return Settings(
        supabase_url=supabase_url,
        supabase_key=supabase_key,
        supabase_service_key=os.getenv("SUPABASE_SERVICE_KEY") or None,
        supabase_jwt_secret=os.getenv("SUPABASE_JWT_SECRET") or None,
        classifier_provider=provider,
        gateway_url=os.getenv("AI_GATEWAY_URL") or DEFAULT_GATEWAY_URL,
        gateway_api_key=os.getenv("AI_GATEWAY_API_KEY") or None,
        anthropic_api_key=os.getenv("ANTHROPIC_API_KEY") or None,
        classifier_model=os.getenv("CLASSIFIER_MODEL") or default_text_model,
        classifier_audio_model=os.getenv("CLASSIFIER_AUDIO_MODEL") or default_audio_model,
        classifier_timeout=timeout,
        cors_origins=_parse_origins(os.getenv("CORS_ORIGINS", "*")),
    )


@lru_cache
def get_settings() -> Settings:
    """Process-wide settings, resolved on first use."""
    return load_settings()
