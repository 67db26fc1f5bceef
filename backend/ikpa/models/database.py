"""Database connection and client."""
from functools import lru_cache

from supabase import Client, create_client

from ikpa.config import Settings, get_settings


def supabase_configured(settings: Settings) -> bool:
    """Return True when Supabase keys are present and not placeholders."""
    key = (settings.supabase_service_role_key or "").strip()
    url = (settings.supabase_url or "").strip()
    if not key or not url:
        return False
    if key.lower().startswith("your_"):
        return False
    return True


@lru_cache()
def get_supabase_client() -> Client:
    """Get Supabase client instance."""
    settings = get_settings()
    return create_client(
        supabase_url=settings.supabase_url,
        supabase_key=settings.supabase_service_role_key
    )
