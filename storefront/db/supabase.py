from typing import Optional

from supabase import Client, create_client

from storefront.core.config import get_settings

supabase: Optional[Client] = None


def get_client() -> Client:
    global supabase
    if supabase is None:
        settings = get_settings()
        if not settings.supabase_url or not settings.supabase_key:
            raise RuntimeError("Supabase URL/Key not configured. See .env")
        supabase = create_client(settings.supabase_url, settings.supabase_key)
    return supabase


def first(res) -> Optional[dict]:
    """First row of a PostgREST response, or None."""
    if not res.data:
        return None
    return res.data[0]
