from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from supabase import Client

from storefront.core.config import Settings, get_settings
from storefront.core.errors import Unauthenticated
from storefront.db.storage import AssetStore
from storefront.db.supabase import get_client
from storefront.services.auth_service import materialize_session, read_token
from storefront.services.oauth import GoogleOAuthClient

bearer = HTTPBearer(auto_error=False)


def get_db() -> Client:
    return get_client()


def get_asset_store(client: Client = Depends(get_db), settings: Settings = Depends(get_settings)) -> AssetStore:
    return AssetStore(client, settings.storage_bucket)


def get_google_client(settings: Settings = Depends(get_settings)) -> GoogleOAuthClient:
    return GoogleOAuthClient(settings)


def get_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    settings: Settings = Depends(get_settings),
) -> Optional[str]:
    if credentials is not None:
        return credentials.credentials
    return request.cookies.get(settings.session_cookie_name)


def get_optional_session(token: Optional[str] = Depends(get_token), settings: Settings = Depends(get_settings)) -> Optional[dict]:
    if not token:
        return None
    try:
        claims = read_token(token, settings)
    except Unauthenticated:
        return None
    return materialize_session(claims, lifetime_days=settings.session_lifetime_days)


def get_session(session: Optional[dict] = Depends(get_optional_session)) -> dict:
    if session is None:
        raise Unauthenticated()
    return session


async def raw_body(request: Request) -> bytes:
    return await request.body()
