from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from supabase import Client

from storefront.api.deps import get_db, get_google_client, get_session, get_token
from storefront.core.config import Settings, get_settings
from storefront.core.security import decode_token
from storefront.models.schemas import AuthOut, CredentialsIn, GoogleCallbackIn, SessionOut
from storefront.services import auth_service
from storefront.services.oauth import GoogleOAuthClient

router = APIRouter()


def _signed_in(result: dict, settings: Settings) -> JSONResponse:
    response = JSONResponse(content=result)
    response.set_cookie(
        settings.session_cookie_name,
        result["token"],
        max_age=settings.session_lifetime_days * 24 * 60 * 60,
        httponly=True,
        samesite="lax",
    )
    return response


@router.post("/callback/credentials", response_model=AuthOut)
def credentials_callback(payload: CredentialsIn, client: Client = Depends(get_db), settings: Settings = Depends(get_settings)):
    user = auth_service.authenticate_with_credentials(client, settings, payload.email, payload.password, payload.name)
    return _signed_in(auth_service.sign_in(user, settings), settings)


@router.post("/callback/google", response_model=AuthOut)
def google_callback(
    payload: GoogleCallbackIn,
    client: Client = Depends(get_db),
    settings: Settings = Depends(get_settings),
    google: GoogleOAuthClient = Depends(get_google_client),
):
    profile = google.fetch_profile(payload.code)
    user = auth_service.sign_in_hook(client, settings, profile)
    return _signed_in(auth_service.sign_in(user, settings), settings)


@router.post("/refresh", response_model=AuthOut)
def refresh(token: Optional[str] = Depends(get_token), settings: Settings = Depends(get_settings)):
    new_token = auth_service.refresh_session_token(token, settings)
    session = auth_service.materialize_session(
        decode_token(new_token, settings), lifetime_days=settings.session_lifetime_days
    )
    return _signed_in({"token": new_token, "token_type": "bearer", "session": session}, settings)


@router.get("/session", response_model=SessionOut)
def current_session(session: dict = Depends(get_session)):
    return session


@router.post("/signout")
def signout(settings: Settings = Depends(get_settings)):
    response = JSONResponse(content={"message": "Signed out"})
    response.delete_cookie(settings.session_cookie_name)
    return response
