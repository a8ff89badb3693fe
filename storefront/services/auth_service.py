"""Sign-in flows and the stateless session token.

Two entry points produce an identity: ``authenticate_with_credentials`` for the
email/password form (which doubles as signup) and ``sign_in_hook`` for OAuth
profiles. The identity is turned into token claims once, by ``mint_claims``;
refreshing a token re-signs those claims without touching the user table.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from postgrest.exceptions import APIError
from supabase import Client

from storefront.core.config import Settings
from storefront.core.errors import (
    InvalidCredentialsError,
    MissingEmailError,
    MissingFieldError,
    SocialOnlyAccountError,
    Unauthenticated,
    UserCreationError,
)
from storefront.core.security import JWTError, create_token, decode_token, hash_password, verify_password
from storefront.services import users_service

logger = logging.getLogger(__name__)

# password stored for accounts provisioned through OAuth
SOCIAL_PASSWORD = ""


def resolve_or_create_user(
    client: Client,
    settings: Settings,
    email: str,
    name: str,
    image: Optional[str] = None,
    password: Optional[str] = None,
) -> dict:
    user = users_service.get_user_by_email(client, email)
    if user:
        return user
    stored = hash_password(password) if password else SOCIAL_PASSWORD
    role = settings.role_for(email)
    try:
        user = users_service.insert_user(client, email, name, stored, role, image)
    except APIError as exc:
        logger.error("Could not create user %s", email, exc_info=True)
        raise UserCreationError() from exc
    logger.info("Created %s account for %s (%s)", role, email, "credentials" if password else "oauth")
    return user


def authenticate_with_credentials(client: Client, settings: Settings, email: str, password: str, name: str) -> dict:
    if not email or not password or not name:
        raise MissingFieldError()
    user = users_service.get_user_by_email(client, email)
    if user:
        if not user.get("password"):
            raise SocialOnlyAccountError()
        if not verify_password(password, user["password"]):
            raise InvalidCredentialsError()
    else:
        user = resolve_or_create_user(client, settings, email, name, password=password)
    return users_service.public_user(user)


def sign_in_hook(client: Client, settings: Settings, profile: Optional[dict], user: Optional[dict] = None) -> dict:
    """Resolve an OAuth profile to a stored user and return the identity to mint.

    ``user`` is the provider's already-normalized identity when there is one;
    its fields take priority except for the picture, which comes from the
    raw profile first.
    """
    profile = profile or {}
    user = dict(user or {})
    email = user.get("email") or profile.get("email")
    name = user.get("name") or profile.get("name")
    image = profile.get("picture") or user.get("image")
    if not email:
        raise MissingEmailError()
    db_user = resolve_or_create_user(client, settings, email, name, image)
    user.update({"email": email, "name": name, "image": image})
    user["id"] = str(db_user["id"])
    user["role"] = db_user.get("role")
    return user


def mint_claims(claims: Dict[str, Any], user: Optional[dict] = None) -> Dict[str, Any]:
    claims = dict(claims)
    if user:
        claims["id"] = user["id"]
        claims["role"] = user.get("role") or "user"
        claims["name"] = user.get("name")
        claims["email"] = user["email"]
        claims["picture"] = user.get("image") or ""
    return claims


def issue_token(claims: Dict[str, Any], settings: Settings) -> str:
    claims = {k: v for k, v in claims.items() if k != "exp"}
    return create_token(claims, settings)


def read_token(token: Optional[str], settings: Settings) -> Dict[str, Any]:
    if not token:
        raise Unauthenticated()
    try:
        claims = decode_token(token, settings)
    except JWTError as exc:
        raise Unauthenticated() from exc
    if not claims.get("id") or not claims.get("email"):
        raise Unauthenticated()
    return claims


def refresh_session_token(token: Optional[str], settings: Settings) -> str:
    claims = read_token(token, settings)
    return issue_token(mint_claims(claims), settings)


def materialize_session(claims: Dict[str, Any], now: Optional[datetime] = None, lifetime_days: int = 30) -> dict:
    now = now or datetime.now(timezone.utc)
    exp = claims.get("exp")
    if exp:
        expires = datetime.fromtimestamp(exp, tz=timezone.utc)
    else:
        expires = now + timedelta(days=lifetime_days)
    return {
        "id": claims["id"],
        "role": claims.get("role") or "user",
        "name": claims.get("name") or None,
        "email": claims["email"],
        "image": claims.get("picture") or None,
        "expires": expires.isoformat(),
    }


def sign_in(user: dict, settings: Settings) -> dict:
    """Token plus session view for a freshly authenticated identity."""
    token = issue_token(mint_claims({}, user), settings)
    session = materialize_session(decode_token(token, settings), lifetime_days=settings.session_lifetime_days)
    return {"token": token, "token_type": "bearer", "session": session}
