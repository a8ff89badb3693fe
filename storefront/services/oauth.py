import logging

import httpx

from storefront.core.config import Settings
from storefront.core.errors import InternalError, ValidationError

logger = logging.getLogger(__name__)

GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"


class GoogleOAuthClient:
    def __init__(self, settings: Settings, timeout: float = 10.0):
        self.settings = settings
        self.timeout = timeout

    def fetch_profile(self, code: str) -> dict:
        """Exchange an authorization code and return the OpenID profile."""
        if not self.settings.google_client_id or not self.settings.google_client_secret:
            raise InternalError("Google OAuth is not configured")
        if not code:
            raise ValidationError("Missing authorization code")
        with httpx.Client(timeout=self.timeout) as client:
            try:
                r = client.post(GOOGLE_TOKEN_URL, data={
                    "code": code,
                    "client_id": self.settings.google_client_id,
                    "client_secret": self.settings.google_client_secret,
                    "redirect_uri": self.settings.google_redirect_uri,
                    "grant_type": "authorization_code",
                })
                if r.status_code != 200:
                    logger.warning("Google token exchange failed: %s %s", r.status_code, r.text[:200])
                    raise ValidationError("Invalid authorization code")
                access_token = r.json()["access_token"]
                r = client.get(GOOGLE_USERINFO_URL, headers={"Authorization": f"Bearer {access_token}"})
                r.raise_for_status()
            except httpx.HTTPError as exc:
                logger.error("Google OAuth network error: %s", exc)
                raise InternalError() from exc
        return r.json()
