import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Optional, Tuple

from dotenv import load_dotenv

load_dotenv()


def _split(value: Optional[str]) -> Tuple[str, ...]:
    if not value:
        return ()
    return tuple(part.strip() for part in value.split(",") if part.strip())


@dataclass(frozen=True)
class Settings:
    app_name: str = "Storefront API"
    locale: str = "en"
    log_level: str = "INFO"
    cors_origins: Tuple[str, ...] = ("*",)

    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    storage_bucket: str = "images"

    secret_key: str = "changeme"
    algorithm: str = "HS256"
    session_lifetime_days: int = 30
    session_cookie_name: str = "session_token"

    admin_emails: Tuple[str, ...] = field(default_factory=tuple)

    google_client_id: Optional[str] = None
    google_client_secret: Optional[str] = None
    google_redirect_uri: Optional[str] = None

    payment_webhook_secret: Optional[str] = None
    upload_concurrency: int = 4

    @classmethod
    def from_env(cls) -> "Settings":
        admins = tuple(e for e in (os.getenv("ADMIN_EMAIL1"), os.getenv("ADMIN_EMAIL2")) if e)
        return cls(
            app_name=os.getenv("APP_NAME", "Storefront API"),
            locale=os.getenv("APP_LOCALE", "en"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            cors_origins=_split(os.getenv("CORS_ORIGINS")) or ("*",),
            supabase_url=os.getenv("SUPABASE_URL"),
            # service role key preferred, the anon key only works with open RLS policies
            supabase_key=os.getenv("SUPABASE_SERVICE_KEY") or os.getenv("SUPABASE_ANON_KEY"),
            storage_bucket=os.getenv("SUPABASE_STORAGE_BUCKET", "images"),
            secret_key=os.getenv("SECRET_KEY", "changeme"),
            session_lifetime_days=int(os.getenv("SESSION_LIFETIME_DAYS", "30")),
            session_cookie_name=os.getenv("SESSION_COOKIE_NAME", "session_token"),
            admin_emails=admins,
            google_client_id=os.getenv("GOOGLE_CLIENT_ID"),
            google_client_secret=os.getenv("GOOGLE_CLIENT_SECRET"),
            google_redirect_uri=os.getenv("GOOGLE_REDIRECT_URI"),
            payment_webhook_secret=os.getenv("PAYMENT_WEBHOOK_SECRET"),
            upload_concurrency=int(os.getenv("UPLOAD_CONCURRENCY", "4")),
        )

    def role_for(self, email: str) -> str:
        return "admin" if email in self.admin_emails else "user"


@lru_cache()
def get_settings() -> Settings:
    return Settings.from_env()
