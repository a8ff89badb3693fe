import hashlib
import hmac
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from storefront.core.config import Settings

# cost factor is part of the stored hash, changing it only affects new accounts
pwd_ctx = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=10)


def hash_password(password: str) -> str:
    return pwd_ctx.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    if not hashed:
        return False
    try:
        return pwd_ctx.verify(plain, hashed)
    except ValueError:
        # not a bcrypt hash
        return False


def create_token(claims: Dict[str, Any], settings: Settings, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = dict(claims)
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(days=settings.session_lifetime_days))
    to_encode["exp"] = expire
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_token(token: str, settings: Settings) -> Dict[str, Any]:
    """Return the token claims; raises ``JWTError`` on a bad signature or expiry."""
    return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])


def sign_payload(body: bytes, secret: str) -> str:
    return hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


def verify_signature(body: bytes, signature: Optional[str], secret: str) -> bool:
    if not signature:
        return False
    # some gateways prefix the digest with the algorithm name
    if signature.startswith("sha256="):
        signature = signature[len("sha256="):]
    # header values arrive latin-1 decoded, compare as bytes
    return hmac.compare_digest(sign_payload(body, secret).encode(), signature.encode("latin-1", "replace"))


__all__ = [
    "JWTError",
    "create_token",
    "decode_token",
    "hash_password",
    "sign_payload",
    "verify_password",
    "verify_signature",
]
