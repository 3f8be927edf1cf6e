from datetime import timedelta
import hmac
import secrets
from typing import Optional
from passlib.context import CryptContext
from jose import jwt, JWTError
from headphoneweb.common.utils import now
from headphoneweb.config.settings import Settings, config_settings
from headphoneweb.auth.constants import ADMIN_SCOPE, SITE_SCOPE

pwd_context = CryptContext(schemes=[config_settings.PASS_HASH_SCHEME], deprecated="auto")


def hash_password(plain_password: str) -> str:
    return pwd_context.hash(plain_password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    return pwd_context.verify(plain_password, password_hash)


def burn_password_check() -> None:
    """Spend the same hashing work as a real verify when the user does not exist."""
    pwd_context.dummy_verify()


def site_password_matches(candidate: str, expected: str) -> bool:
    return hmac.compare_digest(candidate.encode(), expected.encode())


def session_ttl(settings: Settings) -> timedelta:
    return timedelta(hours=settings.SESSION_TTL_HOURS)


def create_session_token(settings: Settings, scope: str, subject: Optional[str] = None) -> str:
    issued = now()
    expiry = issued + session_ttl(settings)
    payload = {
        "scope": scope,
        "iat": int(issued.timestamp()),
        "exp": int(expiry.timestamp()),
        "jti": secrets.token_hex(16),
    }
    if subject is not None:
        payload["sub"] = str(subject)
    return jwt.encode(claims=payload, key=settings.SESSION_SECRET, algorithm=settings.SESSION_ALGO)


def decode_session_token(settings: Settings, token: Optional[str], scope: str) -> Optional[dict]:
    """To verify the signature, expiration and scope of a session cookie"""
    if not token:
        return None
    try:
        claims = jwt.decode(token, key=settings.SESSION_SECRET, algorithms=[settings.SESSION_ALGO])
    except JWTError:
        return None
    if claims.get("scope") != scope:
        return None
    return claims


def create_site_token(settings: Settings) -> str:
    return create_session_token(settings, SITE_SCOPE)


def create_admin_token(settings: Settings, admin_id: int) -> str:
    return create_session_token(settings, ADMIN_SCOPE, subject=str(admin_id))
