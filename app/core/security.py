from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone

from jose import jwt

from app.core.config import get_settings

SUPERVISOR_ROLE = "supervisor"


def verify_supervisor_credentials(username: str, password: str) -> bool:
    """Compare submitted credentials against the configured supervisor account."""
    settings = get_settings()
    username_ok = secrets.compare_digest(
        username.encode("utf-8"), settings.supervisor_username.encode("utf-8")
    )
    password_ok = secrets.compare_digest(
        password.encode("utf-8"), settings.supervisor_password.encode("utf-8")
    )
    return username_ok and password_ok


def create_access_token(
    subject: str,
    role: str = SUPERVISOR_ROLE,
    expires_delta: timedelta | None = None,
) -> str:
    settings = get_settings()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    expire = datetime.now(timezone.utc) + expires_delta
    payload = {"sub": subject, "role": role, "exp": expire}
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.algorithm)


def decode_access_token(token: str) -> dict:
    """Decode a bearer token. Raises ``jose.JWTError`` when invalid or expired."""
    settings = get_settings()
    return jwt.decode(token, settings.jwt_secret, algorithms=[settings.algorithm])


def supervisor_profile(username: str) -> dict:
    return {
        "id": "1",
        "username": username,
        "name": "Supervisor",
        "email": "supervisor@property.com",
        "role": SUPERVISOR_ROLE,
    }
