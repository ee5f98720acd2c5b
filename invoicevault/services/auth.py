"""
Single-admin login for the API.

A successful login issues a signed, expiring session token (HS256 JWT) that
the API stores in an httpOnly cookie. There is exactly one account, taken
from configuration.
"""

import secrets
from datetime import datetime, timedelta, UTC
import jwt
from loguru import logger
from .errors import AuthError
from ..core.config import Settings

SESSION_COOKIE = "invoicevault_session"
JWT_ALGORITHM = "HS256"


def check_credentials(username: str, password: str, settings: Settings) -> bool:
    """Constant-time comparison against the configured admin account"""
    user_ok = secrets.compare_digest(username.encode(), settings.admin_username.encode())
    pass_ok = secrets.compare_digest(password.encode(), settings.admin_password.encode())
    return user_ok and pass_ok


def session_max_age(settings: Settings) -> int:
    """Session lifetime in seconds"""
    return int(timedelta(days=settings.session_max_age_days).total_seconds())


def create_session_token(username: str, settings: Settings, now: datetime | None = None) -> str:
    now = now or datetime.now(UTC)
    payload = {
        "sub": username,
        "iat": now,
        "exp": now + timedelta(days=settings.session_max_age_days),
    }
    return jwt.encode(payload, settings.session_secret, algorithm=JWT_ALGORITHM)


def verify_session_token(token: str | None, settings: Settings) -> str:
    """
    Validate a session token.

    Returns:
        The username the session belongs to

    Raises:
        AuthError: If the token is missing, expired, tampered with, or not
            issued for the configured admin
    """
    if not token:
        raise AuthError("Authentication required")
    try:
        payload = jwt.decode(token, settings.session_secret, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise AuthError("Session expired")
    except jwt.InvalidTokenError as e:
        logger.warning("Rejected session token", error=str(e))
        raise AuthError("Invalid session")

    username = payload.get("sub")
    if username != settings.admin_username:
        raise AuthError("Invalid session")
    return username


def login(username: str, password: str, settings: Settings) -> str:
    """
    Check credentials and issue a session token.

    Raises:
        AuthError: On a username/password mismatch
    """
    if not check_credentials(username, password, settings):
        logger.warning("Failed login attempt", username=username)
        raise AuthError("Invalid username or password")
    logger.info("Admin logged in", username=username)
    return create_session_token(username, settings)
