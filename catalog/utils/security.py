# catalog/utils/security.py
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import jwt, JWTError, ExpiredSignatureError
from passlib.context import CryptContext
from passlib.exc import UnknownHashError
import re
import logging
from ..config import Settings
from ..exceptions import InvalidTokenError

logger = logging.getLogger(__name__)

# Salted argon2 hashes (no 72-byte limit)
pwd_context = CryptContext(
    schemes=['argon2'],
    deprecated='auto'
)

# ============================================================
# JWT Functions
# ============================================================

def create_access_token(
    user_id: int,
    settings: Settings,
    now: Optional[datetime] = None
) -> str:
    """
    Create a signed access token bound to a user.

    Args:
        user_id: Identifier of the authenticated user
        settings: Application settings (secret, algorithm, lifetime)
        now: Issue time, defaults to the current UTC time

    Returns:
        JWT token string expiring ACCESS_TOKEN_EXPIRE_MINUTES after ``now``
    """
    issued_at = now or datetime.now(timezone.utc)
    expire = issued_at + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = {
        'id': user_id,
        'sub': str(user_id),
        'iat': issued_at,
        'exp': expire,
    }

    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str, settings: Settings) -> dict:
    """
    Decode and validate JWT token.

    Raises:
        ExpiredSignatureError: If token has expired
        JWTError: If token is invalid
    """
    return jwt.decode(
        token,
        settings.SECRET_KEY,
        algorithms=[settings.ALGORITHM]
    )


def verify_access_token(token: str, settings: Settings) -> int:
    """
    Verify a token and return the user id it was issued for.

    Raises:
        InvalidTokenError: bad signature, expired, malformed or missing identity
    """
    try:
        payload = decode_access_token(token, settings)
    except ExpiredSignatureError:
        logger.warning("Token has expired")
        raise InvalidTokenError()
    except JWTError as e:
        logger.warning(f"Invalid token: {e}")
        raise InvalidTokenError()

    user_id = payload.get("id", payload.get("sub"))
    try:
        return int(user_id)
    except (TypeError, ValueError):
        logger.warning("Token carries no usable user id")
        raise InvalidTokenError()


# ============================================================
# Password Functions
# ============================================================

def get_password_hash(password: str) -> str:
    """
    Hash password with argon2

    Raises:
        ValueError: If password is empty
    """
    if not password:
        raise ValueError("Password cannot be empty")

    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify password against hash; unknown hash formats never match.
    """
    if not plain_password or not hashed_password:
        return False

    try:
        return pwd_context.verify(plain_password, hashed_password)
    except UnknownHashError:
        logger.warning("Hash format is not recognized")
        return False


# ============================================================
# Email Validation
# ============================================================

def validate_email(email: str) -> bool:
    """
    Validate email format

    Args:
        email: Email address

    Returns:
        True if valid email format
    """
    email_regex = r'^[^\s@]+@[^\s@]+\.[^\s@]+$'
    return bool(re.match(email_regex, email))
