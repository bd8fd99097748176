"""
Authentication utilities for JWT tokens and password hashing.

The bearer token is the only credential: the gate verifies its signature and
expiry and resolves it to a user id without consulting the database.
"""
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends, Header
from fastapi.security import OAuth2PasswordBearer

from .config import Settings, get_settings
from .responses import ApiException

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth", auto_error=False)


@lru_cache()
def get_pwd_context(rounds: int) -> CryptContext:
    """Password hashing context with a fixed bcrypt cost factor."""
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


def verify_password(plain_password: str, hashed_password: str, settings: Settings) -> bool:
    """Verify a password against its hash."""
    return get_pwd_context(settings.bcrypt_rounds).verify(plain_password, hashed_password)


def get_password_hash(password: str, settings: Settings) -> str:
    """Hash a password with a fresh salt for storage."""
    return get_pwd_context(settings.bcrypt_rounds).hash(password)


def create_access_token(
    user_id: str,
    settings: Settings,
    expires_delta: Optional[timedelta] = None,
    issued_at: Optional[datetime] = None,
) -> str:
    """Create a signed JWT whose subject is the user id."""
    issued = issued_at or datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(seconds=settings.access_token_expire_seconds)
    to_encode = {
        "sub": str(user_id),  # JWT sub claim must be a string
        "iat": int(issued.timestamp()),
        "exp": int((issued + expires_delta).timestamp()),
    }
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def verify_token(token: str, settings: Settings) -> Optional[dict]:
    """Verify a JWT token and return its payload.

    A token stops being valid in the second named by its ``exp`` claim;
    jose alone would still accept it during that second.
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None
    expires = payload.get("exp")
    if not isinstance(expires, int) or expires <= int(datetime.now(timezone.utc).timestamp()):
        return None
    return payload


def get_current_user_id(
    token: Optional[str] = Depends(oauth2_scheme),
    x_auth_token: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
) -> str:
    """Resolve the bearer token to a user id, raising 401 otherwise."""
    token = token or x_auth_token
    if not token:
        raise ApiException(
            401,
            "No token, authorization denied",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = verify_token(token, settings)
    user_id = payload.get("sub") if payload else None
    if not user_id:
        raise ApiException(
            401,
            "Token is not valid",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user_id
