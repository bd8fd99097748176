"""
Authentication routes: login and loading the signed-in user.
"""
from fastapi import APIRouter, Depends, Request

from ..auth import create_access_token, get_current_user_id
from ..config import Settings, get_settings
from ..limiter import limiter
from ..responses import bad_request, field_error, guard, not_found, validation_errors
from ..schemas.auth import Token, UserLogin, UserResponse, is_valid_email
from ..store.users import CredentialStore, get_credential_store

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.get("", response_model=UserResponse)
def load_user(
    user_id: str = Depends(get_current_user_id),
    store: CredentialStore = Depends(get_credential_store),
):
    """Get the authenticated user."""
    with guard("Load user", user_id=user_id):
        user = store.get(user_id)
    if not user:
        not_found("User not found")
    return user


@router.post("", response_model=Token)
@limiter.limit(lambda: get_settings().login_rate_limit)
def login(
    request: Request,
    credentials: UserLogin,
    store: CredentialStore = Depends(get_credential_store),
    settings: Settings = Depends(get_settings),
):
    """Exchange email and password for a bearer token."""
    errors = []
    if not is_valid_email(credentials.email):
        errors.append(field_error("Please include a valid email", "email", "body"))
    if not credentials.password:
        errors.append(field_error("Password is required", "password", "body"))
    if errors:
        validation_errors(errors)

    with guard("Login"):
        user = store.authenticate(credentials.email, credentials.password)
    if not user:
        bad_request("Invalid Credentials")

    return Token(token=create_access_token(user.id, settings))
