"""
Authentication Router

Handles user authentication endpoints:
- Signup (username/email/password → JWT)
- Login (email/password → JWT)
- Get current user (from JWT)

Security:
=========
- Passwords are hashed with bcrypt before storage
- Plain text passwords are never logged or stored
- Tokens are sent back as `Authorization: Bearer <token>`
"""

from fastapi import APIRouter, Request

from app.config import get_settings
from app.dependencies import CurrentUser, DbSession
from app.schemas import (
    ErrorResponse,
    LoginRequest,
    TokenResponse,
    UserCreate,
    UserDataResponse,
    UserResponse,
)
from app.services.auth import authenticate_user, issue_token, register_user
from app.services.rate_limiter import limiter

settings = get_settings()

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
    responses={
        400: {"model": ErrorResponse, "description": "Bad request"},
        401: {"model": ErrorResponse, "description": "Unauthorized"},
    },
)


@router.post(
    "/signup",
    response_model=TokenResponse,
    summary="Register a new user",
    description="""
    Create a new user account and receive an access token.

    **Requirements:**
    - `username`: unique, 1-50 characters
    - `email`: unique, valid email address
    - `password`: at least 6 characters
    """,
    responses={422: {"model": ErrorResponse, "description": "Invalid or duplicate fields"}},
)
@limiter.limit(settings.rate_limit_auth)
def signup(
    request: Request,
    user_data: UserCreate,
    db: DbSession,
) -> TokenResponse:
    """
    Register a new user.

    1. Validates the payload (handled by Pydantic)
    2. Rejects duplicate email/username
    3. Hashes the password and stores the user
    4. Returns a signed token for the new user
    """
    user = register_user(db, user_data)
    return TokenResponse(token=issue_token(user))


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Login with email and password",
    description="""
    Authenticate with email and password to receive an access token.

    **Usage:**
    Include the token in the Authorization header:
    ```
    Authorization: Bearer <token>
    ```
    """,
)
@limiter.limit(settings.rate_limit_auth)
def login(
    request: Request,
    db: DbSession,
    credentials: LoginRequest | None = None,
) -> TokenResponse:
    """Authenticate user and return a signed token."""
    # A missing or null body is treated like one without fields
    credentials = credentials or LoginRequest()
    user = authenticate_user(db, credentials.email, credentials.password)
    return TokenResponse(token=issue_token(user))


@router.get(
    "/me",
    response_model=UserDataResponse,
    summary="Get current user",
    description="Return the profile of the user the bearer token was issued for.",
)
def get_me(current_user: CurrentUser) -> UserDataResponse:
    return UserDataResponse(data=UserResponse.model_validate(current_user))
