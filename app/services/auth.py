"""
Authentication Service

Handles signup and login.

Security Features:
=================
1. Passwords are hashed with bcrypt before storage; plaintext is never
   persisted or logged
2. Login failures return the same generic message whether the email is
   unknown or the password is wrong
3. The password hash is a deferred column, loaded only here
"""

import logging

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, undefer

from app.exceptions import BadRequestError, UnauthorizedError, ValidationError
from app.models.user import User
from app.schemas.user import UserCreate
from app.services.security import create_access_token, hash_password

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


def issue_token(user: User) -> str:
    """Sign an access token whose subject is the user's id."""
    return create_access_token({"sub": str(user.id)})


def register_user(db: Session, data: UserCreate) -> User:
    """
    Create a user with a hashed password.

    Raises:
        ValidationError: email or username already taken
    """
    stmt = select(User).where(
        or_(User.email == data.email, User.username == data.username)
    )
    existing = db.execute(stmt).scalars().first()
    if existing is not None:
        field = "email" if existing.email == data.email else "username"
        raise ValidationError(f"Duplicate field value entered: {field} already exists")

    user = User(
        username=data.username,
        email=data.email,
        hashed_password=hash_password(data.password),
    )
    db.add(user)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValidationError("Duplicate field value entered: email or username already exists")

    db.refresh(user)
    logger.info(f"New user registered: {user.email}")
    return user


def authenticate_user(db: Session, email: str | None, password: str | None) -> User:
    """
    Check an email/password pair.

    Raises:
        BadRequestError: email or password missing
        UnauthorizedError: unknown email or wrong password (same message)
    """
    if not email or not password:
        raise BadRequestError("Please provide email and password")

    email = email.strip().lower()
    stmt = (
        select(User)
        .options(undefer(User.hashed_password))
        .where(User.email == email)
    )
    user = db.execute(stmt).scalar_one_or_none()

    if user is None:
        logger.warning(f"Login failed: user not found for {email}")
        raise UnauthorizedError(INVALID_CREDENTIALS)

    if not user.verify_password(password):
        logger.warning(f"Login failed: incorrect password for {email}")
        raise UnauthorizedError(INVALID_CREDENTIALS)

    logger.info(f"User logged in: {user.email}")
    return user
