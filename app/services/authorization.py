"""
Authorization Service

Turns a bearer token into a User and enforces resource ownership.

Every request is authorized independently: the token carries the user id
in its "sub" claim and the user is looked up again on each call, so a
deleted user's tokens stop working immediately.
"""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.exceptions import UnauthorizedError
from app.models.user import User
from app.services.security import verify_token_type

logger = logging.getLogger(__name__)

NOT_AUTHENTICATED = "Not authorized to access this route"


def resolve_user_from_token(db: Session, token: str | None) -> User:
    """
    Resolve a bearer token to the user it was issued for.

    Raises:
        UnauthorizedError: token missing, malformed, expired, signed with
            another key, of the wrong type, or its user no longer exists
    """
    if not token:
        raise UnauthorizedError(NOT_AUTHENTICATED)

    payload = verify_token_type(token)
    if payload is None:
        raise UnauthorizedError(NOT_AUTHENTICATED)

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        logger.warning("Token without a usable subject claim")
        raise UnauthorizedError(NOT_AUTHENTICATED)

    user = db.execute(select(User).where(User.id == user_id)).scalar_one_or_none()
    if user is None:
        logger.warning(f"Token subject {user_id} no longer exists")
        raise UnauthorizedError(NOT_AUTHENTICATED)

    return user


def ensure_owner(owner_id: int, user: User, action: str, resource: str) -> None:
    """
    Raise unless `user` owns the resource.

    Args:
        owner_id: user_id stored on the book or review
        user: The authenticated user
        action: Verb used in the error message ("update", "delete")
        resource: Noun used in the error message ("book", "review")

    Raises:
        UnauthorizedError: the user is not the owner
    """
    if owner_id != user.id:
        logger.warning(
            f"User {user.id} tried to {action} {resource} owned by user {owner_id}"
        )
        raise UnauthorizedError(f"Not authorized to {action} this {resource}")
