"""
FastAPI Dependencies Module

Dependencies are reusable components injected into route handlers.
FastAPI's Depends() function manages their lifecycle.

Common Dependency Patterns used here:
- Database sessions (per-request)
- Authentication (resolve the bearer token to a user)
- Pagination parameters
- Book list query parsing (filters, projection, sort)
"""

from typing import Annotated

from fastapi import Depends, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.services.authorization import resolve_user_from_token
from app.services.filters import BookQuery, parse_book_query

# =============================================================================
# Type Aliases with Annotated
# =============================================================================
# Instead of writing:
#   def get_books(db: Session = Depends(get_db)):
#
# You can write:
#   def get_books(db: DbSession):

DbSession = Annotated[Session, Depends(get_db)]


# =============================================================================
# Pagination Parameters
# =============================================================================
class PaginationParams:
    """
    Offset pagination parameters for list endpoints.

    - page: Which page to return (1-indexed for user-friendliness)
    - limit: How many items per page
    - skip: Calculated offset for database query

    Usage in route:
        @router.get("/books")
        def get_books(db: DbSession, pagination: Pagination):
            stmt = select(Book).offset(pagination.skip).limit(pagination.limit)
    """

    def __init__(
        self,
        page: int = Query(
            default=1,
            ge=1,
            description="Page number (1-indexed)",
            examples=[1, 2, 3],
        ),
        limit: int = Query(
            default=10,
            ge=1,
            le=100,
            description="Number of items per page (max 100)",
            examples=[10, 25, 50],
        ),
    ) -> None:
        self.page = page
        self.limit = limit

    @property
    def skip(self) -> int:
        """
        Number of records to skip.

        Page 1 → skip 0 items
        Page 2 → skip `limit` items
        """
        return (self.page - 1) * self.limit


Pagination = Annotated[PaginationParams, Depends()]


# =============================================================================
# Book List Query
# =============================================================================
def get_book_query(request: Request) -> BookQuery:
    """
    Parse filters, projection and sort from the raw query string.

    The filter parameters are open-ended (any Book field with an optional
    [op] suffix), so they are read from request.query_params rather than
    declared one by one. Unknown fields or operators raise BadRequestError.
    """
    return parse_book_query(request.query_params.multi_items())


BookQueryParams = Annotated[BookQuery, Depends(get_book_query)]


# =============================================================================
# JWT Authentication
# =============================================================================
# HTTPBearer extracts the token from "Authorization: Bearer <token>".
# auto_error=False lets the authorization service produce the 401 itself,
# in the same error format as every other failure.

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    db: DbSession,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> User:
    """
    Extract and validate the current user from the bearer token.

    Raises:
        UnauthorizedError: 401 if the token is missing/invalid or the
            user no longer exists
    """
    token = credentials.credentials if credentials else None
    return resolve_user_from_token(db, token)


CurrentUser = Annotated[User, Depends(get_current_user)]
