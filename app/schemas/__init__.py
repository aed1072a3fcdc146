"""
Pydantic Schemas Package

This package contains Pydantic models for request/response validation.

WHY Separate Schemas from SQLAlchemy Models?
============================================
1. Security: Control exactly what data is exposed in API responses
2. Validation: Different rules for create vs update vs response
3. Decoupling: Database schema can evolve independently of API
4. Documentation: Schemas generate OpenAPI documentation

Schema Naming Convention:
- XxxCreate: Fields required when creating a new record
- XxxUpdate: Fields allowed when updating (all optional, never null)
- XxxResponse: Fields returned in API responses
- XxxDataResponse: The {success, data} envelope around a response
"""

from app.schemas.book import (
    BookCreate,
    BookDataResponse,
    BookDetailDataResponse,
    BookDetailResponse,
    BookListResponse,
    BookResponse,
    BookSearchResponse,
    BookUpdate,
)
from app.schemas.common import EmptyDataResponse, ErrorResponse
from app.schemas.review import (
    ReviewCreate,
    ReviewDataResponse,
    ReviewListResponse,
    ReviewResponse,
    ReviewUpdate,
)
from app.schemas.user import (
    LoginRequest,
    ReviewAuthor,
    TokenResponse,
    UserCreate,
    UserDataResponse,
    UserResponse,
)

__all__ = [
    # Book schemas
    "BookCreate",
    "BookUpdate",
    "BookResponse",
    "BookDetailResponse",
    "BookDataResponse",
    "BookDetailDataResponse",
    "BookListResponse",
    "BookSearchResponse",
    # Review schemas
    "ReviewCreate",
    "ReviewUpdate",
    "ReviewResponse",
    "ReviewDataResponse",
    "ReviewListResponse",
    # User/Auth schemas
    "UserCreate",
    "UserResponse",
    "UserDataResponse",
    "ReviewAuthor",
    "LoginRequest",
    "TokenResponse",
    # Envelopes
    "EmptyDataResponse",
    "ErrorResponse",
]
