"""
Reviews Router

CRUD endpoints for book reviews.

Endpoints:
- GET /books/{book_id}/reviews - List reviews for a book
- POST /books/{book_id}/reviews - Create a review (authenticated)
- GET /reviews/{review_id} - Get a specific review
- PUT /reviews/{review_id} - Update a review (author only)
- DELETE /reviews/{review_id} - Delete a review (author only)

Business Rules:
- One review per user per book (checked, then enforced by database constraint)
- Only the review author can update or delete their review
- Creating, deleting or re-rating a review updates the book's average rating
"""

from fastapi import APIRouter, Request, status

from app.config import get_settings
from app.dependencies import CurrentUser, DbSession
from app.schemas import (
    EmptyDataResponse,
    ErrorResponse,
    ReviewCreate,
    ReviewDataResponse,
    ReviewListResponse,
    ReviewResponse,
    ReviewUpdate,
)
from app.services import reviews as review_service
from app.services.rate_limiter import limiter

settings = get_settings()

router = APIRouter(
    tags=["Reviews"],
    responses={
        404: {"model": ErrorResponse, "description": "Review or book not found"},
    },
)


# =============================================================================
# Book Review Endpoints
# =============================================================================
@router.get(
    "/books/{book_id}/reviews",
    response_model=ReviewListResponse,
    summary="List reviews for a book",
    description="All reviews of a book, with each author's username.",
)
@limiter.limit(settings.rate_limit_default)
def list_book_reviews(
    request: Request,
    book_id: int,
    db: DbSession,
) -> ReviewListResponse:
    reviews = review_service.list_book_reviews(db, book_id)
    return ReviewListResponse(
        count=len(reviews),
        data=[ReviewResponse.model_validate(r) for r in reviews],
    )


@router.post(
    "/books/{book_id}/reviews",
    response_model=ReviewDataResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a review",
    description="Review a book. Requires authentication. One review per book per user.",
    responses={
        400: {"model": ErrorResponse, "description": "Book already reviewed"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
@limiter.limit(settings.rate_limit_write)
def create_review(
    request: Request,
    book_id: int,
    review_data: ReviewCreate,
    db: DbSession,
    current_user: CurrentUser,
) -> ReviewDataResponse:
    """
    Create a new review for a book.

    Raises:
        NotFoundError: 404 if book not found
        BadRequestError: 400 if user already reviewed this book
    """
    review = review_service.create_review(db, book_id, review_data, current_user)
    return ReviewDataResponse(data=ReviewResponse.model_validate(review))


# =============================================================================
# Individual Review Endpoints
# =============================================================================
@router.get(
    "/reviews/{review_id}",
    response_model=ReviewDataResponse,
    summary="Get a review by ID",
)
@limiter.limit(settings.rate_limit_default)
def get_review(
    request: Request,
    review_id: int,
    db: DbSession,
) -> ReviewDataResponse:
    review = review_service.get_review_or_404(db, review_id)
    return ReviewDataResponse(data=ReviewResponse.model_validate(review))


@router.put(
    "/reviews/{review_id}",
    response_model=ReviewDataResponse,
    summary="Update a review",
    description="Update your own review. Only the review author can update.",
    responses={401: {"model": ErrorResponse, "description": "Not authenticated or not the author"}},
)
@limiter.limit(settings.rate_limit_write)
def update_review(
    request: Request,
    review_id: int,
    review_data: ReviewUpdate,
    db: DbSession,
    current_user: CurrentUser,
) -> ReviewDataResponse:
    """
    Update an existing review.

    Raises:
        NotFoundError: 404 if review not found
        UnauthorizedError: 401 if user is not the review author
    """
    review = review_service.update_review(db, review_id, review_data, current_user)
    return ReviewDataResponse(data=ReviewResponse.model_validate(review))


@router.delete(
    "/reviews/{review_id}",
    response_model=EmptyDataResponse,
    summary="Delete a review",
    description="Delete your own review. Only the review author can delete.",
    responses={401: {"model": ErrorResponse, "description": "Not authenticated or not the author"}},
)
@limiter.limit(settings.rate_limit_write)
def delete_review(
    request: Request,
    review_id: int,
    db: DbSession,
    current_user: CurrentUser,
) -> EmptyDataResponse:
    """
    Delete a review.

    Raises:
        NotFoundError: 404 if review not found
        UnauthorizedError: 401 if user is not the review author
    """
    review_service.delete_review(db, review_id, current_user)
    return EmptyDataResponse()
