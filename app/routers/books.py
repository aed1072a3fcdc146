"""
Books Router

CRUD endpoints for books.

Endpoints:
- GET /books/search - Title/author search (max 10 results)
- GET /books - List with filters, projection, sort and pagination
- GET /books/{book_id} - One book with its reviews
- POST /books - Create a book (authenticated)
- PUT /books/{book_id} - Update a book (owner only)
- DELETE /books/{book_id} - Delete a book and its reviews (owner only)
"""

import math
from typing import Any

from fastapi import APIRouter, Query, Request, status

from app.config import get_settings
from app.dependencies import BookQueryParams, CurrentUser, DbSession, Pagination
from app.models.book import Book
from app.schemas import (
    BookCreate,
    BookDataResponse,
    BookDetailDataResponse,
    BookDetailResponse,
    BookListResponse,
    BookResponse,
    BookSearchResponse,
    BookUpdate,
    EmptyDataResponse,
    ErrorResponse,
)
from app.services import books as book_service
from app.services.rate_limiter import limiter

settings = get_settings()

router = APIRouter(
    prefix="/books",
    tags=["Books"],
    responses={
        404: {"model": ErrorResponse, "description": "Book not found"},
    },
)


def serialize_book(book: Book, fields: set[str] | None = None) -> dict[str, Any]:
    """Dump a book to JSON-ready data, optionally projected to `fields`."""
    return BookResponse.model_validate(book).model_dump(mode="json", include=fields)


# =============================================================================
# Search (must come before /books/{book_id} for route matching)
# =============================================================================
@router.get(
    "/search",
    response_model=BookSearchResponse,
    summary="Search books",
    description="Case-insensitive substring search on title or author. Returns at most 10 books.",
    responses={400: {"model": ErrorResponse, "description": "Missing search query"}},
)
@limiter.limit(settings.rate_limit_search)
def search_books(
    request: Request,
    db: DbSession,
    q: str | None = Query(
        default=None,
        max_length=100,
        description="Text to look for in title or author",
        examples=["dune", "herbert"],
    ),
) -> BookSearchResponse:
    """
    Search books by title or author.

    Examples:
        GET /api/v1/books/search?q=dune
        GET /api/v1/books/search?q=HERBERT
    """
    books = book_service.search_books(db, q)
    return BookSearchResponse(
        count=len(books),
        data=[BookResponse.model_validate(book) for book in books],
    )


# =============================================================================
# CRUD Endpoints
# =============================================================================
@router.get(
    "",
    response_model=BookListResponse,
    summary="List books",
    description="""
    Paginated list of books.

    **Filtering:** any Book field as a query parameter, with an optional
    operator suffix: `genre=Fantasy`, `published_year[gte]=1990`,
    `average_rating[gt]=4`, `genre[in]=Fantasy,Mystery`.

    **Projection:** `select=title,author` (id is always included).

    **Sorting:** `sort=-average_rating,title` (`-` for descending,
    newest first by default).

    **Pagination:** `page` (default 1), `limit` (default 10, max 100).
    """,
    responses={400: {"model": ErrorResponse, "description": "Malformed filter"}},
)
@limiter.limit(settings.rate_limit_default)
def list_books(
    request: Request,
    db: DbSession,
    pagination: Pagination,
    query: BookQueryParams,
) -> BookListResponse:
    """
    List books with filtering, projection, sorting and pagination.

    Returns:
        One page of books plus count/total/pages metadata
    """
    books, total = book_service.list_books(
        db, query, skip=pagination.skip, limit=pagination.limit
    )
    data = [serialize_book(book, query.fields) for book in books]

    return BookListResponse(
        count=len(data),
        total=total,
        page=pagination.page,
        limit=pagination.limit,
        pages=math.ceil(total / pagination.limit) if total > 0 else 0,
        data=data,
    )


@router.get(
    "/{book_id}",
    response_model=BookDetailDataResponse,
    summary="Get a book by ID",
    description="Retrieve a book with its reviews populated inline.",
)
@limiter.limit(settings.rate_limit_default)
def get_book(
    request: Request,
    book_id: int,
    db: DbSession,
) -> BookDetailDataResponse:
    """
    Get a single book by its ID, including its reviews.

    Raises:
        NotFoundError: 404 if book not found
    """
    book = book_service.get_book_or_404(db, book_id, with_reviews=True)
    return BookDetailDataResponse(data=BookDetailResponse.model_validate(book))


@router.post(
    "",
    response_model=BookDataResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new book",
    description="Create a book owned by the authenticated user.",
    responses={401: {"model": ErrorResponse, "description": "Not authenticated"}},
)
@limiter.limit(settings.rate_limit_write)
def create_book(
    request: Request,
    book_data: BookCreate,
    db: DbSession,
    current_user: CurrentUser,
) -> BookDataResponse:
    """
    Create a new book.

    The authenticated user becomes the owner; only they can update or
    delete it.
    """
    book = book_service.create_book(db, book_data, current_user)
    return BookDataResponse(data=BookResponse.model_validate(book))


@router.put(
    "/{book_id}",
    response_model=BookDataResponse,
    summary="Update a book",
    description="Partially update a book. Only the owner can update it.",
    responses={401: {"model": ErrorResponse, "description": "Not authenticated or not the owner"}},
)
@limiter.limit(settings.rate_limit_write)
def update_book(
    request: Request,
    book_id: int,
    book_data: BookUpdate,
    db: DbSession,
    current_user: CurrentUser,
) -> BookDataResponse:
    """
    Update an existing book.

    Uses PUT with PATCH-like semantics: only provided fields change.

    Raises:
        NotFoundError: 404 if book not found
        UnauthorizedError: 401 if the user is not the owner
    """
    book = book_service.update_book(db, book_id, book_data, current_user)
    return BookDataResponse(data=BookResponse.model_validate(book))


@router.delete(
    "/{book_id}",
    response_model=EmptyDataResponse,
    summary="Delete a book",
    description="Delete a book and its reviews. Only the owner can delete it.",
    responses={401: {"model": ErrorResponse, "description": "Not authenticated or not the owner"}},
)
@limiter.limit(settings.rate_limit_write)
def delete_book(
    request: Request,
    book_id: int,
    db: DbSession,
    current_user: CurrentUser,
) -> EmptyDataResponse:
    """
    Delete a book.

    Raises:
        NotFoundError: 404 if book not found
        UnauthorizedError: 401 if the user is not the owner
    """
    book_service.delete_book(db, book_id, current_user)
    return EmptyDataResponse()
