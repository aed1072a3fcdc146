"""
Book Pydantic Schemas

Handles:
- Field constraints (title/author/description lengths, genre enum)
- Published year range (1000..current year, checked at request time)
- Response envelopes for single books, pages and search results
"""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from app.models.book import Genre
from app.schemas.common import PartialUpdate
from app.schemas.review import ReviewResponse

MIN_PUBLISHED_YEAR = 1000


def _check_published_year(v: int | None) -> int | None:
    if v is not None and v > date.today().year:
        raise ValueError("Published year cannot be in the future")
    return v


def _strip_required(v: str | None, info: ValidationInfo) -> str | None:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError(f"{info.field_name.capitalize()} cannot be empty or whitespace")
    return v


class BookBase(BaseModel):
    """
    Base schema with shared book fields.

    Contains validation for:
    - Title (max 100) and author (max 50), trimmed and non-empty
    - Genre (must be one of the Genre values)
    - Description (max 500)
    - Published year (1000..current year)
    """

    title: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Book title",
        examples=["Dune", "Pride and Prejudice"],
    )

    author: str = Field(
        ...,
        min_length=1,
        max_length=50,
        description="Author name",
        examples=["Frank Herbert"],
    )

    genre: Genre = Field(
        ...,
        description="Book genre",
        examples=["Science Fiction"],
    )

    description: str = Field(
        ...,
        min_length=1,
        max_length=500,
        description="Book description or summary",
        examples=["A desert planet, a noble family and the spice melange."],
    )

    published_year: int = Field(
        ...,
        ge=MIN_PUBLISHED_YEAR,
        description="Year of publication (not in the future)",
        examples=[1965],
    )

    @field_validator("title", "author", "description")
    @classmethod
    def must_not_be_blank(cls, v: str, info: ValidationInfo) -> str:
        return _strip_required(v, info)

    @field_validator("published_year")
    @classmethod
    def year_not_in_future(cls, v: int) -> int:
        return _check_published_year(v)


class BookCreate(BookBase):
    """
    Schema for creating a new book.

    The owner is taken from the access token, never from the body.

    Example request body:
    {
        "title": "Dune",
        "author": "Frank Herbert",
        "genre": "Science Fiction",
        "description": "A desert planet...",
        "published_year": 1965
    }
    """

    pass


class BookUpdate(PartialUpdate):
    """
    Schema for updating an existing book.

    All fields are optional; those that are sent are validated with the
    same rules as on create.
    """

    title: str | None = Field(default=None, min_length=1, max_length=100)
    author: str | None = Field(default=None, min_length=1, max_length=50)
    genre: Genre | None = Field(default=None)
    description: str | None = Field(default=None, min_length=1, max_length=500)
    published_year: int | None = Field(default=None, ge=MIN_PUBLISHED_YEAR)

    @field_validator("title", "author", "description")
    @classmethod
    def must_not_be_blank(cls, v: str | None, info: ValidationInfo) -> str | None:
        return _strip_required(v, info)

    @field_validator("published_year")
    @classmethod
    def year_not_in_future(cls, v: int | None) -> int | None:
        return _check_published_year(v)


class BookResponse(BookBase):
    """
    Schema for book responses.

    Includes the database fields (id, owner, timestamp) and the derived
    average rating.
    """

    id: int = Field(..., description="Unique identifier")
    user_id: int = Field(..., description="ID of the user who created the book")
    average_rating: float = Field(
        default=0,
        description="Mean review rating, 0 if there are no reviews",
    )
    created_at: datetime = Field(..., description="When the book was created")

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "title": "Dune",
                "author": "Frank Herbert",
                "genre": "Science Fiction",
                "description": "A desert planet, a noble family and the spice melange.",
                "published_year": 1965,
                "user_id": 3,
                "average_rating": 4.5,
                "created_at": "2024-01-15T10:30:00Z",
            }
        },
    )


class BookDetailResponse(BookResponse):
    """A single book with its reviews populated inline."""

    reviews: list[ReviewResponse] = Field(default=[], description="Reviews of this book")


# Fields a client may name in ?select= and ?sort=
BOOK_FIELDS = frozenset(BookResponse.model_fields)


class BookDataResponse(BaseModel):
    success: bool = True
    data: BookResponse


class BookDetailDataResponse(BaseModel):
    success: bool = True
    data: BookDetailResponse


class BookListResponse(BaseModel):
    """
    Schema for paginated book list responses.

    - count: number of books on this page
    - total: number of books matching the active filters
    - pages: total number of pages for the current limit

    Items are plain objects because ?select= can project them down to a
    subset of the BookResponse fields.
    """

    success: bool = True
    count: int = Field(..., ge=0, description="Number of books on this page")
    total: int = Field(..., ge=0, description="Books matching the filters")
    page: int = Field(..., ge=1, description="Current page number")
    limit: int = Field(..., ge=1, description="Page size")
    pages: int = Field(..., ge=0, description="Total number of pages")
    data: list[dict[str, Any]] = Field(..., description="Books on this page")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "count": 10,
                "total": 42,
                "page": 1,
                "limit": 10,
                "pages": 5,
                "data": [],
            }
        },
    )


class BookSearchResponse(BaseModel):
    """Search results (at most 10, not paginated)."""

    success: bool = True
    count: int = Field(..., ge=0)
    data: list[BookResponse]
