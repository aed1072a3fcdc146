"""
Review Pydantic Schemas

Schemas for book reviews with ratings.

Schemas:
- ReviewBase: Shared fields for review operations
- ReviewCreate: Create a new review
- ReviewUpdate: Update an existing review
- ReviewResponse: Full review data with the author expanded

Business Rules:
- Rating must be 1-5 (validated at schema level)
- One review per user per book (checked by the service, enforced by the database)
- Users can only edit/delete their own reviews
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from app.schemas.common import PartialUpdate
from app.schemas.user import ReviewAuthor


def _strip_required(v: str | None, field: str) -> str | None:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError(f"{field} cannot be empty or whitespace")
    return v


class ReviewBase(BaseModel):
    """
    Base schema with shared review fields.

    Contains validation for:
    - Title (required, trimmed, max 100)
    - Text (required)
    - Rating (integer 1-5)
    """

    title: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Review title/headline",
        examples=["A masterpiece!", "Disappointing read"],
    )

    text: str = Field(
        ...,
        min_length=1,
        description="Review text content",
        examples=["This book changed my perspective on..."],
    )

    rating: int = Field(
        ...,
        ge=1,
        le=5,
        description="Rating from 1 to 5 stars",
        examples=[4, 5],
    )

    @field_validator("title", "text")
    @classmethod
    def must_not_be_blank(cls, v: str, info: ValidationInfo) -> str:
        return _strip_required(v, info.field_name.capitalize())


class ReviewCreate(ReviewBase):
    """
    Schema for creating a new review.

    Example request body:
    {
        "title": "Amazing book!",
        "text": "One of the best books I've ever read...",
        "rating": 5
    }
    """

    pass


class ReviewUpdate(PartialUpdate):
    """
    Schema for updating an existing review.

    All fields are optional for PATCH-style updates.
    """

    title: str | None = Field(default=None, min_length=1, max_length=100)
    text: str | None = Field(default=None, min_length=1)
    rating: int | None = Field(default=None, ge=1, le=5)

    @field_validator("title", "text")
    @classmethod
    def must_not_be_blank(cls, v: str | None, info: ValidationInfo) -> str | None:
        return _strip_required(v, info.field_name.capitalize())


class ReviewResponse(ReviewBase):
    """
    Schema for review responses.

    The author's id and username are expanded inline under `user`.
    """

    id: int = Field(..., description="Unique review identifier")
    book_id: int = Field(..., description="ID of the reviewed book")
    user_id: int = Field(..., description="ID of the user who wrote the review")
    created_at: datetime = Field(..., description="When the review was created")
    user: ReviewAuthor | None = Field(default=None, description="Review author")

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "title": "A must-read classic!",
                "text": "This book completely changed my perspective on...",
                "rating": 5,
                "book_id": 42,
                "user_id": 7,
                "created_at": "2024-01-15T10:30:00Z",
                "user": {"id": 7, "username": "booklover"},
            }
        },
    )


class ReviewDataResponse(BaseModel):
    success: bool = True
    data: ReviewResponse


class ReviewListResponse(BaseModel):
    """All reviews of one book (not paginated)."""

    success: bool = True
    count: int = Field(..., ge=0, description="Number of reviews returned")
    data: list[ReviewResponse]
