"""
Book Model

The central model of the Book Reviews API.

Each book belongs to the user who created it and carries a denormalized
average_rating that the ratings service keeps in sync with its reviews.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base

if TYPE_CHECKING:
    from app.models.review import Review
    from app.models.user import User


class Genre(str, Enum):
    """Fixed set of genres a book can be filed under."""

    FICTION = "Fiction"
    NON_FICTION = "Non-Fiction"
    SCIENCE_FICTION = "Science Fiction"
    FANTASY = "Fantasy"
    MYSTERY = "Mystery"
    THRILLER = "Thriller"
    ROMANCE = "Romance"
    BIOGRAPHY = "Biography"
    HISTORY = "History"
    SELF_HELP = "Self-Help"
    OTHER = "Other"


class Book(Base):
    """
    Book model representing books in the library.

    Table: books

    Fields:
    - title: Book title (max 100 chars)
    - author: Author name (max 50 chars)
    - genre: One of the Genre values
    - description: Summary (max 500 chars)
    - published_year: Year of publication (1000..current year)
    - user_id: Owner (the user who created the book)
    - average_rating: Mean of review ratings, 0 when there are none

    Relationships:
    - owner: Many-to-One with User
    - reviews: One-to-Many with Review (deleted with the book)

    Example:
        book = Book(
            title="Dune",
            author="Frank Herbert",
            genre=Genre.SCIENCE_FICTION.value,
            description="Desert planet, spice, politics.",
            published_year=1965,
            user_id=user.id,
        )
    """

    __tablename__ = "books"

    id: Mapped[int] = mapped_column(primary_key=True)

    title: Mapped[str] = mapped_column(
        String(100),
        index=True,
        nullable=False,
        comment="Book title"
    )

    author: Mapped[str] = mapped_column(
        String(50),
        index=True,
        nullable=False,
        comment="Author name"
    )

    # Stored as the enum's value so query-string filters compare plain strings
    genre: Mapped[str] = mapped_column(
        String(30),
        index=True,
        nullable=False,
        comment="Genre (see Genre enum)"
    )

    description: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
        comment="Book description or summary"
    )

    published_year: Mapped[int] = mapped_column(
        Integer,
        index=True,
        nullable=False,
        comment="Year of publication"
    )

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Owner of the book"
    )

    average_rating: Mapped[float] = mapped_column(
        Float,
        default=0,
        server_default="0",
        nullable=False,
        comment="Mean review rating, 0 if no reviews"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        index=True,
        nullable=False,
    )

    # -------------------------------------------------------------------------
    # Relationships
    # -------------------------------------------------------------------------
    owner: Mapped["User"] = relationship("User", back_populates="books")

    reviews: Mapped[list["Review"]] = relationship(
        "Review",
        back_populates="book",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        CheckConstraint("published_year >= 1000", name="ck_book_published_year_min"),
    )

    def __repr__(self) -> str:
        return f"Book(id={self.id}, title='{self.title}', author='{self.author}')"
