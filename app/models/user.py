"""
User Model

Represents a registered user who can own books and write reviews.

SQLAlchemy 2.0 Features Used:
- mapped_column(): New way to define columns with full type support
- Mapped[]: Type hint wrapper for SQLAlchemy columns
- relationship(): Define relationships between models
- deferred=True: Column left out of default SELECTs (password hash)
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base
from app.services.security import verify_password

if TYPE_CHECKING:
    from app.models.book import Book
    from app.models.review import Review


class User(Base):
    """
    User model representing registered users in the system.

    Table: users

    The password hash is a deferred column: ordinary queries never load it,
    and the login flow requests it explicitly with undefer().

    Relationships:
    - books: One-to-Many (books this user created)
    - reviews: One-to-Many (reviews this user wrote)

    Example:
        user = User(
            email="john@example.com",
            username="johndoe",
            hashed_password=hash_password("secret123"),
        )
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
        comment="User's email address (used for login)"
    )

    username: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        index=True,
        nullable=False,
        comment="Unique username shown on reviews"
    )

    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        deferred=True,
        comment="Bcrypt hashed password"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
        comment="When the user registered"
    )

    # -------------------------------------------------------------------------
    # Relationships
    # -------------------------------------------------------------------------
    books: Mapped[list["Book"]] = relationship(
        "Book",
        back_populates="owner",
        cascade="all, delete-orphan",
    )

    reviews: Mapped[list["Review"]] = relationship(
        "Review",
        back_populates="user",
        cascade="all, delete-orphan",
    )

    def verify_password(self, plain_password: str) -> bool:
        """
        Check a plaintext password against the stored hash.

        Accessing hashed_password loads it on demand if the user was
        fetched without undefer().
        """
        return verify_password(plain_password, self.hashed_password)

    def __repr__(self) -> str:
        return f"User(id={self.id}, email='{self.email}', username='{self.username}')"
