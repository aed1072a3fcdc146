"""
Book Service

Business logic for books, kept separate from the HTTP layer:
- list with filters, sort and pagination
- fetch one with its reviews
- create / update / delete with ownership checks
- title/author search

Functions raise the domain errors from app.exceptions; the routers only
translate arguments and wrap results in response envelopes.
"""

import logging

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, selectinload

from app.exceptions import BadRequestError, NotFoundError
from app.models.book import Book
from app.models.review import Review
from app.models.user import User
from app.schemas.book import BookCreate, BookUpdate
from app.services.authorization import ensure_owner
from app.services.filters import BookQuery

logger = logging.getLogger(__name__)

SEARCH_RESULT_LIMIT = 10


def get_book_or_404(db: Session, book_id: int, with_reviews: bool = False) -> Book:
    """
    Get a book by ID or raise NotFoundError.

    With with_reviews=True the reviews and their authors are loaded
    eagerly, preventing N+1 queries when the book is serialized.
    """
    stmt = select(Book).where(Book.id == book_id)
    if with_reviews:
        stmt = stmt.options(selectinload(Book.reviews).selectinload(Review.user))
    book = db.execute(stmt).scalar_one_or_none()

    if book is None:
        raise NotFoundError(f"Book not found with id {book_id}")
    return book


def list_books(
    db: Session,
    query: BookQuery,
    skip: int,
    limit: int,
) -> tuple[list[Book], int]:
    """
    Return one page of books matching the query, and the total match count.

    The total counts every book that matches the filters, not just the
    returned page.
    """
    base_stmt = select(Book).where(*query.filters)

    count_stmt = select(func.count()).select_from(base_stmt.subquery())
    total = db.execute(count_stmt).scalar() or 0

    stmt = base_stmt.order_by(*query.order_by).offset(skip).limit(limit)
    books = db.execute(stmt).scalars().all()

    return list(books), total


def search_books(db: Session, q: str | None) -> list[Book]:
    """
    Case-insensitive substring search on title or author, max 10 results.

    Raises:
        BadRequestError: if q is missing or blank
    """
    if q is None or not q.strip():
        raise BadRequestError("Please provide a search query")

    term = q.strip().lower()
    stmt = (
        select(Book)
        .where(
            or_(
                func.lower(Book.title).contains(term, autoescape=True),
                func.lower(Book.author).contains(term, autoescape=True),
            )
        )
        .order_by(Book.created_at.desc(), Book.id.desc())
        .limit(SEARCH_RESULT_LIMIT)
    )
    return list(db.execute(stmt).scalars().all())


def create_book(db: Session, data: BookCreate, owner: User) -> Book:
    """Create a book owned by `owner`."""
    book = Book(
        title=data.title,
        author=data.author,
        genre=data.genre.value,
        description=data.description,
        published_year=data.published_year,
        user_id=owner.id,
    )

    db.add(book)
    db.commit()
    db.refresh(book)

    logger.info(f"User {owner.id} created book {book.id}")
    return book


def update_book(db: Session, book_id: int, data: BookUpdate, user: User) -> Book:
    """
    Apply a partial update to a book the user owns.

    Raises:
        NotFoundError: book doesn't exist
        UnauthorizedError: user is not the owner
    """
    book = get_book_or_404(db, book_id)
    ensure_owner(book.user_id, user, "update", "book")

    update_data = data.model_dump(exclude_unset=True)
    if "genre" in update_data:
        update_data["genre"] = update_data["genre"].value

    for field, value in update_data.items():
        setattr(book, field, value)

    db.commit()
    db.refresh(book)

    logger.info(f"User {user.id} updated book {book.id}: {sorted(update_data)}")
    return book


def delete_book(db: Session, book_id: int, user: User) -> None:
    """
    Delete a book the user owns, together with its reviews.

    Raises:
        NotFoundError: book doesn't exist
        UnauthorizedError: user is not the owner
    """
    book = get_book_or_404(db, book_id)
    ensure_owner(book.user_id, user, "delete", "book")

    db.delete(book)
    db.commit()

    logger.info(f"User {user.id} deleted book {book_id}")
