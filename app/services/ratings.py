"""
Ratings Service

Maintains the denormalized Book.average_rating field.

The review service calls recalculate_book_rating() explicitly after every
review create and delete (and after an update that changes the rating).
Nothing is wired into model events, so the models stay free of side
effects.

The write-back is best effort: it runs after the review change has been
committed, and a database failure here is logged and rolled back instead
of failing the request. A failed recalculation leaves a stale average
until the next review change or a run of
`scripts/seed_data.py --recalculate-only`.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.book import Book
from app.models.review import Review

logger = logging.getLogger(__name__)


def calculate_average_rating(db: Session, book_id: int) -> float:
    """
    Arithmetic mean of the ratings of a book's reviews, 0 if it has none.
    """
    stmt = select(func.avg(Review.rating)).where(Review.book_id == book_id)
    avg_rating = db.execute(stmt).scalar()
    return float(avg_rating) if avg_rating is not None else 0.0


def recalculate_book_rating(db: Session, book_id: int) -> float | None:
    """
    Recalculate and store a book's average rating.

    Args:
        db: Database session
        book_id: ID of the book to update

    Returns:
        The stored average, or None if the book no longer exists or the
        write-back failed

    Note:
        This function commits the changes to the database.
    """
    try:
        average = calculate_average_rating(db, book_id)

        book = db.get(Book, book_id)
        if book is None:
            return None

        book.average_rating = average
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to update average rating for book {book_id}: {e}")
        return None

    logger.debug(f"Book {book_id} average rating is now {average}")
    return average


def recalculate_all_book_ratings(db: Session) -> int:
    """
    Recalculate the average rating of every book.

    Useful for repairing averages left stale by a failed write-back.

    Returns:
        Number of books processed
    """
    book_ids = db.execute(select(Book.id)).scalars().all()

    for book_id in book_ids:
        recalculate_book_rating(db, book_id)

    return len(book_ids)
