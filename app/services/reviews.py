"""
Review Service

Business logic for reviews:
- list reviews of a book (authors expanded)
- fetch one
- create (one per user per book), update, delete with ownership checks

Every change that can move a book's average rating is followed by an
explicit call to ratings.recalculate_book_rating().
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from app.exceptions import BadRequestError, NotFoundError
from app.models.review import Review
from app.models.user import User
from app.schemas.review import ReviewCreate, ReviewUpdate
from app.services.authorization import ensure_owner
from app.services.books import get_book_or_404
from app.services.ratings import recalculate_book_rating

logger = logging.getLogger(__name__)

ALREADY_REVIEWED = "You have already reviewed this book"


def get_review_or_404(db: Session, review_id: int) -> Review:
    """Get a review by ID with its author loaded, or raise NotFoundError."""
    stmt = (
        select(Review)
        .options(selectinload(Review.user))
        .where(Review.id == review_id)
    )
    review = db.execute(stmt).scalar_one_or_none()

    if review is None:
        raise NotFoundError(f"Review not found with id {review_id}")
    return review


def list_book_reviews(db: Session, book_id: int) -> list[Review]:
    """All reviews referencing the book, newest first. Not paginated."""
    stmt = (
        select(Review)
        .options(selectinload(Review.user))
        .where(Review.book_id == book_id)
        .order_by(Review.created_at.desc(), Review.id.desc())
    )
    return list(db.execute(stmt).scalars().all())


def create_review(db: Session, book_id: int, data: ReviewCreate, user: User) -> Review:
    """
    Create the user's review of a book and refresh the book's rating.

    Raises:
        NotFoundError: book doesn't exist
        BadRequestError: user already reviewed this book
    """
    get_book_or_404(db, book_id)

    existing_stmt = select(Review.id).where(
        Review.book_id == book_id,
        Review.user_id == user.id,
    )
    if db.execute(existing_stmt).first() is not None:
        raise BadRequestError(ALREADY_REVIEWED)

    review = Review(
        book_id=book_id,
        user_id=user.id,
        title=data.title,
        text=data.text,
        rating=data.rating,
    )
    db.add(review)

    try:
        db.commit()
    except IntegrityError:
        # A concurrent request for the same (book, user) pair won the race
        db.rollback()
        raise BadRequestError(ALREADY_REVIEWED)

    logger.info(f"User {user.id} reviewed book {book_id} (review {review.id})")

    recalculate_book_rating(db, book_id)
    return get_review_or_404(db, review.id)


def update_review(db: Session, review_id: int, data: ReviewUpdate, user: User) -> Review:
    """
    Apply a partial update to a review the user wrote.

    The book's rating is recalculated when the rating value changes.

    Raises:
        NotFoundError: review doesn't exist
        UnauthorizedError: user is not the author
    """
    review = get_review_or_404(db, review_id)
    ensure_owner(review.user_id, user, "update", "review")

    update_data = data.model_dump(exclude_unset=True)
    rating_changed = "rating" in update_data and update_data["rating"] != review.rating

    for field, value in update_data.items():
        setattr(review, field, value)

    db.commit()

    if rating_changed:
        recalculate_book_rating(db, review.book_id)

    logger.info(f"User {user.id} updated review {review_id}: {sorted(update_data)}")
    return get_review_or_404(db, review_id)


def delete_review(db: Session, review_id: int, user: User) -> None:
    """
    Delete a review the user wrote and refresh the book's rating.

    Raises:
        NotFoundError: review doesn't exist
        UnauthorizedError: user is not the author
    """
    review = get_review_or_404(db, review_id)
    ensure_owner(review.user_id, user, "delete", "review")

    book_id = review.book_id
    db.delete(review)
    db.commit()

    logger.info(f"User {user.id} deleted review {review_id}")

    recalculate_book_rating(db, book_id)
