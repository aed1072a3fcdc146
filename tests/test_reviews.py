"""
Tests for Reviews

Tests the review system:
- List reviews for a book
- Create a review (authenticated, one per user per book)
- Get a single review
- Update a review (author only)
- Delete a review (author only)

sample_review is written by second_user about sample_book, which is owned
by sample_user.
"""

from collections.abc import Generator

import pytest
from fastapi import status
from fastapi.testclient import TestClient
from sqlalchemy import false, func, select
from sqlalchemy.orm import Session

from app.exceptions import BadRequestError
from app.models import Book, Genre
from app.models.review import Review
from app.models.user import User
from app.schemas.review import ReviewCreate
from app.services.reviews import create_review
from app.services.security import create_access_token, hash_password


# =============================================================================
# Helper Functions
# =============================================================================


def get_auth_header(user: User) -> dict:
    """Create authorization header for a user."""
    token = create_access_token({"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


def review_payload(**overrides) -> dict:
    payload = {
        "title": "Excellent!",
        "text": "A masterpiece of world building.",
        "rating": 5,
    }
    payload.update(overrides)
    return payload


# =============================================================================
# List Reviews for Book
# =============================================================================


class TestListBookReviews:
    """Tests for GET /api/v1/books/{book_id}/reviews"""

    def test_list_reviews_empty(self, client: TestClient, sample_book: Book):
        """Test listing reviews for a book with no reviews."""
        response = client.get(f"/api/v1/books/{sample_book.id}/reviews")

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"success": True, "count": 0, "data": []}

    def test_list_reviews_with_data(
        self, client: TestClient, sample_review: Review
    ):
        """Each review carries its author's id and username."""
        response = client.get(f"/api/v1/books/{sample_review.book_id}/reviews")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["count"] == 1

        review = data["data"][0]
        assert review["rating"] == 4
        assert review["title"] == "Great book!"
        assert review["user"] == {
            "id": sample_review.user_id,
            "username": "seconduser",
        }

    def test_list_reviews_only_for_that_book(
        self,
        client: TestClient,
        db_session: Session,
        sample_review: Review,
        sample_user: User,
    ):
        other_book = Book(
            title="Other",
            author="Someone",
            genre="Other",
            description="Another book.",
            published_year=2001,
            user_id=sample_user.id,
        )
        db_session.add(other_book)
        db_session.commit()

        response = client.get(f"/api/v1/books/{other_book.id}/reviews")

        assert response.json()["count"] == 0

    def test_list_reviews_unknown_book(self, client: TestClient):
        """An unknown book simply has no reviews."""
        response = client.get("/api/v1/books/99999/reviews")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["count"] == 0


# =============================================================================
# Create Review
# =============================================================================


class TestCreateReview:
    """Tests for POST /api/v1/books/{book_id}/reviews"""

    def test_create_review_success(
        self,
        client: TestClient,
        sample_book: Book,
        second_user: User,
    ):
        """Test creating a review with valid data."""
        response = client.post(
            f"/api/v1/books/{sample_book.id}/reviews",
            json=review_payload(),
            headers=get_auth_header(second_user),
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()["data"]
        assert data["rating"] == 5
        assert data["title"] == "Excellent!"
        assert data["text"] == "A masterpiece of world building."
        assert data["book_id"] == sample_book.id
        assert data["user_id"] == second_user.id
        assert data["user"]["username"] == "seconduser"

    def test_create_review_ignores_client_ids(
        self,
        client: TestClient,
        db_session: Session,
        sample_book: Book,
        sample_user: User,
        second_user: User,
    ):
        """book_id and user_id come from the path and the token only."""
        other_book = Book(
            title="Other",
            author="Someone",
            genre="Other",
            description="Another book.",
            published_year=2001,
            user_id=sample_user.id,
        )
        db_session.add(other_book)
        db_session.commit()

        response = client.post(
            f"/api/v1/books/{sample_book.id}/reviews",
            json=review_payload(book_id=other_book.id, user_id=sample_user.id),
            headers=get_auth_header(second_user),
        )

        data = response.json()["data"]
        assert data["book_id"] == sample_book.id
        assert data["user_id"] == second_user.id

    def test_owner_can_review_own_book(
        self, client: TestClient, sample_book: Book, sample_user: User
    ):
        response = client.post(
            f"/api/v1/books/{sample_book.id}/reviews",
            json=review_payload(),
            headers=get_auth_header(sample_user),
        )

        assert response.status_code == status.HTTP_201_CREATED

    def test_create_review_duplicate(
        self,
        client: TestClient,
        db_session: Session,
        sample_review: Review,
        second_user: User,
    ):
        """A second review of the same book by the same user is rejected."""
        response = client.post(
            f"/api/v1/books/{sample_review.book_id}/reviews",
            json=review_payload(rating=1),
            headers=get_auth_header(second_user),
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {
            "success": False,
            "error": "You have already reviewed this book",
        }
        reviews = db_session.execute(
            select(Review).where(Review.book_id == sample_review.book_id)
        ).scalars().all()
        assert len(reviews) == 1

    def test_create_review_unauthenticated(
        self, client: TestClient, sample_book: Book
    ):
        """Test creating review without authentication."""
        response = client.post(
            f"/api/v1/books/{sample_book.id}/reviews",
            json=review_payload(),
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_create_review_book_not_found(
        self, client: TestClient, sample_user: User
    ):
        """Test creating review for non-existent book."""
        response = client.post(
            "/api/v1/books/99999/reviews",
            json=review_payload(),
            headers=get_auth_header(sample_user),
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error"] == "Book not found with id 99999"

    @pytest.mark.parametrize(
        "rating,valid",
        [
            (0, False),
            (1, True),
            (5, True),
            (6, False),
        ],
    )
    def test_create_review_rating_bounds(
        self,
        client: TestClient,
        sample_book: Book,
        sample_user: User,
        rating: int,
        valid: bool,
    ):
        response = client.post(
            f"/api/v1/books/{sample_book.id}/reviews",
            json=review_payload(rating=rating),
            headers=get_auth_header(sample_user),
        )

        if valid:
            assert response.status_code == status.HTTP_201_CREATED
        else:
            assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
            assert "rating" in response.json()["error"]

    @pytest.mark.parametrize("missing", ["title", "text", "rating"])
    def test_create_review_missing_field(
        self,
        client: TestClient,
        sample_book: Book,
        sample_user: User,
        missing: str,
    ):
        payload = review_payload()
        del payload[missing]

        response = client.post(
            f"/api/v1/books/{sample_book.id}/reviews",
            json=payload,
            headers=get_auth_header(sample_user),
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_create_review_title_too_long(
        self, client: TestClient, sample_book: Book, sample_user: User
    ):
        response = client.post(
            f"/api/v1/books/{sample_book.id}/reviews",
            json=review_payload(title="x" * 101),
            headers=get_auth_header(sample_user),
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


# =============================================================================
# Get Single Review
# =============================================================================


class TestGetReview:
    """Tests for GET /api/v1/reviews/{review_id}"""

    def test_get_review_success(self, client: TestClient, sample_review: Review):
        """Test getting a review by ID."""
        response = client.get(f"/api/v1/reviews/{sample_review.id}")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()["data"]
        assert data["id"] == sample_review.id
        assert data["rating"] == sample_review.rating
        assert data["title"] == sample_review.title
        assert data["user"]["username"] == "seconduser"

    def test_get_review_not_found(self, client: TestClient):
        """Test getting non-existent review."""
        response = client.get("/api/v1/reviews/99999")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error"] == "Review not found with id 99999"


# =============================================================================
# Update Review
# =============================================================================


class TestUpdateReview:
    """Tests for PUT /api/v1/reviews/{review_id}"""

    def test_update_review_success(
        self,
        client: TestClient,
        sample_review: Review,
        second_user: User,
    ):
        """Test updating own review."""
        response = client.put(
            f"/api/v1/reviews/{sample_review.id}",
            json={"rating": 5, "title": "Updated title", "text": "Updated text"},
            headers=get_auth_header(second_user),
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()["data"]
        assert data["rating"] == 5
        assert data["title"] == "Updated title"
        assert data["text"] == "Updated text"

    def test_update_review_partial(
        self,
        client: TestClient,
        sample_review: Review,
        second_user: User,
    ):
        """Test partial update of review."""
        original_title = sample_review.title

        response = client.put(
            f"/api/v1/reviews/{sample_review.id}",
            json={"rating": 2},
            headers=get_auth_header(second_user),
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()["data"]
        assert data["rating"] == 2
        assert data["title"] == original_title

    def test_update_review_not_owner(
        self,
        client: TestClient,
        db_session: Session,
        sample_review: Review,
        sample_user: User,
    ):
        """Even the book's owner cannot edit someone else's review."""
        response = client.put(
            f"/api/v1/reviews/{sample_review.id}",
            json={"rating": 1},
            headers=get_auth_header(sample_user),
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"] == "Not authorized to update this review"
        db_session.refresh(sample_review)
        assert sample_review.rating == 4

    def test_update_review_invalid_rating(
        self,
        client: TestClient,
        sample_review: Review,
        second_user: User,
    ):
        response = client.put(
            f"/api/v1/reviews/{sample_review.id}",
            json={"rating": 6},
            headers=get_auth_header(second_user),
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_update_review_unauthenticated(
        self, client: TestClient, sample_review: Review
    ):
        """Test updating review without authentication."""
        response = client.put(
            f"/api/v1/reviews/{sample_review.id}",
            json={"rating": 1},
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_update_review_not_found(
        self, client: TestClient, sample_user: User
    ):
        """Test updating non-existent review."""
        response = client.put(
            "/api/v1/reviews/99999",
            json={"rating": 5},
            headers=get_auth_header(sample_user),
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND


# =============================================================================
# Delete Review
# =============================================================================


class TestDeleteReview:
    """Tests for DELETE /api/v1/reviews/{review_id}"""

    def test_delete_review_by_author(
        self,
        client: TestClient,
        sample_review: Review,
        second_user: User,
    ):
        """Test the author can delete their review."""
        review_id = sample_review.id

        response = client.delete(
            f"/api/v1/reviews/{review_id}",
            headers=get_auth_header(second_user),
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"success": True, "data": {}}

        get_response = client.get(f"/api/v1/reviews/{review_id}")
        assert get_response.status_code == status.HTTP_404_NOT_FOUND

    def test_delete_review_not_owner(
        self,
        client: TestClient,
        db_session: Session,
        sample_review: Review,
    ):
        stranger = User(
            email="stranger@example.com",
            username="stranger",
            hashed_password=hash_password("Stranger123"),
        )
        db_session.add(stranger)
        db_session.commit()

        response = client.delete(
            f"/api/v1/reviews/{sample_review.id}",
            headers=get_auth_header(stranger),
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"] == "Not authorized to delete this review"
        assert client.get(f"/api/v1/reviews/{sample_review.id}").status_code == 200

    def test_delete_review_not_found(
        self, client: TestClient, sample_user: User
    ):
        response = client.delete(
            "/api/v1/reviews/99999",
            headers=get_auth_header(sample_user),
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND


# =============================================================================
# Unique Constraint Fallback
# =============================================================================


@pytest.fixture
def committing_session(engine) -> Generator[Session, None, None]:
    """
    Session whose commits are real.

    The review service rolls back after an IntegrityError; outside the
    per-test transaction that rollback only discards the failed insert.
    Everything created here is removed through the user cascades.
    """
    session = Session(bind=engine)
    yield session
    session.rollback()
    for user in session.execute(select(User)).scalars().all():
        session.delete(user)
    session.commit()
    session.close()


class TestDuplicateReviewConstraint:
    """A duplicate that gets past the existence check hits the unique constraint."""

    def test_constraint_violation_reported_as_duplicate(
        self, committing_session: Session, monkeypatch
    ):
        db = committing_session
        owner = User(email="owner@example.com", username="owner", hashed_password="x")
        reviewer = User(email="reader@example.com", username="reader", hashed_password="x")
        db.add_all([owner, reviewer])
        db.commit()

        book = Book(
            title="The Name of the Wind",
            author="Patrick Rothfuss",
            genre=Genre.FANTASY.value,
            description="A legend tells his own story.",
            published_year=2007,
            user_id=owner.id,
            average_rating=4.0,
        )
        db.add(book)
        db.commit()
        db.add(
            Review(book_id=book.id, user_id=reviewer.id, title="First", text="Loved it.", rating=4)
        )
        db.commit()
        book_id, reviewer_id = book.id, reviewer.id

        # The existence check sees no rows, as when a concurrent insert lands after it
        monkeypatch.setattr(
            "app.services.reviews.select",
            lambda *entities: select(*entities).where(false()),
        )

        with pytest.raises(BadRequestError) as exc_info:
            create_review(
                db,
                book_id,
                ReviewCreate(title="Second", text="Changed my mind.", rating=1),
                reviewer,
            )

        assert exc_info.value.message == "You have already reviewed this book"

        monkeypatch.undo()
        assert db.get(Book, book_id).average_rating == 4.0
        count = db.scalar(
            select(func.count()).select_from(Review).where(Review.user_id == reviewer_id)
        )
        assert count == 1
