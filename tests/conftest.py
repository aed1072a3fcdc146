"""
pytest Fixtures for Book Reviews API Tests

This file contains shared fixtures used across all test files.

FIXTURE SCOPES:
- session scope for the engine (expensive to create)
- function scope for sessions (isolation between tests)

Every test runs inside a transaction on a single connection that is rolled
back afterwards, so commits made by the services never leak between tests.
"""

# =============================================================================
# TEST ENVIRONMENT SETUP
# =============================================================================
# IMPORTANT: Set environment variables BEFORE importing the app
# This disables rate limiting, sets a test secret key and keeps the
# application engine on SQLite (no PostgreSQL driver needed)
import os

os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key-for-unit-tests-at-least-32-characters-long"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"

from collections.abc import Generator
from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.main import app
from app.models import Book, Genre, Review, User
from app.services.security import create_access_token, hash_password

# =============================================================================
# DATABASE FIXTURES
# =============================================================================
# SQLite in-memory keeps the suite fast and self-contained.
# PostgreSQL-specific behaviour should be covered against a real database.


@pytest.fixture(scope="session")
def engine():
    """
    Create a SQLite in-memory database engine.

    StaticPool keeps the connection alive for the entire session.
    Without it, SQLite in-memory database would disappear between connections.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(engine) -> Generator[Session, None, None]:
    """
    Create a fresh database session for each test.

    The session is wrapped in a transaction that's rolled back,
    ensuring test isolation without needing to recreate tables.
    """
    TestSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
    )

    connection = engine.connect()
    transaction = connection.begin()
    session = TestSessionLocal(bind=connection)

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """
    Create a test client with the test database.

    We override the get_db dependency to use our test session.
    """

    def override_get_db():
        """Provide test database session instead of real one."""
        try:
            yield db_session
        finally:
            pass  # Session cleanup handled by db_session fixture

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# =============================================================================
# AUTH HELPERS
# =============================================================================


def auth_header_for(user: User) -> dict:
    """Authorization header carrying a valid token for `user`."""
    token = create_access_token({"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


# =============================================================================
# SAMPLE DATA FIXTURES
# =============================================================================


@pytest.fixture
def sample_user(db_session: Session) -> User:
    """Create a sample user for testing."""
    user = User(
        email="testuser@example.com",
        username="testuser",
        hashed_password=hash_password("SecurePass123"),
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def second_user(db_session: Session) -> User:
    """Create a second user for testing ownership scenarios."""
    user = User(
        email="seconduser@example.com",
        username="seconduser",
        hashed_password=hash_password("SecurePass456"),
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def auth_headers(sample_user: User) -> dict:
    return auth_header_for(sample_user)


@pytest.fixture
def second_auth_headers(second_user: User) -> dict:
    return auth_header_for(second_user)


@pytest.fixture
def sample_book(db_session: Session, sample_user: User) -> Book:
    """Create a sample book owned by sample_user."""
    book = Book(
        title="Dune",
        author="Frank Herbert",
        genre=Genre.SCIENCE_FICTION.value,
        description="A desert planet, a noble family and the spice melange.",
        published_year=1965,
        user_id=sample_user.id,
    )
    db_session.add(book)
    db_session.commit()
    db_session.refresh(book)
    return book


@pytest.fixture
def multiple_books(db_session: Session, sample_user: User) -> list[Book]:
    """
    Create 15 books for pagination and filter testing.

    created_at increases with the index, so the default ordering (newest
    first) is deterministic. Genres alternate Fantasy/Mystery/Romance and
    published_year runs 1990..2004.
    """
    genres = [Genre.FANTASY, Genre.MYSTERY, Genre.ROMANCE]
    base_time = datetime(2024, 1, 1, tzinfo=UTC)

    books = []
    for i in range(15):
        book = Book(
            title=f"Test Book {i + 1}",
            author=f"Author {i % 4}",
            genre=genres[i % 3].value,
            description=f"Description for book {i + 1}",
            published_year=1990 + i,
            user_id=sample_user.id,
            average_rating=float(i % 5),
            created_at=base_time + timedelta(minutes=i),
        )
        books.append(book)
        db_session.add(book)

    db_session.commit()
    for book in books:
        db_session.refresh(book)

    return books


@pytest.fixture
def sample_review(
    db_session: Session,
    sample_book: Book,
    second_user: User,
) -> Review:
    """
    Create a review of sample_book written by second_user.

    The stored average is set to match, as the review service would.
    """
    review = Review(
        book_id=sample_book.id,
        user_id=second_user.id,
        rating=4,
        title="Great book!",
        text="I really enjoyed reading this book.",
    )
    db_session.add(review)
    sample_book.average_rating = 4.0
    db_session.commit()
    db_session.refresh(review)
    return review
