#!/usr/bin/env python3
"""
Database Seed Script

Populates the database with sample users, books and reviews for
development.

USAGE:
    # From the project root with the virtualenv activated
    python scripts/seed_data.py

    # Keep existing rows and add the samples on top
    python scripts/seed_data.py --no-clear

    # Only repair stale average ratings
    python scripts/seed_data.py --recalculate-only

This script:
1. Connects to the database using app settings
2. Clears existing data (unless --no-clear)
3. Creates sample users, books and reviews
4. Recomputes every book's average rating
"""

import argparse
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sqlalchemy import delete
from sqlalchemy.orm import Session

from app.database import SessionLocal, create_tables
from app.models import Book, Genre, Review, User
from app.services.ratings import recalculate_all_book_ratings
from app.services.security import hash_password

SAMPLE_PASSWORD = "password123"


def clear_data(db: Session) -> None:
    """Clear all existing data from the database."""
    print("Clearing existing data...")
    db.execute(delete(Review))
    db.execute(delete(Book))
    db.execute(delete(User))
    db.commit()
    print("Data cleared.")


def create_users(db: Session) -> dict[str, User]:
    """Create sample users, all sharing SAMPLE_PASSWORD."""
    print("Creating users...")
    usernames = ["alice", "bob", "carol"]

    users = {}
    for username in usernames:
        user = User(
            username=username,
            email=f"{username}@example.com",
            hashed_password=hash_password(SAMPLE_PASSWORD),
        )
        db.add(user)
        users[username] = user

    db.commit()
    for user in users.values():
        db.refresh(user)

    print(f"Created {len(users)} users (password: {SAMPLE_PASSWORD}).")
    return users


def create_books(db: Session, users: dict[str, User]) -> dict[str, Book]:
    """Create sample books spread across the sample users."""
    print("Creating books...")

    books_data = [
        {
            "title": "1984",
            "author": "George Orwell",
            "genre": Genre.FICTION,
            "description": "A dystopian novel set in a totalitarian society under constant surveillance.",
            "published_year": 1949,
            "owner": "alice",
        },
        {
            "title": "Pride and Prejudice",
            "author": "Jane Austen",
            "genre": Genre.ROMANCE,
            "description": "A romantic novel following the emotional development of Elizabeth Bennet.",
            "published_year": 1813,
            "owner": "alice",
        },
        {
            "title": "Murder on the Orient Express",
            "author": "Agatha Christie",
            "genre": Genre.MYSTERY,
            "description": "Hercule Poirot investigates a murder on a train stuck in a snowdrift.",
            "published_year": 1934,
            "owner": "bob",
        },
        {
            "title": "Foundation",
            "author": "Isaac Asimov",
            "genre": Genre.SCIENCE_FICTION,
            "description": "The first novel in the Foundation series about the fall of the Galactic Empire.",
            "published_year": 1951,
            "owner": "bob",
        },
        {
            "title": "The Hobbit",
            "author": "J.R.R. Tolkien",
            "genre": Genre.FANTASY,
            "description": "Bilbo Baggins embarks on a quest to reclaim the Lonely Mountain.",
            "published_year": 1937,
            "owner": "carol",
        },
        {
            "title": "The Diary of a Young Girl",
            "author": "Anne Frank",
            "genre": Genre.BIOGRAPHY,
            "description": "The wartime diary of a Jewish girl hiding in Amsterdam.",
            "published_year": 1947,
            "owner": "carol",
        },
    ]

    books = {}
    for data in books_data:
        owner = users[data.pop("owner")]
        genre = data.pop("genre")
        book = Book(**data, genre=genre.value, user_id=owner.id)
        db.add(book)
        books[data["title"]] = book

    db.commit()
    for book in books.values():
        db.refresh(book)

    print(f"Created {len(books)} books.")
    return books


def create_reviews(
    db: Session,
    users: dict[str, User],
    books: dict[str, Book],
) -> list[Review]:
    """Create sample reviews (one per user per book at most)."""
    print("Creating reviews...")

    reviews_data = [
        ("bob", "1984", 5, "Chilling", "Still the definitive surveillance novel."),
        ("carol", "1984", 4, "Bleak but brilliant", "Hard to read, harder to forget."),
        ("bob", "Pride and Prejudice", 3, "Witty", "Sharp dialogue, slow middle."),
        ("alice", "Murder on the Orient Express", 5, "Perfect puzzle", "The ending is a classic for a reason."),
        ("carol", "Foundation", 4, "Big ideas", "Light on characters, heavy on history."),
        ("alice", "The Hobbit", 5, "Comfort read", "A lovely adventure every time."),
        ("bob", "The Hobbit", 4, "Charming", "Better than I remembered."),
    ]

    reviews = []
    for username, book_title, rating, title, text in reviews_data:
        review = Review(
            book_id=books[book_title].id,
            user_id=users[username].id,
            rating=rating,
            title=title,
            text=text,
        )
        db.add(review)
        reviews.append(review)

    db.commit()

    print(f"Created {len(reviews)} reviews.")
    return reviews


def recalculate_ratings(db: Session) -> int:
    """Recompute every book's average rating."""
    print("Recalculating average ratings...")
    count = recalculate_all_book_ratings(db)
    print(f"Recalculated ratings for {count} books.")
    return count


def seed_database(clear_existing: bool = True) -> None:
    """
    Main function to seed the database.

    Args:
        clear_existing: If True, clears existing data before seeding.
    """
    print("=" * 60)
    print("Starting database seed...")
    print("=" * 60)

    # Create tables if they don't exist
    create_tables()

    db = SessionLocal()

    try:
        if clear_existing:
            clear_data(db)

        users = create_users(db)
        books = create_books(db, users)
        reviews = create_reviews(db, users, books)
        recalculate_ratings(db)

        print("=" * 60)
        print("Database seeding completed successfully!")
        print("=" * 60)
        print("\nSummary:")
        print(f"  - Users: {len(users)}")
        print(f"  - Books: {len(books)}")
        print(f"  - Reviews: {len(reviews)}")
        print("\nYou can now access the API at http://localhost:8001")
        print("API documentation at http://localhost:8001/docs")

    except Exception as e:
        print(f"Error seeding database: {e}")
        db.rollback()
        raise
    finally:
        db.close()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed the Book Reviews database.")
    parser.add_argument(
        "--no-clear",
        action="store_true",
        help="Keep existing data instead of clearing it first",
    )
    parser.add_argument(
        "--recalculate-only",
        action="store_true",
        help="Only recompute average ratings for existing books",
    )
    return parser.parse_args(argv)


if __name__ == "__main__":
    args = parse_args()

    if args.recalculate_only:
        session = SessionLocal()
        try:
            recalculate_ratings(session)
        finally:
            session.close()
    else:
        seed_database(clear_existing=not args.no_clear)
