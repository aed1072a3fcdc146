"""
SQLAlchemy Models Package

This package contains all database models for the Book Reviews API.

Model Relationships:
- User -> Book: One-to-Many (a user owns the books they create)
- User -> Review: One-to-Many (a user writes many reviews)
- Book -> Review: One-to-Many (at most one review per user per book)

Import all models here to:
1. Make them available as: from app.models import Book, Review, User
2. Ensure Alembic discovers them for migrations
"""

# The order matters for SQLAlchemy to resolve relationships
from app.models.user import User
from app.models.book import Book, Genre
from app.models.review import Review

__all__ = [
    "User",
    "Book",
    "Genre",
    "Review",
]
