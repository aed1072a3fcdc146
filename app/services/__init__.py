"""
Services Package

This package contains business logic services that are:
- Separate from HTTP handling (routers)
- Reusable across different parts of the application
- Easier to test in isolation

Current services:
- auth.py: Signup and login
- authorization.py: Bearer token → user resolution and ownership checks
- books.py: Book listing, search and CRUD
- filters.py: Query-string → SQLAlchemy clause translation for book lists
- rate_limiter.py: Rate limiting with slowapi
- ratings.py: Book average rating recalculation
- reviews.py: Review CRUD
- security.py: Password hashing and JWT utilities
"""
