"""
Test Suite for Book Reviews API

Test Organization:
- conftest.py: Shared fixtures (test database, client, users, books, reviews)
- test_auth.py: Signup, login and /auth/me
- test_authorization.py: Bearer token rejection and ownership checks
- test_books.py: /api/v1/books endpoints, list query options and search
- test_reviews.py: Review endpoints
- test_ratings.py: Average rating maintenance
- test_filters.py: Query-string translation unit tests
- test_main.py: Health, error envelope and rate limiting

Running Tests:
    pytest
    pytest tests/test_books.py -v
"""
