"""
Book Reviews API Application Package

This is the main application package for the Book Reviews API.
All core modules, routers, and services are organized within this package.

Package Structure:
- config.py: Application configuration using Pydantic Settings
- database.py: SQLAlchemy database connection and session management
- exceptions.py: Domain errors translated into HTTP responses
- main.py: FastAPI application factory and configuration
- dependencies.py: Dependency injection functions
- models/: SQLAlchemy ORM models
- schemas/: Pydantic request/response schemas
- routers/: API route handlers
- services/: Business logic (auth, books, reviews, ratings, query filters)
"""

__version__ = "0.1.0"
