"""
Domain Errors

Services raise these instead of HTTPException so that business logic
stays independent of the transport layer. The handlers registered in
main.py translate each one into the uniform error body:

    {"success": false, "error": "<message>"}

Error kinds:
- BadRequestError (400): malformed or missing input, duplicate review
- UnauthorizedError (401): missing/invalid credentials or not the owner
- NotFoundError (404): identifier does not resolve to a record
- ValidationError (422): field constraint violation
"""

from fastapi import status


class APIError(Exception):
    """Base class for errors that map directly onto an HTTP status."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status_code={self.status_code}, message='{self.message}')"


class BadRequestError(APIError):
    status_code = status.HTTP_400_BAD_REQUEST


class UnauthorizedError(APIError):
    status_code = status.HTTP_401_UNAUTHORIZED


class NotFoundError(APIError):
    status_code = status.HTTP_404_NOT_FOUND


class ValidationError(APIError):
    status_code = 422
