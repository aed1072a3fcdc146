"""
User Pydantic Schemas

These schemas define the shape of data for signup, login and profiles.

Schemas:
- UserCreate: Signup data (username, email, password)
- LoginRequest: Login data; fields are optional so that a missing field
  is reported as a 400 by the auth service instead of a 422
- TokenResponse: {success, token}
- UserResponse: Public user data (never exposes the password hash)
- ReviewAuthor: Minimal user info embedded in reviews
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class UserCreate(BaseModel):
    """
    Schema for user signup.

    Example request body:
    {
        "username": "a",
        "email": "a@x.com",
        "password": "secret123"
    }
    """

    username: str = Field(
        ...,
        min_length=1,
        max_length=50,
        description="Unique username",
        examples=["johndoe"],
    )

    email: EmailStr = Field(
        ...,
        description="User's email address",
        examples=["john@example.com"],
    )

    password: str = Field(
        ...,
        min_length=6,
        max_length=128,
        description="Password (min 6 characters)",
        examples=["secret123"],
    )

    @field_validator("username")
    @classmethod
    def username_must_not_be_blank(cls, v: str) -> str:
        """Trim the username and reject whitespace-only values."""
        if not v.strip():
            raise ValueError("Username cannot be empty or whitespace")
        return v.strip()

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Emails are stored and looked up lowercase."""
        return v.lower()


class LoginRequest(BaseModel):
    """Schema for login. Presence of both fields is checked by the service."""

    email: str | None = Field(default=None, examples=["john@example.com"])
    password: str | None = Field(default=None, examples=["secret123"])


class TokenResponse(BaseModel):
    """Signed access token returned by signup and login."""

    success: bool = True
    token: str = Field(..., description="JWT to send as 'Authorization: Bearer <token>'")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
            }
        },
    )


class UserResponse(BaseModel):
    """
    Schema for user responses.

    SECURITY: Never includes the password hash.
    """

    id: int = Field(..., description="Unique user identifier")
    username: str = Field(..., description="Unique username")
    email: str = Field(..., description="User's email address")
    created_at: datetime = Field(..., description="When the user registered")

    model_config = ConfigDict(from_attributes=True)


class UserDataResponse(BaseModel):
    success: bool = True
    data: UserResponse


class ReviewAuthor(BaseModel):
    """Author info expanded inline on reviews."""

    id: int
    username: str

    model_config = ConfigDict(from_attributes=True)
