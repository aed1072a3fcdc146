"""
Response Envelope Schemas

Every response body is a JSON object with a boolean `success` flag.
Successful responses carry `data` (and list counts where relevant);
errors carry an `error` message.
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator


class PartialUpdate(BaseModel):
    """
    Base for update schemas.

    Every field is optional so clients can send only what changes, but a
    field that *is* sent may not be null: the stored columns are required.
    """

    @model_validator(mode="after")
    def reject_explicit_nulls(self):
        nulls = sorted(
            name for name in self.model_fields_set if getattr(self, name) is None
        )
        if nulls:
            raise ValueError(f"Fields cannot be null: {', '.join(nulls)}")
        return self


class ErrorResponse(BaseModel):
    """Uniform error body produced by the exception handlers in main.py."""

    success: bool = Field(default=False, description="Always false for errors")
    error: str = Field(..., description="Human readable error message")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"success": False, "error": "Book not found with id 42"}
        },
    )


class EmptyDataResponse(BaseModel):
    """Returned by delete endpoints."""

    success: bool = True
    data: dict = Field(default_factory=dict)
