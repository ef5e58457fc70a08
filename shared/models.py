"""
Shared data models used across modules.

The backend wraps every payload in the same envelope; modules parameterise
ApiResponse with their own payload models.
"""

from typing import Any, Generic, Optional, TypeVar
from pydantic import BaseModel, Field

T = TypeVar("T")


class FieldError(BaseModel):
    """A single server-side validation error."""

    msg: str = Field(..., description="Human-readable message")
    param: Optional[str] = Field(None, description="Offending parameter")
    location: Optional[str] = Field(None, description="Where the parameter was sent")


class ApiResponse(BaseModel, Generic[T]):
    """
    Uniform backend response envelope.

    Callers branch only on ``success``; ``data`` is only meaningful when it
    is true.
    """

    success: bool = Field(..., description="Whether the operation succeeded")
    message: str = Field(default="", description="Human-readable status message")
    data: Optional[T] = Field(None, description="Operation payload")
    errors: Optional[list[FieldError]] = Field(None, description="Validation errors")

    def first_error(self) -> Optional[str]:
        if self.errors:
            return self.errors[0].msg
        return None


RawResponse = ApiResponse[Any]
