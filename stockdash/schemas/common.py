"""Common schemas for API requests and responses."""

from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class Notification(BaseModel):
    """User-facing toast message produced by an inventory operation."""

    title: str = Field(description="Short headline")
    description: str = Field(default="", description="Details shown under the title")
    variant: Literal["default", "destructive"] = Field(
        default="default",
        description="destructive for failures",
    )

    model_config = {"extra": "forbid", "frozen": True}


class OperationResult(BaseModel, Generic[T]):
    """Result of a mutating operation.

    `success` mirrors the boolean the inventory manager returns; the
    presentation layer uses it to decide whether to close a form.
    """

    success: bool = Field(description="Whether the operation succeeded")
    data: T | None = Field(default=None, description="Operation result data")
    notifications: list[Notification] = Field(
        default_factory=list,
        description="Notifications raised while running the operation",
    )

    model_config = {"extra": "forbid"}


class ErrorResponse(BaseModel):
    """Standard error response."""

    success: bool = Field(default=False)
    error: str = Field(description="Error message")
    error_type: str = Field(description="Error type/class name")
    detail: dict[str, Any] | None = Field(default=None, description="Additional error details")

    model_config = {"extra": "forbid"}


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Health status (healthy, degraded)")
    version: str = Field(description="Service version")
    environment: str = Field(description="Environment name")
    checks: dict[str, bool] = Field(default_factory=dict, description="Individual health checks")

    model_config = {"extra": "forbid"}
