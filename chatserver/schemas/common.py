"""Common schemas used across the application."""

from pydantic import BaseModel, Field


class ResponseMessage(BaseModel):
    """Generic response message schema."""

    message: str = Field(..., description="Response message")


class HealthCheckResponse(BaseModel):
    """Health check response schema."""

    status: str = Field(..., description="Service status", examples=["healthy"])
    version: str = Field(..., description="API version", examples=["1.0.0"])
    database: str = Field(..., description="Database status", examples=["connected"])
    signing_secrets: str = Field(
        ...,
        description="Whether JWT secrets are configured or built-in fallbacks",
        examples=["configured"],
    )
