"""
Vibe Backend — Shared Pydantic Schemas
=======================================

What:  Base model and envelopes reused by every resource.
Why:   The API speaks camelCase JSON while the Python side stays snake_case.
How:   CamelModel generates camelCase aliases. FastAPI serializes response
       models by alias, and populate_by_name lets request bodies use either
       spelling.

Envelope convention:
    success responses → {"success": true, ...payload}
    error responses   → {"success": false, "error": code, "message": text}
"""

import math
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for every API schema exposed with camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class PaginationInfo(CamelModel):
    """Offset pagination block: {page, limit, total, totalPages}."""

    page: int = Field(description="Current page (1-based)")
    limit: int = Field(description="Items per page")
    total: int = Field(description="Total number of matching items")
    total_pages: int = Field(description="ceil(total / limit)")

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "PaginationInfo":
        return cls(page=page, limit=limit, total=total, total_pages=math.ceil(total / limit))


class MessageResponse(CamelModel):
    success: bool = True
    message: str


class RootResponse(BaseModel):
    message: str
    version: str
    status: str


class ErrorResponse(BaseModel):
    """
    Standardized error body for all API errors.

    Example:
        {
            "success": false,
            "error": "not_found",
            "message": "Post with ID '...' was not found",
            "request_id": "1a2b3c4d"
        }
    """
    success: bool = Field(default=False)
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[Any] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy or unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
