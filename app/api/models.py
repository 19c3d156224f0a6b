from __future__ import annotations

from pydantic import BaseModel

from ..domain.media import Classification


class HealthResponse(BaseModel):
    """Liveness plus the number of resources loaded."""
    ok: bool
    resources: int


class ResourceInfo(BaseModel):
    """Metadata of one stored resource (never its content)."""
    path: str
    classification: Classification
    media_type: str
    size: int


class ResourceListResponse(BaseModel):
    items: list[ResourceInfo]


class ErrorDetail(BaseModel):
    """Body of HTTPException details raised by the routes."""
    error_code: str
    error_message: str
