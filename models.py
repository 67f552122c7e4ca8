"""
Pydantic models for TeraRelay API
"""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class ResolveRequest(BaseModel):
    """Request model for share link resolution."""
    url: Optional[str] = Field(None, description="Share link to resolve")


class ResolveResponse(BaseModel):
    """Response model for a resolved share link."""
    status: str = Field("success", description="Resolution status")
    filename: str = Field(..., description="File name reported upstream")
    size: str = Field(..., description="Human readable file size")
    thumbnail: str = Field("", description="Thumbnail URL")
    response_time: str = Field(..., description="Upstream or locally measured response time")
    url1: str = Field("", description="Direct download link")
    url2: str = Field("", description="Reserved mirror link")
    url3: str = Field("", description="Reserved mirror link")


class ErrorResponse(BaseModel):
    """Error payload returned to clients."""
    status: str = Field("error", description="Always 'error'")
    message: str = Field(..., description="Client-facing error message")


class HealthResponse(BaseModel):
    """Response model for health check."""
    status: str = Field(..., description="Service status")
    version: str = Field(..., description="API version")
    uptime: float = Field(..., description="Service uptime in seconds")
    resolver_api: str = Field(..., description="Configured upstream resolution endpoint")
    allowed_domains: List[str] = Field(..., description="Accepted share link domains")
    memory_usage: Optional[Dict[str, Any]] = Field(None, description="Memory usage statistics")
    system_info: Optional[Dict[str, Any]] = Field(None, description="System information")
