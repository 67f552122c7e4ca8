"""
Endpoints package for TeraRelay API
"""
from .health import router as health_router
from .resolve import router as resolve_router, ResolveFailedError


__all__ = [
    "health_router",
    "resolve_router",
    "ResolveFailedError"
]
