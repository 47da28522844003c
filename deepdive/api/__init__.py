"""
Deep Dive API package initialization.

Router modules:
- deep_dive: Comparative tiering and drill-down endpoints
"""

from fastapi import APIRouter

from deepdive.api.deep_dive import router as deep_dive_router

# Create main API router
api_router = APIRouter()

# deep_dive router has its own /deep-dive prefix
api_router.include_router(deep_dive_router)

__all__ = [
    "api_router",
    "deep_dive_router",
]
