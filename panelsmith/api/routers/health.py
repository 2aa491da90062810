"""
Health Check Endpoints
"""

from fastapi import APIRouter

from panelsmith import __version__

router = APIRouter()


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "panelsmith", "version": __version__}
