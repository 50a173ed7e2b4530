"""
Health Check Endpoints.

This module provides basic system status endpoints (health, version)
used for monitoring and deployment verification.
"""

from fastapi import APIRouter

from truthshield import __version__
from truthshield.server.responses import success_response

router = APIRouter()


@router.get(
    "/health",
    summary="Health Check",
    description="Check the operational status of the API server.",
    response_description="Status envelope.",
)
async def health_check():
    """
    Health check endpoint.

    Returns a simple status indicator to confirm the server is running and reachable.
    """
    return success_response("TruthShield Pro API is running!", {"status": "ok"})


@router.get(
    "/version",
    summary="Get Version",
    description="Retrieve version information for the API server.",
    response_description="Version envelope.",
)
async def version():
    return success_response("Version retrieved", {"version": __version__, "schema_version": "v1"})
