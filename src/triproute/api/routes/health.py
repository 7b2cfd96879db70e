"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...config import settings

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


def _get_distance_matrix_health_check():
    """Lazy import to avoid startup failures."""
    from ...services.routing.distance_matrix import check_health
    return check_health


@router.get("/health/distance-matrix", status_code=status.HTTP_200_OK)
def health_distance_matrix() -> dict:
    """Check Distance Matrix service health."""
    if not settings.google_maps_api_key:
        return {
            "service": "distance_matrix",
            "configured": False,
            "healthy": False,
            "message": "Set TRIPROUTE_GOOGLE_MAPS_API_KEY to use real travel times; haversine estimates are used meanwhile.",
        }
    check_health = _get_distance_matrix_health_check()
    return {"service": "distance_matrix", "configured": True, "healthy": check_health()}
