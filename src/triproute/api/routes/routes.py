"""Routing endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from ...schemas.routing import OptimizeRouteRequest, OptimizeRouteResponse
from ...services.routing.service import optimize_route

router = APIRouter(prefix="/routes", tags=["routes"])

logger = logging.getLogger(__name__)


@router.post(
    "/optimize",
    response_model=OptimizeRouteResponse,
    response_model_by_alias=True,
    status_code=status.HTTP_200_OK,
)
def optimize(payload: OptimizeRouteRequest) -> OptimizeRouteResponse:
    try:
        return optimize_route(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception(f"Error optimizing route: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to optimize route: {str(exc)}"
        ) from exc
