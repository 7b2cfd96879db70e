"""Travel-time matrix endpoint."""

from __future__ import annotations

import logging

import httpx
from fastapi import APIRouter, HTTPException, status

from ...schemas.routing import DistanceMatrixRequest, DistanceMatrixResponse
from ...services.routing.distance_matrix import DistanceMatrixError
from ...services.routing.service import lookup_distance_matrix

router = APIRouter(prefix="/distance-matrix", tags=["distance-matrix"])

logger = logging.getLogger(__name__)


@router.post("", response_model=DistanceMatrixResponse, status_code=status.HTTP_200_OK)
def distance_matrix(payload: DistanceMatrixRequest) -> DistanceMatrixResponse:
    try:
        return lookup_distance_matrix(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except (DistanceMatrixError, ConnectionError, httpx.HTTPError) as exc:
        logger.warning(f"Distance matrix lookup failed: {exc}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to fetch distance matrix: {str(exc)}"
        ) from exc
