"""Routing request/response schemas."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..config import TravelMode

SequencingStrategy = Literal["poi_only", "two_tier", "flat"]


class CoordinateModel(BaseModel):
    lat: float
    lng: float


class CustomLocationModel(CoordinateModel):
    name: Optional[str] = None


class LocationModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    name: str
    lat: float
    lng: float
    parent_id: Optional[str] = Field(default=None, alias="parentId")
    opening_time: Optional[str] = Field(default=None, alias="openingTime", description="Opening time as HH:MM.")
    closing_time: Optional[str] = Field(default=None, alias="closingTime", description="Closing time as HH:MM.")
    duration: Optional[int] = Field(default=None, ge=0, description="Visit duration in minutes (default 60).")


class StartPointModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["first_location", "specific_location", "custom"] = "first_location"
    location_id: Optional[str] = Field(default=None, alias="locationId")
    custom_location: Optional[CustomLocationModel] = Field(default=None, alias="customLocation")


class EndPointModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["last_location", "return_to_start", "specific_location", "custom"] = "last_location"
    location_id: Optional[str] = Field(default=None, alias="locationId")
    custom_location: Optional[CustomLocationModel] = Field(default=None, alias="customLocation")


class RouteConfigModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    start_point: StartPointModel = Field(default_factory=StartPointModel, alias="startPoint")
    end_point: EndPointModel = Field(default_factory=EndPointModel, alias="endPoint")


class OptimizeRouteRequest(BaseModel):
    locations: List[LocationModel]
    mode: Optional[TravelMode] = Field(default=None, description="Travel mode; defaults to the configured mode.")
    strategy: SequencingStrategy = Field(
        default="poi_only",
        description=(
            "poi_only orders points of interest only; two_tier orders places then each place's "
            "points of interest; flat orders every location as given."
        ),
    )
    config: Optional[RouteConfigModel] = None


class ScheduledStopModel(BaseModel):
    id: Optional[str]
    name: str
    sequence: int
    travel_min: Optional[int]
    arrival: Optional[str]
    wait_min: Optional[float]
    departure: Optional[str]
    late: bool
    pinned: bool


class RouteMetadataModel(BaseModel):
    strategy: SequencingStrategy
    mode: TravelMode
    matrix_source: Literal["distance_matrix", "haversine"]
    lock_last: bool
    location_count: int


class OptimizeRouteResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    optimized_path: List[LocationModel] = Field(alias="optimizedPath")
    schedule: Optional[List[ScheduledStopModel]] = None
    metadata: RouteMetadataModel


class DistanceMatrixRequest(BaseModel):
    origins: List[CoordinateModel] = Field(..., min_length=1)
    destinations: Optional[List[CoordinateModel]] = Field(
        default=None, description="Defaults to the origins (square matrix)."
    )
    mode: Optional[TravelMode] = None


class DistanceMatrixResponse(BaseModel):
    durations: List[List[Optional[float]]]
    mode: TravelMode
