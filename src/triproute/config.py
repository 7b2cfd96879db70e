"""Application configuration and settings management."""

from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

TravelMode = Literal["driving", "walking", "transit", "bicycling"]


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="TRIPROUTE_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Trip Route Sequencer API"
    api_prefix: str = "/api"
    google_maps_api_key: Optional[str] = Field(
        default=None,
        description="API key for the Distance Matrix service. Without it, travel times fall back to haversine.",
    )
    distance_matrix_base_url: str = Field(
        default="https://maps.googleapis.com/maps/api",
        description="Base URL of the Distance Matrix service.",
    )
    distance_matrix_timeout_seconds: float = Field(default=15.0, gt=0.0)
    distance_matrix_max_retries: int = Field(default=2, ge=0)
    distance_matrix_backoff_seconds: float = Field(default=0.5, ge=0.0)
    distance_matrix_cache_size: int = Field(
        default=256,
        ge=1,
        description="Maximum number of Distance Matrix responses kept in memory.",
    )
    default_travel_mode: TravelMode = Field(
        default="driving",
        description="Travel mode used when a request does not name one.",
    )
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()


settings = Settings()
