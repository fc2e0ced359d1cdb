"""Application configuration and settings management."""

from typing import Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="SMARTROUTE_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "SmartRoute Route Synthesis API"
    api_prefix: str = "/api"
    log_level: str = Field(default="INFO", description="Root logging level.")

    # Provider A: traffic-aware routing with alternatives
    tomtom_api_key: Optional[str] = Field(default=None, description="TomTom Routing/Search API key.")
    tomtom_base_url: str = Field(default="https://api.tomtom.com")
    tomtom_max_alternatives: int = Field(default=2, ge=0, le=5)

    # Provider B: single geometry
    mapbox_token: Optional[str] = Field(default=None, description="Mapbox Directions access token.")
    mapbox_base_url: str = Field(default="https://api.mapbox.com")

    # Provider C: OSRM via a relay
    osrm_relay_url: Optional[str] = Field(
        default=None,
        description="Base URL of a relay exposing GET /route?coordinates=... (e.g., http://localhost:8000/api/osrm).",
    )
    osrm_upstream_urls: tuple[str, ...] = Field(
        default=(
            "https://routing.openstreetmap.de/routed-car",
            "https://router.project-osrm.org",
        ),
        description="OSRM base URLs the built-in relay tries in order.",
    )
    osrm_profile: str = Field(default="driving")

    provider_timeout_seconds: float = Field(default=8.0, gt=0.0)
    assumed_speed_kmh: float = Field(default=40.0, gt=0.0)
    junction_spacing_points: int = Field(default=50, ge=2)
    curve_points_per_segment: int = Field(default=20, ge=2)
    curve_offset_factor: float = Field(default=0.5, ge=0.0)

    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key for backend operations.",
    )

    @field_validator("frontend_allowed_origins", "osrm_upstream_urls", mode="before")
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

    @field_validator("tomtom_base_url", "mapbox_base_url", "osrm_relay_url", mode="after")
    @classmethod
    def _strip_trailing_slash(cls, value: Optional[str]) -> Optional[str]:
        return value.rstrip("/") if value else value


def credential_usable(value: Optional[str]) -> bool:
    """True when an API credential is set and is not a template placeholder."""
    return bool(value) and "placeholder" not in value.lower()


settings = Settings()
