"""Typed settings configuration - single source of truth."""

from functools import lru_cache

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str | None = None

    # Cache / session storage
    redis_url: str | None = None

    # Active-trip session
    state_dir: str = ".tripcore"
    install_id: str = "default"

    # Edge endpoints consumed by the route client and advisor
    directions_url: str = "http://localhost:8000/directions"
    optimize_route_url: str = "http://localhost:8000/optimize-route"
    public_anon_key: str = ""

    # Google Routes API (server side of /directions)
    google_maps_api_key: str = ""
    google_routes_url: str = "https://routes.googleapis.com/directions/v2:computeRoutes"

    # LLM (server side of /optimize-route)
    openai_api_key: SecretStr | None = None
    openai_model: str = "gpt-4o-mini"
    openai_base_url: str | None = None
    optimizer_city: str = "Medellín, Colombia"

    # Timeouts (seconds)
    http_timeout_seconds: float = 10.0

    # Savings estimate
    average_speed_kmh: float = 25.0

    # Upcoming trips shortcut
    upcoming_trips_limit: int = 3


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
