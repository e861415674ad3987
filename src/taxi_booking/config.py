"""Application configuration and settings management."""

from typing import Any, Literal, Optional

import json
from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class VehicleRate(BaseModel):
    """Per-vehicle tariff used by the fare estimator."""

    base: float = Field(..., ge=0.0)
    per_km: float = Field(..., ge=0.0)
    per_minute: float = Field(..., ge=0.0)


DEFAULT_VEHICLE_PRICING: dict[str, VehicleRate] = {
    "ECONOMY": VehicleRate(base=2.50, per_km=0.85, per_minute=0.30),
    "PREMIUM": VehicleRate(base=4.00, per_km=1.15, per_minute=0.42),
    "SUV": VehicleRate(base=4.50, per_km=1.30, per_minute=0.48),
    "EXECUTIVE": VehicleRate(base=6.00, per_km=1.60, per_minute=0.60),
}


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="TAXI_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Taxi Booking API"
    api_prefix: str = "/api"
    environment: Literal["development", "test", "production"] = "development"
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:3000",
            "http://127.0.0.1:3000",
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

    # Authentication
    jwt_secret: Optional[str] = Field(
        default=None,
        description="Secret used to sign access tokens. Required in production.",
    )
    jwt_algorithm: str = Field(default="HS256")
    jwt_expires_minutes: int = Field(default=60 * 24, ge=1)
    bcrypt_rounds: int = Field(default=10, ge=4, le=31)

    # Pricing and scheduling policy
    vehicle_pricing: dict[str, VehicleRate] = Field(
        default_factory=lambda: dict(DEFAULT_VEHICLE_PRICING),
        description="Base fee, per-km and per-minute rates keyed by vehicle type.",
    )
    average_speed_kmh: float = Field(default=32.0, gt=0.0)
    default_segment_distance_km: float = Field(
        default=3.0,
        ge=0.0,
        description="Distance assumed for a route segment whose endpoints lack coordinates.",
    )
    minimum_distance_km: float = Field(default=1.0, ge=0.0)
    minimum_duration_minutes: int = Field(default=10, ge=0)
    stop_fee: float = Field(default=1.25, ge=0.0)
    scheduled_fee: float = Field(default=1.50, ge=0.0)
    scheduled_threshold_minutes: int = Field(
        default=5,
        ge=0,
        description="A ride counts as scheduled only when requested more than this far ahead.",
    )
    scheduled_cancellation_window_minutes: int = Field(default=30, ge=0)
    instant_cancellation_window_minutes: int = Field(default=5, ge=0)
    cancellation_penalty_rate: float = Field(default=0.15, ge=0.0)
    minimum_cancellation_penalty: float = Field(default=5.0, ge=0.0)

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

    @field_validator("vehicle_pricing", mode="after")
    @classmethod
    def _normalise_vehicle_keys(cls, value: dict[str, VehicleRate]) -> dict[str, VehicleRate]:
        return {key.strip().upper(): rate for key, rate in value.items()}

    @model_validator(mode="after")
    def _require_secret_in_production(self) -> "Settings":
        if self.environment == "production" and not self.jwt_secret:
            raise ValueError("TAXI_JWT_SECRET must be set when TAXI_ENVIRONMENT=production.")
        return self


settings = Settings()
