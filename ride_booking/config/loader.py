# ride_booking/config/loader.py
"""
Configuration loader.
config/config.json is the single source of defaults; secrets and
deployment-specific values are overridden from environment variables.
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings


# =============================================================================
# PATHS
# =============================================================================

def get_project_root() -> Path:
    """Returns the repository root directory."""
    return Path(__file__).parent.parent.parent


def get_config_path() -> Path:
    """Returns the path of config.json (CONFIG_PATH overrides it)."""
    override = os.getenv("CONFIG_PATH")
    if override:
        return Path(override)
    return get_project_root() / "config" / "config.json"


def load_config_json() -> dict[str, Any]:
    """Reads config.json, dropping `_comment_*` keys."""
    config_path = get_config_path()
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return {k: v for k, v in data.items() if not k.startswith("_comment_")}


def _split_csv(value: str | list[str] | None) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return list(value)


# =============================================================================
# SECTIONS
# =============================================================================

class SystemSettings(BaseModel):
    """System-wide flags."""
    PROJECT_NAME: str = "ride_booking"
    VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "production"

    @property
    def is_development(self) -> bool:
        return self.DEBUG or self.ENVIRONMENT.lower() == "development"


class ServerSettings(BaseModel):
    """HTTP server and CORS."""
    HOST: str = "0.0.0.0"
    PORT: int = 5000
    ALLOWED_ORIGINS: list[str] = Field(default_factory=list)

    @field_validator("ALLOWED_ORIGINS", mode="before")
    @classmethod
    def parse_origins(cls, v: str | list[str] | None) -> list[str]:
        """Accepts a comma separated string (as set in the environment) or a list."""
        return _split_csv(v)


class LoggingSettings(BaseModel):
    """Logging."""
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = False
    LOG_FILE_PATH: str = "logs/ride_booking.log"
    LOG_FORMAT: str = "colored"
    LOG_MAX_BYTES: int = 10485760


class DatabaseSettings(BaseModel):
    """PostgreSQL connection pool."""
    DATABASE_URL: str = ""
    DB_MIN_POOL_SIZE: int = 2
    DB_MAX_POOL_SIZE: int = 10
    DB_COMMAND_TIMEOUT: int = 30

    @property
    def dsn(self) -> str:
        return self.DATABASE_URL


class GeoSettings(BaseModel):
    """External geocoder and router."""
    GEOCODER_URL: str = "https://nominatim.openstreetmap.org"
    GEOCODER_USER_AGENT: str = "RideBookingApp/1.0"
    GEOCODER_TIMEOUT: float = 5.0
    GEOCODER_MIN_INTERVAL: float = 1.0
    GEOCODER_LANGUAGE: str = "en"
    GEOCODER_COUNTRY_CODES: str = "in"
    GEOCODER_VIEWBOX: str = "68.17665,8.07647,97.40238,37.09662"
    ROUTER_URL: str = "https://router.project-osrm.org"
    ROUTER_TIMEOUT: float = 10.0
    FALLBACK_SPEED_KMH: float = 30.0


class FareSettings(BaseModel):
    """Fare rates."""
    BASE_FARE: float = 50.0
    FARE_PER_KM: float = 12.0
    FARE_PER_MINUTE: float = 1.0
    MIN_FARE: float = 80.0
    SURGE_MULTIPLIER: float = Field(1.0, ge=1.0)
    CURRENCY: str = "INR"


class AuthSettings(BaseModel):
    """Bearer token verification."""
    TOKEN_SECRET: str = ""


class BookingSettings(BaseModel):
    """Booking defaults."""
    DEFAULT_VEHICLE_TYPE: str = "sedan"
    DEFAULT_PAYMENT_METHOD: str = "cash"
    BOOKING_CODE_ATTEMPTS: int = 5


# =============================================================================
# SETTINGS
# =============================================================================

class Settings(BaseSettings):
    """
    Application settings.
    Aggregates every configuration section.
    """
    system: SystemSettings = Field(default_factory=SystemSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    geo: GeoSettings = Field(default_factory=GeoSettings)
    fares: FareSettings = Field(default_factory=FareSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    bookings: BookingSettings = Field(default_factory=BookingSettings)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @classmethod
    def from_config_json(cls, data: dict[str, Any] | None = None) -> "Settings":
        """
        Builds Settings from config.json (or an already loaded dict).
        Environment variables win over file values for secrets and endpoints.
        """
        cfg = load_config_json() if data is None else data

        return cls(
            system=SystemSettings(
                PROJECT_NAME=cfg.get("PROJECT_NAME", "ride_booking"),
                VERSION=cfg.get("VERSION", "1.0.0"),
                DEBUG=cfg.get("DEBUG", False),
                ENVIRONMENT=os.getenv("ENVIRONMENT", cfg.get("ENVIRONMENT", "production")),
            ),
            server=ServerSettings(
                HOST=os.getenv("HOST", cfg.get("HOST", "0.0.0.0")),
                PORT=int(os.getenv("PORT", cfg.get("PORT", 5000))),
                ALLOWED_ORIGINS=os.getenv("ALLOWED_ORIGINS") or cfg.get("ALLOWED_ORIGINS", []),
            ),
            logging=LoggingSettings(
                LOG_LEVEL=os.getenv("LOG_LEVEL", cfg.get("LOG_LEVEL", "INFO")),
                LOG_TO_FILE=cfg.get("LOG_TO_FILE", False),
                LOG_FILE_PATH=cfg.get("LOG_FILE_PATH", "logs/ride_booking.log"),
                LOG_FORMAT=cfg.get("LOG_FORMAT", "colored"),
                LOG_MAX_BYTES=cfg.get("LOG_MAX_BYTES", 10485760),
            ),
            database=DatabaseSettings(
                DATABASE_URL=os.getenv("DATABASE_URL", cfg.get("DATABASE_URL", "")),
                DB_MIN_POOL_SIZE=cfg.get("DB_MIN_POOL_SIZE", 2),
                DB_MAX_POOL_SIZE=cfg.get("DB_MAX_POOL_SIZE", 10),
                DB_COMMAND_TIMEOUT=cfg.get("DB_COMMAND_TIMEOUT", 30),
            ),
            geo=GeoSettings(
                GEOCODER_URL=os.getenv("GEOCODER_URL", cfg.get("GEOCODER_URL", "https://nominatim.openstreetmap.org")),
                GEOCODER_USER_AGENT=cfg.get("GEOCODER_USER_AGENT", "RideBookingApp/1.0"),
                GEOCODER_TIMEOUT=cfg.get("GEOCODER_TIMEOUT", 5.0),
                GEOCODER_MIN_INTERVAL=cfg.get("GEOCODER_MIN_INTERVAL", 1.0),
                GEOCODER_LANGUAGE=cfg.get("GEOCODER_LANGUAGE", "en"),
                GEOCODER_COUNTRY_CODES=cfg.get("GEOCODER_COUNTRY_CODES", "in"),
                GEOCODER_VIEWBOX=cfg.get("GEOCODER_VIEWBOX", "68.17665,8.07647,97.40238,37.09662"),
                ROUTER_URL=os.getenv("ROUTER_URL", cfg.get("ROUTER_URL", "https://router.project-osrm.org")),
                ROUTER_TIMEOUT=cfg.get("ROUTER_TIMEOUT", 10.0),
                FALLBACK_SPEED_KMH=cfg.get("FALLBACK_SPEED_KMH", 30.0),
            ),
            fares=FareSettings(
                BASE_FARE=cfg.get("BASE_FARE", 50.0),
                FARE_PER_KM=cfg.get("FARE_PER_KM", 12.0),
                FARE_PER_MINUTE=cfg.get("FARE_PER_MINUTE", 1.0),
                MIN_FARE=cfg.get("MIN_FARE", 80.0),
                SURGE_MULTIPLIER=cfg.get("SURGE_MULTIPLIER", 1.0),
                CURRENCY=cfg.get("CURRENCY", "INR"),
            ),
            auth=AuthSettings(
                TOKEN_SECRET=os.getenv("TOKEN_SECRET", cfg.get("TOKEN_SECRET", "")),
            ),
            bookings=BookingSettings(
                DEFAULT_VEHICLE_TYPE=cfg.get("DEFAULT_VEHICLE_TYPE", "sedan"),
                DEFAULT_PAYMENT_METHOD=cfg.get("DEFAULT_PAYMENT_METHOD", "cash"),
                BOOKING_CODE_ATTEMPTS=cfg.get("BOOKING_CODE_ATTEMPTS", 5),
            ),
        )


@lru_cache()
def get_settings() -> Settings:
    """
    Returns the cached application settings.
    Loads .env from the project root first so that overrides apply.
    """
    from dotenv import load_dotenv

    env_path = get_project_root() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    return Settings.from_config_json()


settings = get_settings()
