# 📄 File: plantscan/shared/config/settings.py
#
# 🧭 Purpose (Layman Explanation):
# The main configuration center that reads settings from environment variables
# and tells the rest of the app where to store data and how long to keep it.
#
# 🧪 Purpose (Technical Summary):
# Pydantic-based settings management with environment variable loading,
# validation, and type safety for storage, cache expiry and logging parameters.
#
# 🔗 Dependencies:
# - pydantic-settings for configuration management
# - python-dotenv for .env file loading
# - typing for type hints
#
# 🔄 Connected Modules / Calls From:
# - plantscan.shared.config.storage (backend selection)
# - plantscan.shared.config.cache (expiry table)
# - plantscan.shared.utils.logging (log level and format)

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses Pydantic for validation and type safety. Settings are loaded
    from environment variables with fallback to .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # =========================================================================
    # APPLICATION SETTINGS
    # =========================================================================

    APP_NAME: str = Field(default="PlantScan", description="Application name")
    APP_VERSION: str = Field(default="1.0.0", description="Application version")
    ENVIRONMENT: str = Field(default="development", description="Runtime environment")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: str = Field(default="json", description="Log output format (json/text)")
    LOG_FILE: Optional[str] = Field(None, description="Optional log file path")

    # =========================================================================
    # STORAGE CONFIGURATION
    # =========================================================================

    STORAGE_BACKEND: str = Field(default="file", description="memory, file or redis")
    STORAGE_PATH: str = Field(
        default=".plantscan/storage",
        description="Directory used by the file storage backend"
    )
    STORAGE_NAMESPACE: str = Field(
        default="plantscan",
        description="Key prefix isolating app keys in shared backends"
    )

    REDIS_URL: Optional[str] = Field(None, description="Redis URL")
    REDIS_HOST: str = Field(default="localhost", description="Redis host")
    REDIS_PORT: int = Field(default=6379, description="Redis port")
    REDIS_DB: int = Field(default=0, description="Redis database number")
    REDIS_PASSWORD: Optional[str] = Field(None, description="Redis password")
    REDIS_MAX_CONNECTIONS: int = Field(default=10, description="Redis connection pool size")

    # =========================================================================
    # CACHE EXPIRY (HOURS)
    # =========================================================================

    CACHE_PLANTS_EXPIRY_HOURS: float = Field(default=24, description="Plant list cache expiry")
    CACHE_LOCATION_EXPIRY_HOURS: float = Field(default=72, description="User location cache expiry")
    CACHE_WEATHER_EXPIRY_HOURS: float = Field(default=1, description="Weather cache expiry")
    CACHE_DISEASES_EXPIRY_HOURS: float = Field(default=168, description="Disease catalogue cache expiry")

    # =========================================================================
    # LOCAL COLLECTIONS
    # =========================================================================

    SCAN_HISTORY_LIMIT: int = Field(default=50, description="Device scan history cap")
    USER_SCAN_HISTORY_LIMIT: int = Field(default=100, description="Per-user scan history cap")

    # =========================================================================
    # VALIDATORS
    # =========================================================================

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        allowed_environments = ["development", "staging", "production", "test"]
        if v.lower() not in allowed_environments:
            raise ValueError(f"Environment must be one of {allowed_environments}")
        return v.lower()

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level value."""
        allowed_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed_levels:
            raise ValueError(f"Log level must be one of {allowed_levels}")
        return v.upper()

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        if v.lower() not in ("json", "text"):
            raise ValueError("Log format must be 'json' or 'text'")
        return v.lower()

    @field_validator("STORAGE_BACKEND")
    @classmethod
    def validate_storage_backend(cls, v: str) -> str:
        """Validate storage backend name."""
        allowed_backends = ["memory", "file", "redis"]
        if v.lower() not in allowed_backends:
            raise ValueError(f"Storage backend must be one of {allowed_backends}")
        return v.lower()

    @field_validator(
        "CACHE_PLANTS_EXPIRY_HOURS",
        "CACHE_LOCATION_EXPIRY_HOURS",
        "CACHE_WEATHER_EXPIRY_HOURS",
        "CACHE_DISEASES_EXPIRY_HOURS"
    )
    @classmethod
    def validate_expiry(cls, v: float) -> float:
        """Expiry windows must be positive."""
        if v <= 0:
            raise ValueError("Cache expiry must be a positive number of hours")
        return v

    @field_validator("SCAN_HISTORY_LIMIT", "USER_SCAN_HISTORY_LIMIT")
    @classmethod
    def validate_history_limit(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("History limit must be positive")
        return v

    # =========================================================================
    # COMPUTED PROPERTIES
    # =========================================================================

    @property
    def redis_url(self) -> str:
        """Get the Redis URL, preferring explicit REDIS_URL."""
        if self.REDIS_URL:
            return self.REDIS_URL

        if self.REDIS_PASSWORD:
            return (
                f"redis://:{self.REDIS_PASSWORD}@{self.REDIS_HOST}:"
                f"{self.REDIS_PORT}/{self.REDIS_DB}"
            )
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENVIRONMENT == "production"


# ============================================================================
# SETTINGS FACTORY
# ============================================================================

@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Uses lru_cache to ensure settings are loaded only once
    and reused throughout the application lifecycle.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
