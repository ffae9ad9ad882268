"""Configuration management for trip-settle."""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="TRIP_SETTLE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Minor-unit exponent overrides, e.g. {"HUF": 0}
    currency_exponents: dict[str, int] = {}

    # Logging
    log_level: str = "WARNING"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @field_validator("currency_exponents")
    @classmethod
    def _check_exponents(cls, value: dict[str, int]) -> dict[str, int]:
        normalized = {}
        for code, exponent in value.items():
            if not 0 <= exponent <= 4:
                raise ValueError(f"Exponent for {code} must be between 0 and 4")
            normalized[code.upper()] = exponent
        return normalized

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
        return level


def load_settings() -> Settings:
    """Load application settings from environment variables."""
    try:
        return Settings()
    except Exception as e:
        raise ConfigurationError(
            f"Failed to load settings. Check the TRIP_SETTLE_* environment "
            f"variables and your .env file.\n"
            f"Error: {e}"
        ) from e
