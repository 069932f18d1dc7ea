"""Application configuration management using Pydantic Settings."""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MAX_MONTE_CARLO_SIMULATIONS = 10000


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Application Environment
    app_env: str = Field(default="development", alias="APP_ENV")

    # Flask Configuration
    secret_key: str = Field(default="dev-secret-key", alias="SECRET_KEY")

    # Logging Configuration
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Simulation Configuration
    monte_carlo_simulations: int = Field(default=1000, alias="MONTE_CARLO_SIMULATIONS")
    survivor_goal_pct: float = Field(
        default=85.0, ge=0, le=100, alias="SURVIVOR_GOAL_PCT"
    )

    @field_validator("secret_key")
    @classmethod
    def validate_secret_key(cls, v):
        """Ensure SECRET_KEY is not a placeholder."""
        if not v or v == "your-secret-key-here-change-in-production":
            raise ValueError("SECRET_KEY must be set to a secure value")
        return v

    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, v):
        """Validate application environment."""
        allowed_envs = {"development", "testing", "production"}
        if v not in allowed_envs:
            raise ValueError(f"APP_ENV must be one of {allowed_envs}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        allowed_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed_levels:
            raise ValueError(f"LOG_LEVEL must be one of {allowed_levels}")
        return v.upper()

    @field_validator("monte_carlo_simulations")
    @classmethod
    def validate_monte_carlo_simulations(cls, v):
        """Validate the default simulation count."""
        check_simulation_count(v)
        return v


def check_simulation_count(value: int) -> None:
    """Raise ValueError unless value is a simulation count within the ceiling."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError("Simulation count must be an integer")
    if not 1 <= value <= MAX_MONTE_CARLO_SIMULATIONS:
        raise ValueError(
            f"Simulation count must be between 1 and {MAX_MONTE_CARLO_SIMULATIONS}"
        )


def get_settings(env_file: Optional[str] = None) -> Settings:
    """Get application settings instance."""
    if env_file is not None:
        return Settings(_env_file=env_file)
    return Settings()


_settings: Optional[Settings] = None


def get_global_settings() -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = get_settings()
    return _settings


def reset_global_settings() -> None:
    """Reset global settings instance (useful for testing)."""
    global _settings
    _settings = None
