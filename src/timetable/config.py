"""Timetable configuration loaded from environment variables.

Values come from the environment or a .env file in the project root.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class TimetableConfig(BaseSettings):
    """Console configuration.

    Only the two Supabase values are required to talk to the backend; every
    other field has the value the console uses in production. Kiosks read
    a .env file next to the scripts.
    """

    # Supabase (hosted tables + RPC functions)
    supabase_url: str = Field(
        default="",
        description="Supabase project URL, e.g. https://xyz.supabase.co",
    )
    supabase_anon_key: str = Field(
        default="",
        description="Supabase anonymous API key",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        description="Timeout for a single backend request",
    )

    # Polling and clocks
    refresh_interval_seconds: float = Field(
        default=60.0,
        description="How often views refetch their data from the backend",
    )
    clock_interval_seconds: float = Field(
        default=1.0,
        description="Tick of the live clock in the presentation view",
    )

    # Week grid
    grid_first_hour: int = Field(
        default=7,
        description="First hour row shown in the week grid",
    )
    grid_last_hour: int = Field(
        default=24,
        description="Last hour row shown in the week grid (24 = midnight)",
    )
    hour_height_px: int = Field(
        default=80,
        description="Pixel height of one hour row, used for card heights",
    )

    # Session
    state_dir: str = Field(
        default="data/state",
        description="Directory for the persisted console session",
    )
    max_session_age_hours: int = Field(
        default=24,
        description="Maximum age of a saved session before requiring a new login",
    )

    # Logging
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format (for production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    model_config = {
        "env_prefix": "",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @field_validator("supabase_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.strip().rstrip("/")

    @field_validator("grid_last_hour")
    @classmethod
    def _check_grid_hours(cls, value: int) -> int:
        if not 1 <= value <= 24:
            raise ValueError("grid_last_hour must be between 1 and 24")
        return value

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_anon_key)


# Singleton pattern
_config: TimetableConfig | None = None


def get_config() -> TimetableConfig:
    """Get the timetable configuration singleton.

    Returns:
        TimetableConfig: Configuration instance
    """
    global _config
    if _config is None:
        _config = TimetableConfig()
    return _config


def reset_config() -> None:
    """Drop the cached configuration so the next get_config() re-reads the environment."""
    global _config
    _config = None
