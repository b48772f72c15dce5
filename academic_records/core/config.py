"""Core settings for the academic records package.

Loads environment variables (and an optional ``.env`` file) that control
how the host application wires up logging around the domain core.
"""
from pathlib import Path
from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings

from academic_records.core.logging import setup_logging


ROOT = Path(__file__).resolve().parents[2]
load_dotenv(dotenv_path=ROOT / ".env", override=False)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_json: bool = Field(default=False, alias="LOG_JSON")

    class Config:
        case_sensitive = False
        env_file = ".env"
        populate_by_name = True
        extra = "ignore"

    @property
    def effective_log_level(self) -> str:
        """DEBUG forces verbose logging regardless of LOG_LEVEL."""
        return "DEBUG" if self.debug else self.log_level.upper()

    def validate_required_settings(self):
        """Validate that settings hold usable values."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if self.log_level.upper() not in valid_levels:
            raise ValueError(
                f"LOG_LEVEL must be one of {', '.join(sorted(valid_levels))}, "
                f"got {self.log_level!r}."
            )


# Global settings instance
settings = Settings()


def configure_logging(app_settings: Settings = None):
    """Apply the logging settings to the root logger.

    Hosts call this once at startup; the domain modules only ever obtain
    loggers and never configure handlers themselves.
    """
    app_settings = app_settings or settings
    app_settings.validate_required_settings()
    return setup_logging(
        level=app_settings.effective_log_level,
        json_format=app_settings.log_json,
    )
