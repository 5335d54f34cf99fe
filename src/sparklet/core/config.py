"""Configuration Management."""

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Engine settings from environment."""

    model_config = SettingsConfigDict(
        env_prefix="SPARKLET_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra environment variables
    )

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    json_logs: bool = Field(default=False, description="Use JSON log format")

    # Interpreter budget
    max_steps: int = Field(default=10_000, gt=0, description="Operations allowed per script invocation")
    max_call_depth: int = Field(default=32, gt=0, description="Nested closure/helper call limit")

    # Definition limits
    max_definition_size: int = Field(default=256 * 1024, gt=0, le=1024 * 1024, description="Max definition size (bytes)")
    max_json_depth: int = Field(default=32, gt=0, le=64, description="Max definition nesting depth")

    # Caching
    enable_cache: bool = Field(default=True, description="Cache compiled scripts and expressions")
    cache_size: int = Field(default=512, gt=0, description="Compiled program cache size")

    # Host
    persist_state: bool = Field(default=True, description="Snapshot State after every mutation")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
