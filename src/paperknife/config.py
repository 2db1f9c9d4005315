"""Runtime configuration.

Values come from constructor arguments, then ``PAPERKNIFE_*`` environment
variables, then the defaults below. Nested fields use ``__`` as the
delimiter, e.g. ``PAPERKNIFE_RECONSTRUCTION__TIMEOUT_SEC=120``.
"""

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ReconstructionConfig(BaseModel):
    """Isolated reconstruction context settings.

    Attributes:
        start_method: multiprocessing start method for the context process
        timeout_sec: Seconds before a silent context is torn down (None disables)
        poll_interval_sec: How often the caller checks for messages and cancellation
        cancel_grace_sec: Time a cancelled context gets to exit on its own
    """

    start_method: Literal["spawn", "fork", "forkserver"] = "spawn"
    timeout_sec: float | None = 300.0
    poll_interval_sec: float = 0.05
    cancel_grace_sec: float = 1.0


class OutputConfig(BaseModel):
    """Names used for delivered files."""

    compressed_archive_name: str = "paperknife-compressed.zip"
    grayscale_archive_name: str = "paperknife-grayscale.zip"
    default_base_name: str = "paperknife"


class Settings(BaseSettings):
    """Engine settings (supports environment variable overrides)."""

    default_tier: Literal["high", "medium", "low"] = "medium"
    reconstruction: ReconstructionConfig = Field(default_factory=ReconstructionConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    model_config = SettingsConfigDict(
        env_prefix="PAPERKNIFE_",
        env_nested_delimiter="__",
    )


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
