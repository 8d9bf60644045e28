from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MAX_OUTPUT_BYTES = 10 * 1024 * 1024


class Settings(BaseSettings):
    """Process-level settings.

    Reads from environment variables with the ANY_SCRIPT_MCP_ prefix, so the
    config path list comes from ``ANY_SCRIPT_MCP_CONFIG``.
    """

    model_config = SettingsConfigDict(
        env_prefix="ANY_SCRIPT_MCP_",
        extra="ignore",
    )

    config: str | None = None
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_json: bool = False
    max_output_bytes: int = Field(default=DEFAULT_MAX_OUTPUT_BYTES, ge=1)
