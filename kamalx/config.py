"""Dashboard configuration — env-driven.

Centralized config using pydantic-settings.  Reads from a .env file and
KAMALX_* environment variables; CLI options override per invocation.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class DashboardConfig(BaseSettings):
    """Dashboard settings with environment variable overrides.

    Examples
    --------
    Override via environment::

        export KAMALX_COMMAND=bin/kamal
        export KAMALX_LOG_FILE=/tmp/kamalx.log
        export KAMALX_LOG_LEVEL=DEBUG

    Or via .env file::

        KAMALX_BLINK_INTERVAL=0.25
        KAMALX_HOLD_ON_FINISH=false
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="KAMALX_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Wrapped command
    command: str = "kamal"

    # Run loop
    blink_interval: float = 0.5
    shutdown_grace_seconds: float = 2.0
    force_exit_seconds: float = 5.0  # hard exit if Ctrl+C does not finish cleanly
    hold_on_finish: bool = True

    # Layout
    progress_height: int = 4
    spacer_height: int = 1

    # Logging — the dashboard owns the terminal, so logs only go to a file
    log_level: str = "INFO"
    log_file: Path | None = None


# Module-level singleton — import as `from kamalx.config import config`
config = DashboardConfig()
