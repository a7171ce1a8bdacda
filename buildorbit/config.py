"""Runtime configuration — env-driven.

Centralized config using pydantic-settings for environment variable
support. Reads from .env file and BUILDORBIT_* environment variables.
"""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict

from buildorbit.models.tree import DuplicatePolicy


class OrbitConfig(BaseSettings):
    """buildorbit configuration with environment variable overrides.

    All settings can be overridden via BUILDORBIT_* environment variables
    or a .env file in the working directory.

    Examples
    --------
    Override via environment::

        export BUILDORBIT_LOG_LEVEL=DEBUG
        export BUILDORBIT_COMPILE_PREFIX=Compiling
        export BUILDORBIT_BUILD_COMMAND='["cargo", "test", "--no-run", "--message-format=json"]'

    Or via .env file::

        BUILDORBIT_REFRESH_HZ=8
        BUILDORBIT_DUPLICATE_POLICY=keep_all
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="BUILDORBIT_",
        env_file_encoding="utf-8",
    )

    # Logging
    log_level: str = "INFO"

    # Dependency listing
    tree_command: list[str] = [
        "cargo", "tree", "-e=no-dev", "--prefix", "depth", "--no-dedupe",
    ]
    duplicate_policy: DuplicatePolicy = DuplicatePolicy.KEEP_FIRST

    # Build tracking
    build_command: list[str] = [
        "cargo", "build", "--color", "never", "--message-format=json",
    ]
    compile_prefix: str = "Compiling"
    artifact_reason: str = "compiler-artifact"
    echo_build_output: bool = False

    # Layout
    root_radius: float = 150.0
    root_angle: float = 1.0
    phase_amplitude: float = 0.1

    # Terminal rendering
    refresh_hz: float = 4.0
    events_per_frame: int = 32
    canvas_width: int = 100
    canvas_height: int = 40


# Module-level singleton; import as `from buildorbit.config import config`
config = OrbitConfig()
