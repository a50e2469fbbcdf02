# =============================================================================
# core/config.py  —  Runtime Settings
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Collects the handful of knobs the server has into one frozen Settings
#   object, read once at startup.
#
# ENVIRONMENT VARIABLES (a .env file in the working directory is honored):
#   REPOMIX_COMMAND           Base command, default "npx repomix"
#   REPOMIX_TIMEOUT           Seconds before repomix is killed, default 600
#                             ("0" = wait forever)
#   REPOMIX_MAX_OUTPUT_BYTES  Largest output "pack" will return, default 0
#                             ("0" = no limit)
#   REPOMIX_MCP_LOG_LEVEL     stderr log level, default INFO
#
# THE ALLOWED DIRECTORY:
#   Always the directory the server was launched from.  There is no variable
#   for it and no way to change it after startup.
# =============================================================================

import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from dotenv import find_dotenv, load_dotenv


DEFAULT_COMMAND = "npx repomix"
DEFAULT_TIMEOUT_SECONDS = 600.0


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration.  Immutable once built."""

    allowed_directory: Path
    command: tuple[str, ...] = field(default_factory=lambda: tuple(shlex.split(DEFAULT_COMMAND)))
    timeout: Optional[float] = DEFAULT_TIMEOUT_SECONDS
    max_output_bytes: Optional[int] = None
    log_level: str = "INFO"


def _parse_limit(env: Mapping[str, str], name: str, default: str, cast):
    """Read a non-negative number where 0 means "no limit"."""
    raw = env.get(name, default).strip()
    try:
        value = cast(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {raw!r}")
    return value or None


def load_settings(
    env: Optional[Mapping[str, str]] = None,
    allowed_directory: Optional[Path] = None,
) -> Settings:
    """Build Settings from the environment.

    Args:
        env: Variables to read.  Defaults to ``os.environ`` after loading
             any ``.env`` file.
        allowed_directory: Override for the access boundary.  Defaults to
             the current working directory.

    Raises:
        ValueError: If a numeric variable is malformed or the command is empty.
    """
    if env is None:
        load_dotenv(find_dotenv(usecwd=True))
        env = os.environ

    command = tuple(shlex.split(env.get("REPOMIX_COMMAND", DEFAULT_COMMAND)))
    if not command:
        raise ValueError("REPOMIX_COMMAND must not be empty")

    return Settings(
        allowed_directory=allowed_directory or Path.cwd(),
        command=command,
        timeout=_parse_limit(env, "REPOMIX_TIMEOUT", str(DEFAULT_TIMEOUT_SECONDS), float),
        max_output_bytes=_parse_limit(env, "REPOMIX_MAX_OUTPUT_BYTES", "0", int),
        log_level=env.get("REPOMIX_MCP_LOG_LEVEL", "INFO").upper(),
    )
