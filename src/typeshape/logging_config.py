"""
Logging setup for typeshape.

stdout carries the rendered tree, so log sinks only ever write elsewhere:
the console handler goes to stderr and the opt-in file log to
``.typeshape/logs/``. Records bound by ``@trace`` (``traced_function``,
``status``, ``duration_seconds``) get a timing suffix on the console and
keep those fields as structured JSON in the file log.
"""

import os
import sys
from typing import Optional

from loguru import logger

LOG_LEVEL_ENV = "TYPESHAPE_LOG_LEVEL"
DEFAULT_LEVEL = "INFO"

_CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)
_TRACE_SUFFIX = " <dim>[{extra[status]} in {extra[duration_seconds]:.4f}s]</dim>"

# Flag to track if logging has been configured
_logging_configured = False


def _env_flag(key: str) -> bool:
    return os.getenv(key, "").lower() in ("1", "true", "yes")


def resolve_level(level: Optional[str] = None) -> str:
    """
    Pick the console level: explicit argument, then TYPESHAPE_LOG_LEVEL, then INFO.

    Names loguru does not know fall back to INFO.
    """
    name = (level or os.getenv(LOG_LEVEL_ENV) or DEFAULT_LEVEL).upper()
    try:
        logger.level(name)
    except ValueError:
        return DEFAULT_LEVEL
    return name


def console_format(record: dict) -> str:
    """loguru format callable: traced calls carry their status and duration."""
    template = _CONSOLE_FORMAT
    if "duration_seconds" in record["extra"]:
        template += _TRACE_SUFFIX
    return template + "\n{exception}"


def setup_logging(level=None, suppress_console=None, enable_file_logging=None, force=False):
    """
    Configures the global logger.

    Args:
        level: Console level. If None, TYPESHAPE_LOG_LEVEL or INFO.
        suppress_console: If True, no console handler. If None, check TYPESHAPE_MACHINE_MODE env var.
        enable_file_logging: If True, add the rotating file log. If None, check TYPESHAPE_FILE_LOGGING env var.
        force: Reconfigure even if logging was already set up (the CLI switches modes after import).
    """
    global _logging_configured

    if _logging_configured and not force:
        return
    _logging_configured = True

    logger.remove()

    if suppress_console is None:
        suppress_console = _env_flag("TYPESHAPE_MACHINE_MODE")

    if not suppress_console:
        logger.add(sys.stderr, level=resolve_level(level), format=console_format, colorize=True)

    if enable_file_logging is None:
        enable_file_logging = _env_flag("TYPESHAPE_FILE_LOGGING")

    if enable_file_logging:
        from typeshape.paths import get_paths
        paths = get_paths()
        paths.ensure_dirs()

        # serialize keeps the @trace fields queryable
        logger.add(
            paths.logs_dir / "typeshape.log",
            level="DEBUG",
            rotation="10 MB",
            retention="1 day",
            compression="gz",
            catch=True,
            serialize=True,
        )


# Configure the logger on import (will check env var for machine mode)
setup_logging()
