"""
Module: utils
Purpose: Shared helper utilities for tabl.
"""

import os
from typing import Tuple

MAX_WORKERS_ENV = "TABL_MAX_WORKERS"
MAX_WORKERS_CAP = 256
_MAX_WORKERS: int | None = None
_MAX_WORKERS_SOURCE = "default"


def default_max_workers() -> int:
    return min(32, (os.cpu_count() or 1) + 4)


def _validate_max_workers(value: int) -> int:
    if value < 1 or value > MAX_WORKERS_CAP:
        raise ValueError(f"Max workers must be between 1 and {MAX_WORKERS_CAP}.")
    return value


def configure_max_workers(cli_override: int | None = None) -> tuple[int, str]:
    """
    Determine the concurrency limit for metadata reads.
    Preference order: CLI override > environment variable > default.
    Returns tuple of (limit, source).
    """
    global _MAX_WORKERS, _MAX_WORKERS_SOURCE
    source = "default"
    limit = default_max_workers()

    if cli_override is not None:
        limit = _validate_max_workers(cli_override)
        source = "cli"
    else:
        env_value = os.getenv(MAX_WORKERS_ENV)
        if env_value:
            try:
                limit = _validate_max_workers(int(env_value))
                source = "env"
            except ValueError:
                log_warning(
                    f"Ignoring invalid {MAX_WORKERS_ENV} value '{env_value}'. "
                    f"Expected integer between 1 and {MAX_WORKERS_CAP}."
                )

    _MAX_WORKERS = limit
    _MAX_WORKERS_SOURCE = source
    return limit, source


def current_max_workers() -> int:
    if _MAX_WORKERS is None:
        configure_max_workers(None)
    return _MAX_WORKERS or default_max_workers()


def max_workers_source() -> str:
    return _MAX_WORKERS_SOURCE


COLOR_RESET = "\033[0m"
BOLD = "\033[1m"


def color_256(code: int) -> str:
    return f"\033[38;5;{code}m"


def human_readable_size(bytes: int) -> str:
    """
    Convert byte size into human-readable string.

    Args:
        bytes: Number of bytes.

    Returns:
        Human-readable string representation.
    """
    thresholds: Tuple[Tuple[str, int], ...] = (
        ("TB", 1024**4),
        ("GB", 1024**3),
        ("MB", 1024**2),
        ("KB", 1024),
    )
    for suffix, size in thresholds:
        if bytes >= size:
            value = bytes / size
            return f"{value:.2f} {suffix}"
    return f"{bytes} B"


def format_count(value: int) -> str:
    return f"{value:,}"


def plural(count: int, singular: str, plural_form: str | None = None) -> str:
    if count == 1:
        return singular
    return plural_form or f"{singular}s"


def log_error(message: str):
    """
    Log an error message.

    Args:
        message: Error message to log.
    """
    from . import reporting  # Local import to avoid circular dependency rules

    reporting.write_log([f"[ERROR] {message}"])


def log_warning(message: str):
    """
    Log a warning message.

    Args:
        message: Warning message to log.
    """
    from . import reporting  # Local import to avoid circular dependency rules

    reporting.write_log([f"[WARNING] {message}"])


def log_info(message: str):
    """
    Log an informational message.
    """
    from . import reporting  # Local import to avoid circular dependency rules

    reporting.write_log([f"[INFO] {message}"])

