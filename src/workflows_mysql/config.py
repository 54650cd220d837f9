"""Environment configuration and logging setup for workflows-mysql.

Environment Variables:
    WORKFLOWS_LOG_LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL; default: INFO)
    WORKFLOWS_MYSQL_POOL_SIZE: Pool connection limit (default: 10, clamped to 1-100)
    WORKFLOWS_MYSQL_CONNECTION_TIMEOUT: Connection timeout override in milliseconds
        (default: unset, clamped to 1000-600000)
    WORKFLOWS_MYSQL_CONTINUE_ON_FAIL: Default continue-on-fail policy (default: false)

Settings passed explicitly by the host always take precedence over these.
"""

import logging
import os
import sys

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def get_pool_size() -> int:
    """Get the pool connection limit from environment.

    Reads WORKFLOWS_MYSQL_POOL_SIZE environment variable.
    Default: 10, Valid range: 1-100 (clamped automatically)

    Returns:
        Pool size (1-100)
    """
    try:
        size = int(os.getenv("WORKFLOWS_MYSQL_POOL_SIZE", "10"))
        return max(1, min(100, size))
    except ValueError:
        return 10


def get_connection_timeout() -> int | None:
    """Get the connection timeout override from environment.

    Reads WORKFLOWS_MYSQL_CONNECTION_TIMEOUT environment variable (milliseconds).
    Valid range: 1000-600000 (clamped automatically)

    Returns:
        Timeout in milliseconds, or None when unset or invalid
    """
    value = os.getenv("WORKFLOWS_MYSQL_CONNECTION_TIMEOUT")
    if not value:
        return None
    try:
        return max(1000, min(600000, int(value)))
    except ValueError:
        return None


def get_continue_on_fail() -> bool:
    """Get the default continue-on-fail policy from environment.

    Reads WORKFLOWS_MYSQL_CONTINUE_ON_FAIL ("1", "true", "yes", "on" enable it).

    Returns:
        True if per-item failures should become error records
    """
    value = os.getenv("WORKFLOWS_MYSQL_CONTINUE_ON_FAIL", "false")
    return value.strip().lower() in {"1", "true", "yes", "on"}


def configure_logging() -> None:
    """Configure root logging for hosts that run the node standalone.

    Level comes from WORKFLOWS_LOG_LEVEL (default INFO). Logs go to stderr,
    leaving stdout to the host's item protocol.
    """
    log_level_str = os.getenv("WORKFLOWS_LOG_LEVEL", "INFO").upper()

    # Validate log level and provide feedback
    if log_level_str not in VALID_LOG_LEVELS:
        print(
            f"Warning: Invalid WORKFLOWS_LOG_LEVEL '{log_level_str}'. "
            f"Valid levels: {', '.join(sorted(VALID_LOG_LEVELS))}. "
            "Using INFO.",
            file=sys.stderr,
        )
        log_level_str = "INFO"

    logging.basicConfig(
        level=getattr(logging, log_level_str),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


__all__ = [
    "VALID_LOG_LEVELS",
    "get_pool_size",
    "get_connection_timeout",
    "get_continue_on_fail",
    "configure_logging",
]
