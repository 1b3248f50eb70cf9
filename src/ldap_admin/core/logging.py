"""
Logging for the command-line tools.

Each command runs once and reports its own failure as a single
``Error: <message>`` line, so the console only shows log records when
``verbose`` is requested. The optional log file always receives records at
the configured level, audit lines included.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

from ..config.models import LoggingConfig

LOGGER_NAME = "ldap_admin"
AUDIT_LOGGER_NAME = f"{LOGGER_NAME}.audit"

LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5


def _console_handler(formatter: logging.Formatter, verbose: bool) -> logging.Handler:
    # stdout carries command output
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(logging.DEBUG if verbose else logging.CRITICAL)
    handler.setFormatter(formatter)
    return handler


def _file_handler(path: str, formatter: logging.Formatter, level: int) -> logging.Handler:
    log_file = Path(path)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
        encoding='utf-8'
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(config: LoggingConfig, verbose: bool = False) -> logging.Logger:
    """
    Configure the ``ldap_admin`` logger for one command run.

    Safe to call more than once; handlers from an earlier call are replaced.

    Args:
        config: Logging configuration
        verbose: Echo DEBUG records to stderr

    Returns:
        The package logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    file_level = getattr(logging, config.level)
    logger.setLevel(logging.DEBUG if verbose else file_level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(config.format)
    logger.addHandler(_console_handler(formatter, verbose))

    if config.file:
        try:
            logger.addHandler(_file_handler(config.file, formatter, file_level))
        except OSError as e:
            logger.warning(f"Could not open log file {config.file}: {e}")

    logging.getLogger("ldap3").setLevel(logging.WARNING)

    logger.debug(f"Logging at {config.level}, verbose={verbose}, file={config.file}")
    return logger


def get_logger(name: str) -> logging.Logger:
    """Child of the package logger, so it shares the command's handlers."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


def log_ldap_operation(operation: str,
                       dn: str,
                       success: bool,
                       details: Optional[str] = None,
                       username: Optional[str] = None) -> None:
    """
    Write an audit line for a directory change or lookup.

    Lines read ``LDAP <OPERATION> SUCCESS|FAILED: <dn> [user=<username>] - <details>``.
    Successes are logged at INFO, failures at WARNING.

    Args:
        operation: Tool operation, e.g. ``create_user`` or ``remove_group_member``
        dn: Entry the operation targeted
        success: Whether the operation succeeded
        details: Free-form detail; never a credential
        username: Username the operation was run for
    """
    message = f"LDAP {operation.upper()} {'SUCCESS' if success else 'FAILED'}: {dn}"
    if username:
        message += f" [user={username}]"
    if details:
        message += f" - {details}"

    logging.getLogger(AUDIT_LOGGER_NAME).log(logging.INFO if success else logging.WARNING, message)
