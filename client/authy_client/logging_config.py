"""
Logging configuration for the Authy client

The library itself only creates module loggers. setup_logging() is for
applications and the authy-cli entry point that want a configured root
logger with the same format everywhere.
"""

import logging
import logging.handlers
import os
import sys
from datetime import datetime, timezone

from .exceptions import ConfigurationError

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def setup_logging(log_level=None, log_file=None, max_bytes=10*1024*1024, backup_count=5):
    """
    Set up logging configuration for Authy client applications.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to log file (if None, logs to stderr)
        max_bytes: Maximum size of log file before rotation (default 10MB)
        backup_count: Number of backup log files to keep (default 5)
    """

    # Default log level from environment or WARNING
    if log_level is None:
        log_level = os.environ.get('AUTHY_LOG_LEVEL', 'WARNING')
    log_level = str(log_level).upper()
    if log_level not in LOG_LEVELS:
        raise ConfigurationError(f"Unknown log level: {log_level} (expected one of {', '.join(LOG_LEVELS)})")

    if log_file is None:
        log_file = os.environ.get('AUTHY_LOG_FILE')

    formatter = logging.Formatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level))

    # Clear any existing handlers
    root_logger.handlers.clear()

    if log_file:
        handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count
        )
    else:
        # stdout is reserved for command output
        handler = logging.StreamHandler(sys.stderr)

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    logger = logging.getLogger(__name__)
    logger.debug(f"Logging initialized - Level: {log_level}, Output: {log_file or 'stderr'}")

    return logger


def get_logger(name):
    """
    Get a logger instance for a specific module.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def log_auth_event(operation, status, success, user_id=None, error=None):
    """
    Log the outcome of an Authy API operation as key=value pairs.

    Args:
        operation: Operation name (e.g. 'verify_token', 'send_sms')
        status: StatusCode of the result
        success: The result's success flag
        user_id: Authy user id, if the operation has one
        error: Error message if applicable
    """
    logger = logging.getLogger('authy')

    log_data = {
        'operation': operation,
        'status': getattr(status, 'value', status),
        'success': success,
        'timestamp': datetime.now(timezone.utc).isoformat(),
    }

    if user_id:
        log_data['user_id'] = user_id
    if error:
        log_data['error'] = error

    log_message = ' '.join([f"{k}={v}" for k, v in log_data.items()])

    if log_data['status'] == 'success':
        logger.info(f"AUTHY: {log_message}")
    else:
        logger.warning(f"AUTHY: {log_message}")
