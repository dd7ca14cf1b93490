"""
Logging utility functions and helpers.
"""

import logging
from typing import Any, Dict, Optional


SENSITIVE_FIELDS = {
    'password', 'token', 'secret', 'api_key', 'auth_token',
    'password_hash', 'credit_card', 'cvv'
}


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Usage:
        from utils.logger import get_logger
        logger = get_logger(__name__)
    """
    return logging.getLogger(name)


def sanitize_log_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Remove sensitive information from log data.

    Passwords are fully redacted; tokens keep their first 8 characters so
    two log lines can still be correlated. Nested dicts, and dicts inside
    lists such as cart or order lines, are walked.
    """
    sanitized = data.copy()

    for key, value in sanitized.items():
        if any(sensitive in key.lower() for sensitive in SENSITIVE_FIELDS):
            if isinstance(value, str):
                if 'token' in key.lower() and len(value) > 8:
                    sanitized[key] = f"{value[:8]}..."
                else:
                    sanitized[key] = "***REDACTED***"

        elif isinstance(value, dict):
            sanitized[key] = sanitize_log_data(value)

        elif isinstance(value, list):
            sanitized[key] = [
                sanitize_log_data(item) if isinstance(item, dict) else item
                for item in value
            ]

    return sanitized


def log_request(
    logger: logging.Logger,
    method: str,
    path: str,
    status_code: int,
    duration_ms: float,
    user_id: Optional[int] = None,
    extra: Optional[Dict[str, Any]] = None
):
    """
    Log an HTTP request in a structured format.

    The level follows the status class: 5xx -> ERROR, 4xx -> WARNING,
    anything else -> INFO.

    Usage:
        log_request(logger, "POST", "/api/cart", 200, 45.2, user_id=123)
    """
    log_data = {
        "http_method": method,
        "path": path,
        "status_code": status_code,
        "duration_ms": round(duration_ms, 2),
    }

    if user_id:
        log_data["user_id"] = user_id

    if extra:
        log_data.update(sanitize_log_data(extra))

    if status_code >= 500:
        logger.error(f"{method} {path} - {status_code}", extra=log_data)
    elif status_code >= 400:
        logger.warning(f"{method} {path} - {status_code}", extra=log_data)
    else:
        logger.info(f"{method} {path} - {status_code}", extra=log_data)
