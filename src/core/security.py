"""
Redaction helpers for logs and error messages.

The reward distributor holds a deployer private key and the alert webhook
may carry a token in its URL; everything that reaches a log line or an error
body passes through these helpers first.
"""

import logging
import re
from typing import Any, Literal, Optional

# Patterns to detect and redact sensitive information
SENSITIVE_PATTERNS = [
    # Private keys assigned to key-like names (bare tx hashes are left alone)
    (r'(private[_-]?key|deployer[_-]?key)["\']?\s*[:=]\s*["\']?0x[a-fA-F0-9]{64}', r'\1=0x*************REDACTED*************'),
    # Generic secrets in config dumps
    (r'["\']?(api[_-]?key|api[_-]?secret|secret[_-]?key|password|access[_-]?token|auth[_-]?token)["\']?\s*[:=]\s*["\']?[^"\'\s,}]+["\']?', '***REDACTED***'),
    # Bearer tokens
    (r'Bearer [a-zA-Z0-9\-._~+/]+=*', 'Bearer ***REDACTED***'),
]

SENSITIVE_KEYS = {
    'private_key', 'privatekey', 'private-key',
    'deployer_private_key',
    'api_key', 'apikey', 'api-key',
    'secret', 'password', 'access_token', 'auth_token',
    'authorization',
}


class RedactingFormatter(logging.Formatter):
    """
    Logging formatter that redacts sensitive information.

    The formatted record is scanned with ``SENSITIVE_PATTERNS`` before it is
    handed to the stream.
    """

    def __init__(
        self,
        fmt: Optional[str] = None,
        datefmt: Optional[str] = None,
        style: Literal['%', '{', '$'] = '%'
    ) -> None:
        super().__init__(fmt, datefmt, style)

    def format(self, record: logging.LogRecord) -> str:
        return redact_string(super().format(record))


def redact_dict(data: dict[str, Any], additional_keys: Optional[set[str]] = None) -> dict[str, Any]:
    """
    Redact sensitive values from a dictionary.

    Args:
        data: Dictionary to redact
        additional_keys: Additional keys to redact beyond the default list

    Returns:
        Dictionary with sensitive values redacted
    """
    if not isinstance(data, dict):
        return data

    sensitive_keys = set(SENSITIVE_KEYS)
    if additional_keys:
        sensitive_keys.update(additional_keys)

    redacted: dict[str, Any] = {}
    for key, value in data.items():
        key_lower = str(key).lower()
        if any(sensitive in key_lower for sensitive in sensitive_keys):
            if isinstance(value, str) and len(value) > 10:
                redacted[key] = f"{value[:4]}...{value[-4:]} ***REDACTED***"
            else:
                redacted[key] = "***REDACTED***"
        elif isinstance(value, dict):
            redacted[key] = redact_dict(value, additional_keys)
        elif isinstance(value, list):
            redacted[key] = [
                redact_dict(item, additional_keys) if isinstance(item, dict) else item
                for item in value
            ]
        else:
            redacted[key] = value

    return redacted


def redact_string(value: str) -> str:
    """Redact sensitive information from a string."""
    for pattern, replacement in SENSITIVE_PATTERNS:
        value = re.sub(pattern, replacement, value, flags=re.IGNORECASE)
    return value


def configure_secure_logging(level: str = "INFO", fmt: str | None = None) -> logging.Logger:
    """
    Configure the root logger with a redacting console handler.

    Called once during application startup.

    Returns:
        The configured root logger
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(
        RedactingFormatter(
            fmt=fmt or '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S',
        )
    )
    root_logger.addHandler(console_handler)
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    return root_logger


def sanitize(data: Any) -> Any:
    """
    Sanitize data for logging by redacting sensitive information.

    Args:
        data: Any data structure to sanitize

    Returns:
        Sanitized version of the data
    """
    if isinstance(data, str):
        return redact_string(data)
    elif isinstance(data, dict):
        return redact_dict(data)
    elif isinstance(data, list):
        return [sanitize(item) for item in data]
    else:
        return data
