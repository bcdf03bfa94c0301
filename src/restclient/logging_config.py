"""Logging setup with redaction of credentials.

Request URLs and headers end up in debug logs, so the formatter installed
by :func:`setup_logging` masks bearer/basic credentials, JWTs and secret
query parameters before a record is written.
"""

import logging
import re
import sys
from typing import Any, Dict, Mapping

SENSITIVE_PATTERNS = {
    "jwt_token": re.compile(r"eyJ[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+"),
    "bearer_token": re.compile(r"(Bearer\s+)[A-Za-z0-9._~+/=-]+", re.IGNORECASE),
    "basic_auth": re.compile(r"(Basic\s+)[A-Za-z0-9+/=]+", re.IGNORECASE),
    "query_secret": re.compile(
        r"((?:api_key|apikey|access_token|token|secret|password)=)[^&\s]+",
        re.IGNORECASE,
    ),
}

# Headers that should never be logged
SENSITIVE_HEADERS = {
    "authorization",
    "proxy-authorization",
    "x-api-key",
    "x-auth-token",
    "cookie",
    "set-cookie",
}


def sanitize_string(value: str) -> str:
    """Redact credentials inside ``value``, keeping the surrounding text."""
    if not value:
        return value
    value = SENSITIVE_PATTERNS["jwt_token"].sub("<REDACTED>", value)
    for name in ("bearer_token", "basic_auth", "query_secret"):
        value = SENSITIVE_PATTERNS[name].sub(r"\1<REDACTED>", value)
    return value


def sanitize_headers(headers: Mapping[str, Any]) -> Dict[str, Any]:
    """Copy of ``headers`` with sensitive header values redacted."""
    return {
        name: "<REDACTED>" if name.lower() in SENSITIVE_HEADERS else value
        for name, value in headers.items()
    }


class SanitizingFormatter(logging.Formatter):
    """Formatter that redacts credentials from the rendered message."""

    def format(self, record: logging.LogRecord) -> str:
        return sanitize_string(super().format(record))


_LOGGING_CONFIGURED = False


def setup_logging(level: str = "INFO") -> None:
    """Configure the ``restclient`` logger with one sanitizing stdout handler.

    Calling it again only updates the level.

    :param level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    :type level: str
    """
    global _LOGGING_CONFIGURED

    package_logger = logging.getLogger("restclient")
    package_logger.setLevel(getattr(logging, level.upper()))
    if _LOGGING_CONFIGURED:
        package_logger.debug("Logging already configured, updated level to %s", level)
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        SanitizingFormatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    package_logger.addHandler(handler)
    package_logger.propagate = False
    _LOGGING_CONFIGURED = True
