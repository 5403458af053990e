"""
HTTP utilities for the span collector.
Provides the default request/response transport, header building and endpoint resolution.
Supports SPANCOLLECTOR_URL with fallback to the OTLP standard endpoint vars.
"""

import logging
import os
from typing import Dict, Optional, Protocol

import requests

from .constants import LOG_TAG, VERSION
from .exceptions import TransportError

logger = logging.getLogger(LOG_TAG)


def get_collector_url(url: Optional[str] = None) -> str:
    """
    Get the collection endpoint URL from parameter or environment variable, with trailing slash removed.

    Checks SPANCOLLECTOR_URL first, then OTEL_EXPORTER_OTLP_TRACES_ENDPOINT, then OTEL_EXPORTER_OTLP_ENDPOINT.

    Returns:
        URL with trailing slash removed, or empty string if none is set.
    """
    if url:
        return url.rstrip("/")

    for env_var in ("SPANCOLLECTOR_URL", "OTEL_EXPORTER_OTLP_TRACES_ENDPOINT", "OTEL_EXPORTER_OTLP_ENDPOINT"):
        value = os.getenv(env_var)
        if value:
            return value.rstrip("/")

    return ""


def build_headers(content_type: str) -> Dict[str, str]:
    """Build HTTP headers for a span batch request."""
    return {
        "Content-Type": content_type,
        "User-Agent": f"spancollector-python/{VERSION}",
    }


def format_http_error(response, operation: str) -> str:
    """
    Format an HTTP error message from a response object.

    Args:
        response: Response object with status_code, reason, and text attributes
        operation: Description of the operation that failed (e.g., "send spans")

    Returns:
        Formatted error message string.
    """
    error_text = response.text if hasattr(response, "text") else "Unknown error"
    status_code = getattr(response, "status_code", getattr(response, "status", "unknown"))
    reason = getattr(response, "reason", "")
    return f"Failed to {operation}: {status_code} {reason} - {error_text[:200]}"


class Transport(Protocol):
    """A single blocking request/response exchange. Raises TransportError on failure."""

    def send(self, url: str, body: bytes, content_type: str, timeout: float) -> None:
        ...

    def close(self) -> None:
        ...


class RequestsTransport:
    """
    Default transport: POSTs the payload with a requests.Session.
    Any 2xx status is success; the response body is not consumed.
    """

    def __init__(self, session: Optional[requests.Session] = None):
        self._session = session or requests.Session()

    def send(self, url: str, body: bytes, content_type: str, timeout: float) -> None:
        try:
            response = self._session.post(url, data=body, headers=build_headers(content_type), timeout=timeout)
        except requests.RequestException as e:
            raise TransportError(f"Network error sending spans to {url}: {type(e).__name__}: {e}") from e
        logger.debug(f"RequestsTransport.send: received response: status={response.status_code}")
        if not response.ok:
            raise TransportError(format_http_error(response, "send spans"), status_code=response.status_code)

    def close(self) -> None:
        self._session.close()
