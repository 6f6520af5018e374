"""Map whatever a backend raised onto the BackendError family."""
import socket
from typing import Tuple

from requests import exceptions as requests_exceptions

from src.hyperbeam.models.exceptions import (
    AssistantError,
    BackendConnectionError,
    BackendError,
    BackendRateLimitError,
    BackendResponseError,
    BackendTimeoutError,
    PromptBuildError,
)

_CONNECTION_INDICATORS: Tuple[str, ...] = (
    "connection reset",
    "connection aborted",
    "connection refused",
    "temporary failure in name resolution",
    "network unreachable",
    "connection closed",
    "dns failure",
)


def classify_backend_exception(exc: Exception) -> AssistantError:
    """
    Classify an exception raised during a backend call.

    Args:
        exc: The exception raised by the backend or the transport.

    Returns:
        The exception itself when it already belongs to the assistant's
        hierarchy, otherwise a BackendError subclass chained to it.
    """
    if isinstance(exc, (BackendError, PromptBuildError)):
        return exc

    if _is_timeout_error(exc):
        return BackendTimeoutError(f"Backend request timed out: {exc}", cause=exc)

    if _is_rate_limit_error(exc):
        return BackendRateLimitError(f"Backend rate limit encountered: {exc}", status_code=429, cause=exc)

    if _is_connection_error(exc):
        return BackendConnectionError(f"Could not reach the backend: {exc}", cause=exc)

    if isinstance(exc, (requests_exceptions.HTTPError, ValueError, KeyError, TypeError)):
        status_code = getattr(getattr(exc, "response", None), "status_code", None)
        return BackendResponseError(f"Malformed backend response: {exc}", status_code=status_code, cause=exc)

    return BackendError(f"Unhandled backend error: {exc}", cause=exc)


def _is_timeout_error(exc: Exception) -> bool:
    if isinstance(exc, (TimeoutError, socket.timeout, requests_exceptions.Timeout)):
        return True
    message = str(exc).lower()
    return "timeout" in message or "timed out" in message


def _is_rate_limit_error(exc: Exception) -> bool:
    if isinstance(exc, requests_exceptions.HTTPError):
        status_code = getattr(getattr(exc, "response", None), "status_code", None)
        if status_code == 429:
            return True
    message = str(exc).lower()
    return "rate limit" in message or "quota" in message


def _is_connection_error(exc: Exception) -> bool:
    if isinstance(exc, (ConnectionError, socket.gaierror)):
        return True
    connection_types = (
        requests_exceptions.ConnectionError,
        requests_exceptions.ProxyError,
        requests_exceptions.SSLError,
        requests_exceptions.ChunkedEncodingError,
    )
    if isinstance(exc, connection_types):
        return True
    message = str(exc).lower()
    return any(indicator in message for indicator in _CONNECTION_INDICATORS)
