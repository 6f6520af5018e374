"""
Exceptions raised by the assistant orchestration layer.

Backend failures are classified into the ``BackendError`` family so the
dispatcher can turn them into a user-visible Turn while operators still see
the root cause in the logs.
"""
from __future__ import annotations

from typing import Optional


class AssistantError(Exception):
    """
    Base exception for the assistant.

    Args:
        message: Human-readable description of the error.
        cause: Optional underlying exception that triggered the failure.
    """

    def __init__(self, message: str, *, cause: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.__cause__ = cause


class AssistantBusyError(AssistantError):
    """
    Raised when a request is submitted while another is still being built or
    is in flight.
    """


class MissingCredentialsError(AssistantError):
    """
    Raised when no API key is configured at submission time.
    """


class PromptBuildError(AssistantError):
    """
    Raised when the prompt builder receives inputs it cannot turn into a prompt.
    """


class BackendError(AssistantError):
    """
    Base class for failures of the language-model backend.

    Args:
        message: Human-readable description of the error.
        status_code: HTTP status returned by the backend, when there was one.
        cause: Optional underlying exception that triggered the failure.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        super().__init__(message, cause=cause)
        self.status_code = status_code


class BackendTimeoutError(BackendError):
    """
    Raised when a backend request exceeds the allotted timeout window.
    """


class BackendConnectionError(BackendError):
    """
    Raised when the backend cannot be reached due to network connectivity
    issues.
    """


class BackendRateLimitError(BackendError):
    """
    Raised when the backend signals that a rate limit or quota was exceeded.
    """


class BackendResponseError(BackendError):
    """
    Raised when the backend answers with a non-2xx status or a payload that
    cannot be understood.
    """
