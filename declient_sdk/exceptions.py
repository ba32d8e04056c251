"""Exception hierarchy for generated clients.

Covers every failure mode of a remote call:
- Network errors (timeout, connection)
- Error responses (4xx, 5xx)
- Responses that cannot be converted to the declared types

All exceptions carry the request ID and relevant context for debugging.
"""

from typing import Any, Dict, Optional


class ServiceError(Exception):
    """Base exception for all runtime errors of generated clients.

    Attributes:
        message: Human-readable error description
        request_id: Optional request ID for tracing
        context: Additional error context (status codes, etc.)
    """

    def __init__(
        self,
        message: str,
        request_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.request_id = request_id
        self.context = context or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        text = self.message
        if self.request_id:
            text += f" | request_id={self.request_id}"
        if self.context:
            details = ", ".join(f"{key}={value}" for key, value in self.context.items())
            text += f" | context=({details})"
        return text


class ServiceStatusError(ServiceError):
    """The service answered with a non-2xx status."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        request_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        details = dict(context or {})
        if status_code:
            details["status_code"] = status_code
        super().__init__(message, request_id, details)
        self.status_code = status_code


class ServiceClientError(ServiceStatusError):
    """The service rejected the request (4xx status codes).

    Retrying the same request will not help.

    Example:
        >>> try:
        ...     users.get_user("missing")
        ... except ServiceClientError as e:
        ...     print(e.status_code)
        404
    """


class ServiceServerError(ServiceStatusError):
    """The service failed (5xx status codes). May be transient."""


class ServiceTimeoutError(ServiceError):
    """Request exceeded the configured timeout."""

    def __init__(
        self,
        message: str = "Request timed out",
        timeout_seconds: Optional[float] = None,
        request_id: Optional[str] = None,
    ):
        context = {}
        if timeout_seconds is not None:
            context["timeout_seconds"] = timeout_seconds
        super().__init__(message, request_id, context)
        self.timeout_seconds = timeout_seconds


class ServiceConnectionError(ServiceError):
    """The service could not be reached."""
    pass


class HeaderConversionError(ServiceError):
    """A response header could not be converted to its declared type."""

    def __init__(self, header: str, target: str, value: str):
        super().__init__(
            f"Cannot convert header '{header}' to {target}",
            context={"value": value},
        )
        self.header = header
        self.target = target
        self.value = value


class ResponseDecodeError(ServiceError):
    """A response body does not match the declared return type."""

    def __init__(self, message: str, validation_errors: Optional[list] = None):
        context = {}
        if validation_errors:
            context["validation_errors"] = validation_errors
        super().__init__(message, context=context)
        self.validation_errors = validation_errors or []
