"""Custom exceptions for Inkboard.

This module defines the error taxonomy shared by the fetch, validation and
rendering pipeline. Every error carries enough context (status code, message,
field names) to build a user-facing diagnostic.
"""

from typing import Any


class InkboardException(Exception):
    """Base exception class for Inkboard."""

    def __init__(
        self,
        message: str,
        error_code: str,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for logs and API error envelopes."""
        return {"code": self.error_code, "message": self.message, "details": self.details}


# Plugin data exceptions (fetch + response validation)
class PluginDataError(InkboardException):
    """Base for failures while refreshing a plugin's cached payload."""


class TransportFailureError(PluginDataError):
    """Raised when the HTTP layer fails before a response arrives (network, timeout)."""

    def __init__(self, url: str, reason: str, details: dict[str, Any] | None = None):
        self.url = url
        super().__init__(
            message=f"Polling request to {url} failed: {reason}",
            error_code="TRANSPORT_FAILURE",
            status_code=504,
            details=details or {"url": url, "reason": reason},
        )


class HttpStatusError(PluginDataError):
    """Raised when the polling endpoint answers outside the 2xx range."""

    def __init__(self, status: int, details: dict[str, Any] | None = None):
        self.status = int(status)
        super().__init__(
            message=f"HTTP request failed with status: {self.status}",
            error_code="HTTP_STATUS_ERROR",
            status_code=502,
            details=details or {"status": self.status},
        )


class InvalidJsonError(PluginDataError):
    """Raised when the response body is not valid JSON."""

    def __init__(self, details: dict[str, Any] | None = None):
        super().__init__(
            message="Invalid JSON response received from polling URL",
            error_code="INVALID_JSON",
            status_code=502,
            details=details,
        )


class ProxyHttpError(PluginDataError):
    """Raised when a proxy-relay envelope reports a non-200 upstream status."""

    def __init__(self, http_code: Any, details: dict[str, Any] | None = None):
        self.http_code = http_code
        super().__init__(
            message=f"Proxied request failed with HTTP code: {http_code}",
            error_code="PROXY_HTTP_ERROR",
            status_code=502,
            details=details or {"http_code": http_code},
        )


class ProxyContentsInvalidJsonError(PluginDataError):
    """Raised when a proxy-relay envelope carries non-JSON text in ``contents``."""

    def __init__(self, details: dict[str, Any] | None = None):
        super().__init__(
            message="Proxied response contains invalid JSON in contents field",
            error_code="PROXY_CONTENTS_INVALID_JSON",
            status_code=502,
            details=details,
        )


class MissingExpectedFieldsError(PluginDataError):
    """Raised when relayed contents lack the fields of the known upstream schema."""

    def __init__(self, fields: list[str], details: dict[str, Any] | None = None):
        self.fields = list(fields)
        super().__init__(
            message=f"Response data missing expected fields ({', '.join(self.fields)})",
            error_code="MISSING_EXPECTED_FIELDS",
            status_code=502,
            details=details or {"fields": self.fields},
        )


class UpstreamErrorFieldError(PluginDataError):
    """Raised when a successful response carries an ``error``/``message`` field."""

    def __init__(self, upstream_message: Any, details: dict[str, Any] | None = None):
        self.upstream_message = upstream_message
        super().__init__(
            message=f"API returned error response: {upstream_message}",
            error_code="UPSTREAM_ERROR_FIELD",
            status_code=502,
            details=details or {"upstream_message": upstream_message},
        )


class UnexpectedShapeError(PluginDataError):
    """Raised when the payload is an empty container or a lone string in a list."""

    def __init__(self, details: dict[str, Any] | None = None):
        super().__init__(
            message="Response data appears to be in unexpected format",
            error_code="UNEXPECTED_SHAPE",
            status_code=502,
            details=details,
        )


class EmptyResponseError(PluginDataError):
    """Raised when the payload is empty or null."""

    def __init__(self, details: dict[str, Any] | None = None):
        super().__init__(
            message="Response data is empty or null",
            error_code="EMPTY_RESPONSE",
            status_code=502,
            details=details,
        )


# Rendering exceptions
class TemplateExecutionError(InkboardException):
    """Raised when a plugin template or view fails to parse or execute."""

    def __init__(self, reason: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=f"Template execution failed: {reason}",
            error_code="TEMPLATE_EXECUTION_ERROR",
            status_code=500,
            details=details or {"reason": reason},
        )


# Persistence exceptions
class DatabaseConnectionError(InkboardException):
    """Raised when there's a database connection error (network, auth, etc.)."""

    def __init__(self, reason: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=f"Database connection error: {reason}",
            error_code="DATABASE_CONNECTION_ERROR",
            status_code=503,
            details=details or {"reason": reason},
        )


class DatabaseTransactionError(InkboardException):
    """Raised when a database transaction fails (deadlock, timeout, etc.)."""

    def __init__(self, reason: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=f"Database transaction error: {reason}",
            error_code="DATABASE_TRANSACTION_ERROR",
            status_code=500,
            details=details or {"reason": reason},
        )
