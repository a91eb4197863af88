"""Custom exception hierarchy for the provider."""

from __future__ import annotations

from pathlib import Path


class ProviderError(Exception):
    """Base provider exception."""

    def __init__(self, detail: str, error_code: str = "PROVIDER_ERROR"):
        self.detail = detail
        self.error_code = error_code
        super().__init__(detail)


class TransportError(ProviderError):
    """Connection failure, timeout or an undecodable response body."""

    def __init__(self, detail: str = "Transport failure"):
        super().__init__(detail=detail, error_code="TRANSPORT_ERROR")


class RequestCancelledError(TransportError):
    def __init__(self, detail: str = "Request cancelled"):
        super().__init__(detail=detail)
        self.error_code = "CANCELLED"


class APIError(ProviderError):
    """Error status returned by the platform. ``body`` is kept verbatim.

    A 404 is only raised here when the call does not read it as absence.
    """

    def __init__(self, status_code: int, body: str, detail: str | None = None):
        self.status_code = status_code
        self.body = body
        super().__init__(
            detail=detail or f"API error: status code {status_code}, body: {body}",
            error_code="API_ERROR",
        )


class AmbiguousResultError(ProviderError):
    def __init__(self, detail: str = "Lookup returned more than one match"):
        super().__init__(detail=detail, error_code="AMBIGUOUS_RESULT")


class LocalIOError(ProviderError):
    """A local source file could not be opened, read or hashed."""

    def __init__(self, path: str | Path, detail: str):
        self.path = Path(path)
        super().__init__(detail=detail, error_code="LOCAL_IO_ERROR")


class ConfigurationError(ProviderError):
    def __init__(self, detail: str = "Invalid configuration"):
        super().__init__(detail=detail, error_code="CONFIGURATION_ERROR")
