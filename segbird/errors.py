# segbird/errors.py

from typing import Optional


class SegbirdError(Exception):
    """Base class for every error raised by segbird."""


class ConfigurationError(SegbirdError):
    """Invalid or missing settings. Raised at startup; do not continue."""


class InvalidEventError(SegbirdError, ValueError):
    """Event name that cannot be used as a single route segment."""


class ServiceNotConfiguredError(SegbirdError):
    def __init__(self, service: str):
        super().__init__(f'The service "{service}" has not been configured.')
        self.service = service


class ServiceUnavailableError(SegbirdError):
    status = 503

    def __init__(self, service: str):
        super().__init__(f"Service {service} could not be reached or is down.")
        self.service = service


class RemoteError(SegbirdError):
    """The remote service answered with something other than 200."""

    def __init__(self, status_code: int, body: Optional[str] = None):
        super().__init__(
            f"The service failed with error code {status_code}. Message: {body or ''}"
        )
        self.status_code = status_code
        self.body = body


class TokenVerificationError(SegbirdError):
    """Inbound token is missing, malformed, expired or badly signed."""


class HandlerError(SegbirdError):
    """The subscriber callback raised; the original error is the __cause__."""
