from __future__ import annotations


class RelayError(Exception):
    """Base class for errors that map onto an HTTP status and the error envelope."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(RelayError):
    status_code = 400


class AuthError(RelayError):
    status_code = 401


class RouteNotFound(RelayError):
    status_code = 404

    def __init__(self, message: str = "Not Found") -> None:
        super().__init__(message)


class ConfigurationError(RelayError):
    status_code = 500


class UpstreamError(RelayError):
    """The remote store or the SMS provider reported a failure. Never retried."""

    status_code = 500


class RemoteCallError(UpstreamError):
    pass


class SendError(UpstreamError):
    pass
