"""Domain-specific errors for phue-exporter."""

from __future__ import annotations


class PhueExporterError(Exception):
    """Base error for phue-exporter."""


class ConfigError(PhueExporterError):
    """Raised when settings are missing or the config file is invalid."""


class TransportError(PhueExporterError):
    """Base transport error."""


class TransportConnectError(TransportError):
    """Raised when the bridge cannot be reached (refused, DNS, unreachable)."""


class TransportSendError(TransportError):
    """Raised when a request fails for any other transport-level reason."""


class TransportTimeoutError(TransportError):
    """Raised when the bridge does not answer within the request timeout."""


class RegisterError(PhueExporterError):
    """Base error for the pairing handshake."""


class UrlParsingError(RegisterError):
    """Raised when the bridge address cannot be composed into a URL."""


class SendingRequestError(RegisterError):
    """Raised when the pairing request fails at the transport level."""

    def __init__(self, cause: TransportError) -> None:
        super().__init__(f"Sending pairing request failed: {cause}")
        self.cause = cause


class RegisterProtocolError(RegisterError):
    """Raised when the bridge answers pairing with an unexpected response."""


class HueError(RegisterError):
    """Raised when the bridge explicitly rejects pairing with a coded error."""

    def __init__(self, description: str, id: int) -> None:
        super().__init__(f"Bridge error {id}: {description}")
        self.description = description
        self.id = id


class BridgeReadError(PhueExporterError):
    """Raised when an authenticated read from the bridge fails for any reason."""
