"""
Error types for the gateway.
HTTP-facing errors carry the status code the envelope is sent with; token and
upstream adapter errors are raised by the lower layers and translated by handlers.
"""


class ConfigurationError(Exception):
    """Required configuration is missing or malformed. Fatal at startup."""


class GatewayError(Exception):
    """Base for errors that are turned into a response envelope."""

    status_code = 500

    def __init__(self, message: str = "Please try again later") -> None:
        self.message = message
        super().__init__(message)


class AuthenticationError(GatewayError):
    status_code = 401


class AuthorizationError(GatewayError):
    status_code = 403


class ValidationError(GatewayError):
    status_code = 400


class NotFoundError(GatewayError):
    # Upstream reports no matching data; sent as a client error, not 404.
    status_code = 400


class UpstreamError(GatewayError):
    status_code = 500


# --- token errors ---


class TokenError(Exception):
    """Token could not be verified."""


class InvalidTokenError(TokenError):
    """Bad signature, malformed, expired, or missing claims."""


class UnexpectedAlgorithmError(TokenError):
    """Token header names an algorithm outside the HMAC family."""

    def __init__(self, algorithm: str | None) -> None:
        self.algorithm = algorithm
        super().__init__(f"unexpected signing method: {algorithm}")


# --- upstream adapter errors ---


class TransportError(UpstreamError):
    """Request never produced a response (connect failure, timeout)."""


class UnexpectedStatusError(UpstreamError):
    def __init__(self, status_code: int) -> None:
        self.upstream_status = status_code
        super().__init__(f"unexpected status {status_code}")


class DecodeError(UpstreamError):
    """Upstream body is not JSON or not the expected shape."""


class PayloadEncodingError(UpstreamError):
    """Outgoing payload could not be serialized to JSON."""


class UnexpectedResponseShapeError(UpstreamError):
    pass


class NoDataError(UpstreamError):
    """Upstream answered 200 but the result is effectively empty."""

    def __init__(self, message: str = "no data retrieved in response") -> None:
        super().__init__(message)
