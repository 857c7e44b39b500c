"""Exception hierarchy for the MAX exchange client.

All exceptions raised by this library inherit from BaseError.

Exception Hierarchy
-------------------
BaseError
├── ClockError - Wall clock unavailable, no request can be signed
├── ExchangeError - API server returned an error response
│   └── ApiError
│       ├── AuthFailure - Signature, access key or nonce rejected
│       ├── OrderRejected - Order submission or cancellation refused
│       ├── NotFound
│       ├── RateLimited
│       └── ServerError
├── TransportError - Network/protocol-level errors during transmission
│   ├── TransportUnavailable
│   ├── TransportTimeout
│   ├── DecodeError
│   └── EncodingError
└── ValidationError - Client-side input validation failures
    └── MissingCredentialsError
"""


class BaseError(Exception):
    """Base exception for all MAX client errors.

    All exceptions raised by this library inherit from this class, allowing users
    to catch all client-related errors with a single except clause.

    This exception should not be raised directly. Use one of the specific subclasses
    instead.
    """

    pass


class ClockError(BaseError):
    """Raised when the wall clock cannot produce a usable nonce.

    Fatal: without a timestamp no request can be signed.
    """

    def __init__(self, message: str):
        """Initialize a ClockError.

        Args:
            message: Description of the clock failure.

        """
        self.message = message
        super().__init__(message)


# ============================================================================
# EXCHANGE ERROR
# ============================================================================


class ExchangeError(BaseError):
    """Exception raised when the API server returns an error response.

    ExchangeError indicates that:
    - The network connection succeeded
    - The request was properly formatted and transmitted
    - A server processed the request and returned an error response
    """

    pass


class ApiError(ExchangeError):
    """Raised when the exchange rejects a request.

    MAX reports failures as ``{"error": {"code": ..., "message": ...}}``, either
    with a non-2XX status or, for some endpoints, inside a 2XX body.
    """

    status_code: int
    code: int | None
    message: str

    def __init__(self, status_code: int, message: str, code: int | None = None):
        """Initialize an ApiError.

        Args:
            status_code: The HTTP status code returned by the server.
            message: The server's error message.
            code: The exchange error code, if the server supplied one.

        """
        self.status_code = status_code
        self.code = code
        self.message = message
        if code is not None:
            super().__init__(f"[{code}] {message} (status: {status_code})")
        else:
            super().__init__(f"{message} (status: {status_code})")


class AuthFailure(ApiError):
    """Raised when the server rejects the access key, signature or nonce."""

    pass


class OrderRejected(ApiError):
    """Raised when the exchange refuses to create or cancel an order."""

    pass


class NotFound(ApiError):
    """Raised when the server returns a 404 Not Found error."""

    pass


class RateLimited(ApiError):
    """Raised when the server returns a 429 Rate Limited error."""

    pass


class ServerError(ApiError):
    """Raised when the server returns a 5XX status."""

    pass


# ============================================================================
# TRANSPORT ERROR
# ============================================================================


class TransportError(BaseError):
    """Exception raised for errors in the process of transporting data to/from the API server.

    TransportError indicates that:
    - The error occurred in the process of transporting data
    - Valid application-level data was not successfully exchanged
    - The error could be transient and may succeed on retry

    Common causes include DNS resolution failures, connection timeouts, dropped
    connections and malformed response bodies.
    """

    pass


class TransportUnavailable(TransportError):
    """Raised when a connection cannot be established or is lost."""

    def __init__(self, message: str, url: str | None = None):
        """Initialize a TransportUnavailable error.

        Args:
            message: Description of the connection error.
            url: The URL that failed to connect, if available.

        """
        self.message = message
        self.url = url
        if url:
            super().__init__(f"{message} (url: {url})")
        else:
            super().__init__(message)


class TransportTimeout(TransportError):
    """Raised when a request exceeds its timeout."""

    def __init__(self, message: str, timeout_seconds: float | None = None):
        """Initialize a TransportTimeout error.

        Args:
            message: Description of the timeout error.
            timeout_seconds: The timeout duration in seconds, if available.

        """
        self.message = message
        self.timeout_seconds = timeout_seconds
        if timeout_seconds:
            super().__init__(f"{message} (timeout: {timeout_seconds}s)")
        else:
            super().__init__(message)


class DecodeError(TransportError):
    """Raised when response data cannot be decoded into the expected shape."""

    def __init__(self, message: str):
        """Initialize a DecodeError.

        Args:
            message: Description of the decoding error.

        """
        self.message = message
        super().__init__(message)


class EncodingError(TransportError):
    """Raised when request data cannot be serialized."""

    def __init__(self, message: str):
        """Initialize an EncodingError.

        Args:
            message: Description of the serialization error.

        """
        self.message = message
        super().__init__(message)


# ============================================================================
# VALIDATION ERROR
# ============================================================================


class ValidationError(BaseError):
    """Exception raised for client-side input validation failures.

    ValidationError indicates that:
    - No network request was attempted
    - The error is due to invalid input from the caller
    - The error can be fixed by correcting the input parameters
    """

    pass


class MissingCredentialsError(ValidationError):
    """Raised when required authentication credentials are missing."""

    def __init__(self, credential_type: str = "API key"):
        """Initialize a MissingCredentialsError.

        Args:
            credential_type: The type of credential that is missing (default: "API key").

        """
        self.credential_type = credential_type
        super().__init__(f"{credential_type} is not set")
