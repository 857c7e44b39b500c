"""Abstract interface for HTTP executors.

This module defines the abstract base class that all HTTP executor
implementations must follow, enabling pluggable transport layers.
"""

from abc import ABC, abstractmethod
from typing import Mapping

from maicoin_max.types import Json


class HttpResponse:
    """Container for HTTP response data.

    Encapsulates the status code, body, and headers from an HTTP response.
    """

    status: int
    body: Json
    headers: dict[str, str] | None

    __slots__ = ("status", "body", "headers")

    def __init__(
        self,
        *,
        status: int,
        body: Json = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        """Initialize an HTTP response object.

        Args:
            status: The HTTP status code of the response.
            body: The decoded JSON response body.
            headers: Optional HTTP response headers as key-value pairs.

        """
        self.status = status
        self.body = body
        self.headers = headers


class HttpExecutor(ABC):
    """Abstract base class for HTTP request executors.

    Executors only move bytes: URL, headers and body arrive fully built, and
    every call is bounded by ``timeout`` seconds.
    """

    timeout: float

    @abstractmethod
    def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str] | None = None,
        body: bytes | None = None,
    ) -> HttpResponse:
        """Send an HTTP request.

        Args:
            method: The HTTP method (e.g., 'GET', 'POST').
            url: The full request URL including query string.
            headers: Request headers.
            body: Optional raw request body.

        Returns:
            An HttpResponse object containing the status and decoded body.

        Raises:
            TransportTimeout: If the request exceeds the timeout.
            TransportUnavailable: If the connection fails.
            DecodeError: If the response body is not valid JSON.
            TransportError: For any other transport-level failure.

        """
        ...
