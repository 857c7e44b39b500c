"""HTTP executor implementation using httpx.

This module provides HTTP request handling using the httpx library and is the
default transport of the client.
"""

from typing import Mapping, override

import httpx

from maicoin_max.errors import (
    BaseError,
    TransportError,
    TransportTimeout,
    TransportUnavailable,
)
from maicoin_max.executors.interface import HttpExecutor, HttpResponse
from maicoin_max.helpers import DEFAULT_TIMEOUT, decode_response_body, get_user_agent


class HttpxHttpExecutor(HttpExecutor):
    """HTTP executor implementation using httpx.

    Provides synchronous HTTP request execution over a pooled httpx client.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT):
        """Initialize the HTTPX HTTP executor.

        Args:
            timeout: Upper bound in seconds for connecting, sending and reading.

        """
        self.timeout = timeout
        self.client = httpx.Client(timeout=timeout)

    @override
    def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str] | None = None,
        body: bytes | None = None,
    ) -> HttpResponse:
        """Send a request through httpx.

        Args:
            method: The HTTP method to use (e.g., 'GET', 'POST').
            url: The full request URL.
            headers: Request headers.
            body: Optional raw request body.

        Returns:
            HttpResponse containing the status code and deserialized response body.

        Raises:
            TransportTimeout: If the request times out.
            TransportUnavailable: If there is a connection or network error.
            TransportError: If any other transport-level error occurs.

        """
        request_headers = {"User-Agent": get_user_agent(), **(headers or {})}
        try:
            response = self.client.request(
                method, url, headers=request_headers, content=body
            )
        except BaseError:
            raise
        except httpx.TimeoutException as e:
            raise TransportTimeout(
                f"{method} request to {url} timed out", timeout_seconds=self.timeout
            ) from e
        except httpx.NetworkError as e:
            raise TransportUnavailable(
                f"Network error during {method} request to {url}", url=url
            ) from e
        except Exception as e:
            raise TransportError(f"{method} request to {url} failed: {e}") from e
        return HttpResponse(
            status=response.status_code,
            body=decode_response_body(response.status_code, response.content, url),
            headers=dict(response.headers),
        )

    def close(self) -> None:
        """Close the pooled httpx client."""
        self.client.close()

    def __del__(self) -> None:
        """Cleanup the httpx client when the executor is destroyed."""
        client = getattr(self, "client", None)
        if client is not None:
            client.close()
