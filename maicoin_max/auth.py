"""Request signing for the MAX REST API.

A signed request carries three headers:

- ``X-MAX-ACCESSKEY``: the access key in plaintext
- ``X-MAX-PAYLOAD``: base64 of the canonical JSON payload
- ``X-MAX-SIGNATURE``: hex HMAC-SHA256 of the ``X-MAX-PAYLOAD`` value, keyed
  by the secret key

Nothing in this module performs I/O.
"""

import hmac
import logging
from dataclasses import dataclass, field
from hashlib import sha256
from types import MappingProxyType
from typing import Any, Mapping
from urllib.parse import urlencode

from maicoin_max.errors import MissingCredentialsError
from maicoin_max.helpers import DEFAULT_API_URL
from maicoin_max.nonce import NonceSource
from maicoin_max.payload import RequestPayload, canonical_json, encode_payload
from maicoin_max.types import Credentials

log = logging.getLogger(__name__)

HEADER_ACCESS_KEY = "X-MAX-ACCESSKEY"
HEADER_PAYLOAD = "X-MAX-PAYLOAD"
HEADER_SIGNATURE = "X-MAX-SIGNATURE"


def sign(secret: bytes, message: bytes) -> str:
    """Compute the lowercase hex HMAC-SHA256 of message keyed by secret."""
    return hmac.new(secret, message, sha256).hexdigest()


@dataclass(frozen=True)
class SignedRequest:
    """A fully built request, ready for an executor."""

    method: str
    url: str
    headers: Mapping[str, str] = field(repr=False)
    body: bytes | None = None


class RequestBuilder:
    """Builds signed requests from payloads.

    Examples:
        .. code-block:: python

            builder = RequestBuilder(credentials)
            request = builder.build("GET", "/api/v2/members/accounts")

    """

    def __init__(
        self,
        credentials: Credentials | None,
        api_url: str = DEFAULT_API_URL,
        nonce_source: NonceSource | None = None,
    ):
        """Initialize the builder.

        Args:
            credentials: Access and secret key, may be None for public use only
            api_url: Base URL every path is appended to
            nonce_source: Shared nonce source (a fresh one if not provided)

        """
        self.credentials = credentials
        self.api_url = api_url.rstrip("/")
        self.nonce_source = nonce_source if nonce_source is not None else NonceSource()

    def build(
        self,
        method: str,
        path: str,
        payload_type: type[RequestPayload] = RequestPayload,
        **params: Any,
    ) -> SignedRequest:
        """Draw a fresh nonce and build a signed request.

        Args:
            method: HTTP method
            path: API path without query string
            payload_type: Payload variant for this endpoint
            **params: Endpoint specific payload fields

        Returns:
            SignedRequest for the executor

        Raises:
            MissingCredentialsError: If no credentials are configured
            ClockError: If no nonce can be produced
            EncodingError: If the payload cannot be serialized

        """
        if self.credentials is None:
            raise MissingCredentialsError("API credentials")
        nonce = self.nonce_source.next()
        payload = payload_type(nonce=str(nonce), path=path, **params)
        return self.sign_payload(method, payload)

    def sign_payload(self, method: str, payload: RequestPayload) -> SignedRequest:
        """Sign an already constructed payload.

        Deterministic for a given payload, which is what the tests rely on.

        Raises:
            MissingCredentialsError: If no credentials are configured
            EncodingError: If the payload cannot be serialized

        """
        if self.credentials is None:
            raise MissingCredentialsError("API credentials")

        json_b64, query = encode_payload(payload)
        signature = sign(self.credentials.secret_key, json_b64.encode("ascii"))

        method = method.upper()
        url = f"{self.api_url}{payload.path}?{query}"
        headers = MappingProxyType(
            {
                HEADER_ACCESS_KEY: self.credentials.access_key,
                HEADER_PAYLOAD: json_b64,
                HEADER_SIGNATURE: signature,
                "Content-Type": "application/json",
            }
        )
        body = canonical_json(payload) if method != "GET" else None

        log.debug("Signed %s %s with nonce %s", method, payload.path, payload.nonce)
        return SignedRequest(method=method, url=url, headers=headers, body=body)

    def public_url(self, path: str, **params: Any) -> str:
        """URL of an unauthenticated endpoint, with optional query parameters."""
        query = urlencode({k: v for k, v in params.items() if v is not None})
        if query:
            return f"{self.api_url}{path}?{query}"
        return f"{self.api_url}{path}"
