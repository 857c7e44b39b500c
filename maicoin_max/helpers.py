"""Helper utilities for the MAX exchange client.

This module contains utility functions for serialization, deserialization
and building domain objects from API responses.
"""

import inspect
import logging
from decimal import Decimal
from enum import Enum
from functools import lru_cache
from typing import Any, Callable, Dict, TypeVar

import orjson

from maicoin_max.errors import DecodeError, EncodingError
from maicoin_max.types import Json

log = logging.getLogger(__name__)


# ============================================================================
# CONSTANTS
# ============================================================================

DEFAULT_API_URL: str = "https://max-api.maicoin.com"
DEFAULT_TIMEOUT: float = 10.0


# ============================================================================
# CLIENT IDENTIFICATION
# ============================================================================


@lru_cache(maxsize=1)
def get_user_agent() -> str:
    """Get the client identification string sent as User-Agent."""
    import maicoin_max

    return f"MaicoinMaxPython/{maicoin_max.__version__}"


# ============================================================================
# OBJECT CONSTRUCTION
# ============================================================================

T = TypeVar("T")


def create_with(func: Callable[..., T], data: Dict[str, Any]) -> T:
    """Create an object from a dictionary, filtering to only valid parameters.

    This allows constructing objects from API responses that may contain
    additional fields beyond what the constructor expects, making the client
    more resilient to API changes.

    Args:
        func: Constructor or factory function to call
        data: Dictionary of data to pass as kwargs

    Returns:
        Instance created by calling func with filtered data

    Raises:
        TypeError: If data is not a mapping or required parameters are missing

    """
    if not isinstance(data, dict):
        raise TypeError(f"Expected a JSON object, got {type(data).__name__}")
    sig = inspect.signature(func)
    valid_keys = sig.parameters.keys()
    filtered_data = {k: v for k, v in data.items() if k in valid_keys}
    return func(**filtered_data)


# ============================================================================
# SERIALIZATION / DESERIALIZATION
# ============================================================================


def wire_value(obj: object) -> str:
    """Serialize values orjson does not know natively.

    Decimal becomes its exact string to preserve precision and enums become
    their wire value.
    """
    if isinstance(obj, Decimal):
        return format(obj, "f")
    if isinstance(obj, Enum):
        return str(obj.value)

    raise TypeError


def serialize_request(request: Json) -> bytes:
    """Serialize a request object to compact JSON bytes.

    Keys keep their insertion order.

    Raises:
        EncodingError: If serialization fails

    """
    try:
        return orjson.dumps(request, default=wire_value)
    except Exception as e:
        raise EncodingError(f"Failed to serialize {request=}") from e


def deserialize_response(response_body: bytes, url: str) -> Json:
    """Deserialize a JSON response body.

    Args:
        response_body: Response bytes to deserialize
        url: URL that was requested (for error messages)

    Returns:
        Deserialized JSON value

    Raises:
        DecodeError: If deserialization fails

    """
    try:
        return orjson.loads(response_body)  # type: ignore
    except Exception as e:
        raise DecodeError(f"Failed to parse JSON response from {url}: {e}") from e


def decode_response_body(status: int, response_body: bytes, url: str) -> Json:
    """Deserialize a response body, keeping non-JSON error pages as text.

    Gateways answer some 401 and 5XX responses with HTML or an empty body.
    Those are returned as a string (None when empty) so status handling still
    sees the status code.

    Raises:
        DecodeError: If a 2XX body is not valid JSON

    """
    try:
        return deserialize_response(response_body, url)
    except DecodeError:
        if 200 <= status < 300:
            raise
        log.debug("Non-JSON body with status %d from %s", status, url)
        return response_body.decode("utf-8", errors="replace").strip() or None
