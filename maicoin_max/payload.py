"""Request payloads and their canonical encodings.

A signed MAX request carries its parameters twice: base64 JSON in the
``X-MAX-PAYLOAD`` header and a URL query string. The server checks the
signature against the header and reads the query separately, so both are
rendered here from one ordered field mapping.

Absent optional fields are omitted from both encodings.
"""

import base64
import dataclasses
import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import NamedTuple
from urllib.parse import urlencode

from maicoin_max.errors import EncodingError
from maicoin_max.helpers import serialize_request
from maicoin_max.types import JsonObject, OrderBy, OrderState, OrderType, Side

log = logging.getLogger(__name__)


# ============================================================================
# PAYLOAD VARIANTS
# ============================================================================


@dataclass(frozen=True)
class RequestPayload:
    """Fields every signed request carries.

    Used as is for endpoints without parameters (accounts, member, vip level).
    Subclasses append their own fields; declaration order is wire order.
    """

    nonce: str
    path: str

    def fields(self) -> JsonObject:
        """Ordered wire fields, skipping those left as None."""
        out: JsonObject = {}
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if isinstance(value, Enum):
                value = value.value
            elif isinstance(value, Decimal):
                value = format(value, "f")
            out[f.name] = value
        return out


@dataclass(frozen=True)
class ListOrdersPayload(RequestPayload):
    """Filters for ``GET /api/v2/orders``."""

    market: str
    state: OrderState | None = None
    order_by: OrderBy | None = None
    group_id: int | None = None
    pagination: bool | None = None
    page: int | None = None
    limit: int | None = None
    offset: int | None = None


@dataclass(frozen=True)
class SubmitOrderPayload(RequestPayload):
    """Body of ``POST /api/v2/orders``."""

    market: str
    side: Side
    volume: Decimal
    price: Decimal | None = None
    client_oid: str | None = None
    stop_price: Decimal | None = None
    ord_type: OrderType | None = None
    group_id: int | None = None


@dataclass(frozen=True)
class CancelOrderPayload(RequestPayload):
    """Body of ``POST /api/v2/order/delete``."""

    id: int | None = None
    client_oid: str | None = None


# ============================================================================
# ENCODING
# ============================================================================


class EncodedPayload(NamedTuple):
    """The two transmitted forms of one payload."""

    json_b64: str
    query: str


def _query_value(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int)):
        return str(value)
    raise TypeError(f"Cannot render {type(value).__name__} into a query string")


def canonical_json(payload: RequestPayload) -> bytes:
    """Compact JSON of the payload fields in declaration order.

    Raises:
        EncodingError: If a field cannot be serialized

    """
    return serialize_request(payload.fields())


def encode_payload(payload: RequestPayload) -> EncodedPayload:
    """Render a payload into its header and query string forms.

    Args:
        payload: The request payload

    Returns:
        EncodedPayload of the base64 JSON and the query string, both built from
        the same ordered fields

    Raises:
        EncodingError: If a field cannot be serialized

    """
    wire_fields = payload.fields()
    json_b64 = base64.b64encode(serialize_request(wire_fields)).decode("ascii")
    try:
        query = urlencode([(k, _query_value(v)) for k, v in wire_fields.items()])
    except TypeError as e:
        raise EncodingError(f"Failed to build query string for {payload=}") from e
    return EncodedPayload(json_b64=json_b64, query=query)
