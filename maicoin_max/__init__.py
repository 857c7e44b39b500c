from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("maicoin-max")
except PackageNotFoundError:
    __version__ = "unknown"

from maicoin_max.api import MaxApiClient
from maicoin_max.auth import RequestBuilder, SignedRequest, sign
from maicoin_max.errors import (
    ApiError,
    AuthFailure,
    BaseError,
    ClockError,
    DecodeError,
    EncodingError,
    OrderRejected,
    TransportError,
    TransportTimeout,
    TransportUnavailable,
    ValidationError,
)
from maicoin_max.nonce import NonceSource
from maicoin_max.payload import encode_payload
from maicoin_max.types import (
    Account,
    CreateOrder,
    Credentials,
    Order,
    OrderBy,
    OrderState,
    OrderType,
    ServerTime,
    Side,
    Ticker,
    VipLevel,
)


def get_version() -> str:
    return __version__


__all__ = [
    "MaxApiClient",
    "RequestBuilder",
    "SignedRequest",
    "sign",
    "NonceSource",
    "encode_payload",
    "ApiError",
    "AuthFailure",
    "BaseError",
    "ClockError",
    "DecodeError",
    "EncodingError",
    "OrderRejected",
    "TransportError",
    "TransportTimeout",
    "TransportUnavailable",
    "ValidationError",
    "Account",
    "CreateOrder",
    "Credentials",
    "Order",
    "OrderBy",
    "OrderState",
    "OrderType",
    "ServerTime",
    "Side",
    "Ticker",
    "VipLevel",
    "get_version",
]
