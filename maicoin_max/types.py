"""Type definitions for the MAX exchange client.

This module contains type definitions, enums, and dataclasses used throughout
the client, organized into logical sections for clarity.
"""

import re
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Self, TypeAlias, overload

from maicoin_max.errors import MissingCredentialsError, ValidationError

# ============================================================================
# TYPE ALIASES
# ============================================================================

# Core ID types
Nonce: TypeAlias = int
OrderId: TypeAlias = int

# JSON type hierarchy
JsonObject: TypeAlias = dict[str, "JsonValue"]
JsonArray: TypeAlias = list["JsonValue"]
JsonValue: TypeAlias = None | bool | int | float | str | JsonObject | JsonArray
# MAX answers with objects, arrays (accounts, orders) and bare integers (timestamp)
Json: TypeAlias = JsonValue

# Numeric input accepted from callers
MaxNumericInput: TypeAlias = Decimal | str | float | int


# ============================================================================
# NUMERIC CONVERSION UTILITIES
# ============================================================================

DECIMAL_PATTERN = re.compile(r"^\d+(\.\d+)?$")
SIGNED_DECIMAL_PATTERN = re.compile(r"^-?\d+(\.\d+)?$")


@overload
def numeric_to_decimal(n: MaxNumericInput) -> Decimal: ...


@overload
def numeric_to_decimal(n: None) -> None: ...


def numeric_to_decimal(n: MaxNumericInput | None) -> Decimal | None:
    """Convert various numeric input types to Decimal, or None if input is None."""
    if n is None:
        return n
    if isinstance(n, str):
        if not DECIMAL_PATTERN.match(n):
            raise ValidationError(f"Invalid numeric input {n}")
        return Decimal(n)
    if isinstance(n, (int, float)):
        n = Decimal(str(n))
    if not isinstance(n, Decimal):
        raise ValidationError(f"Invalid numeric input type {n} - {type(n)}")
    return n


@overload
def monetary_string(value: str | int) -> str: ...


@overload
def monetary_string(value: None) -> None: ...


def monetary_string(value: str | int | None) -> str | None:
    """Validate a monetary value received from the exchange.

    Amounts stay decimal strings. A JSON number decoded as float has already
    lost precision, so it is refused rather than stringified.

    Raises:
        TypeError: If the value is a float or not a string/integer.
        ValueError: If the string is not a plain decimal number.

    """
    if value is None:
        return None
    if isinstance(value, bool) or isinstance(value, float):
        raise TypeError(f"Monetary value {value!r} must not be a binary float")
    if isinstance(value, int):
        return str(value)
    if not isinstance(value, str):
        raise TypeError(f"Unexpected monetary value type {type(value)}")
    if not SIGNED_DECIMAL_PATTERN.match(value):
        raise ValueError(f"Invalid monetary value {value!r}")
    return value


# ============================================================================
# CORE ENUMS
# ============================================================================


class Side(Enum):
    """Order side."""

    BUY = "buy"
    SELL = "sell"


class OrderType(Enum):
    """Order type."""

    LIMIT = "limit"
    MARKET = "market"
    STOP_LIMIT = "stop_limit"
    STOP_MARKET = "stop_market"
    POST_ONLY = "post_only"
    IOC_LIMIT = "ioc_limit"


class OrderState(Enum):
    """Order state as reported by the exchange."""

    WAIT = "wait"
    CONVERT = "convert"
    FINALIZING = "finalizing"
    DONE = "done"
    CANCEL = "cancel"
    FAILED = "failed"


class OrderBy(Enum):
    """Sort order for order listings."""

    ASC = "asc"
    DESC = "desc"
    ASC_UPDATED_AT = "asc_updated_at"
    DESC_UPDATED_AT = "desc_updated_at"


# ============================================================================
# CREDENTIALS
# ============================================================================


@dataclass(frozen=True)
class Credentials:
    """API access key and secret key.

    The secret is excluded from ``repr`` and equality so it never ends up in
    logs or tracebacks.
    """

    access_key: str
    secret_key: bytes = field(repr=False, compare=False)

    @classmethod
    def from_strings(cls, access_key: str, secret_key: str) -> Self:
        """Create credentials from the string form found in environment files.

        Args:
            access_key: The MAX API access key.
            secret_key: The MAX API secret key.

        Returns:
            Credentials with the secret encoded as UTF-8 bytes.

        Raises:
            MissingCredentialsError: If either value is empty.

        """
        if not access_key:
            raise MissingCredentialsError("access key")
        if not secret_key:
            raise MissingCredentialsError("secret key")
        return cls(access_key=access_key, secret_key=secret_key.encode())


# ============================================================================
# ORDER REQUEST TYPES
# ============================================================================


class CreateOrder:
    """Request to create a new order."""

    market: str
    side: Side
    volume: Decimal
    price: Decimal | None
    ord_type: OrderType
    stop_price: Decimal | None
    client_oid: str | None
    group_id: int | None

    def __init__(
        self,
        market: str,
        side: Side,
        volume: MaxNumericInput,
        price: MaxNumericInput | None = None,
        ord_type: OrderType = OrderType.LIMIT,
        stop_price: MaxNumericInput | None = None,
        client_oid: str | None = None,
        group_id: int | None = None,
    ):
        """Initialize a CreateOrder request.

        Args:
            market: Market id, e.g. ``dogetwd``.
            side: Order side.
            volume: Order volume (converted to Decimal).
            price: Limit price (converted to Decimal). Required for limit types.
            ord_type: Order type, defaults to limit.
            stop_price: Trigger price for stop orders (converted to Decimal).
            client_oid: Client supplied idempotency token.
            group_id: Group id shared by related orders.

        Raises:
            ValidationError: If a price is missing for a priced order type.

        """
        self.market = market.lower()
        self.side = Side(side)
        self.volume = numeric_to_decimal(volume)
        self.price = numeric_to_decimal(price)
        self.ord_type = OrderType(ord_type)
        self.stop_price = numeric_to_decimal(stop_price)
        self.client_oid = client_oid
        self.group_id = group_id

        if self.price is None and self.ord_type in (
            OrderType.LIMIT,
            OrderType.STOP_LIMIT,
            OrderType.POST_ONLY,
            OrderType.IOC_LIMIT,
        ):
            raise ValidationError(f"price is required for {self.ord_type.value} orders")
        if self.stop_price is None and self.ord_type in (
            OrderType.STOP_LIMIT,
            OrderType.STOP_MARKET,
        ):
            raise ValidationError(
                f"stop_price is required for {self.ord_type.value} orders"
            )


# ============================================================================
# ACCOUNT TYPES
# ============================================================================


@dataclass
class Account:
    """Balance of a single currency."""

    currency: str
    balance: str
    locked: str
    staked: str | None
    kind: str | None
    fiat_currency: str | None
    fiat_balance: str | None

    def __init__(
        self,
        currency: str,
        balance: str,
        locked: str,
        stake: str | None = None,
        staked: str | None = None,
        type: str | None = None,
        kind: str | None = None,
        fiat_currency: str | None = None,
        fiat_balance: str | None = None,
    ):
        """Initialize an Account from wire or local field names.

        The exchange reports ``stake`` and ``type``; ``staked`` and ``kind`` are
        accepted as well so snapshots can be rebuilt from their own fields.

        Raises:
            TypeError: If a monetary field is a float or the currency is not a string.
            ValueError: If a monetary field is not a decimal string.

        """
        if not isinstance(currency, str) or not currency:
            raise TypeError(f"Invalid currency {currency!r}")
        self.currency = currency
        self.balance = monetary_string(balance)
        self.locked = monetary_string(locked)
        self.staked = monetary_string(staked if staked is not None else stake)
        self.kind = kind if kind is not None else type
        self.fiat_currency = fiat_currency
        self.fiat_balance = monetary_string(fiat_balance)


@dataclass
class Member:
    """Profile returned by ``/members/me``."""

    sn: str
    email: str | None
    accounts: list[Account]


@dataclass
class VipTier:
    """Fee tier."""

    level: int
    minimum_trading_volume: str | None
    minimum_staking_volume: str | None
    maker_fee: str
    taker_fee: str


@dataclass
class VipLevel:
    """Current and next fee tier of the member."""

    current: VipTier
    next: VipTier | None


# ============================================================================
# ORDER TYPES
# ============================================================================


@dataclass
class Order:
    """Represents an order in the exchange."""

    id: OrderId | None
    client_oid: str | None
    market: str
    side: Side
    ord_type: OrderType
    volume: str
    price: str | None
    stop_price: str | None
    state: OrderState | None
    avg_price: str | None
    remaining_volume: str | None
    executed_volume: str | None
    trades_count: int | None
    group_id: int | None
    created_at: int | None
    updated_at: int | None

    def __init__(
        self,
        market: str,
        side: str,
        ord_type: str,
        volume: str,
        id: str | int | None = None,
        client_oid: str | None = None,
        price: str | None = None,
        stop_price: str | None = None,
        state: str | None = None,
        avg_price: str | None = None,
        remaining_volume: str | None = None,
        executed_volume: str | None = None,
        trades_count: int | None = None,
        group_id: int | None = None,
        created_at: int | None = None,
        created_at_in_ms: int | None = None,
        updated_at: int | None = None,
        updated_at_in_ms: int | None = None,
    ):
        """Initialize an Order instance.

        Args:
            market: Market id of the order.
            side: Order side (buy, sell).
            ord_type: Type of order (limit, market, ...).
            volume: Original order volume.
            id: Exchange assigned order id.
            client_oid: Client supplied idempotency token.
            price: Limit price.
            stop_price: Trigger price for stop orders.
            state: Current state of the order.
            avg_price: Average fill price.
            remaining_volume: Volume not yet filled.
            executed_volume: Volume filled so far.
            trades_count: Number of trades the order matched.
            group_id: Group id shared by related orders.
            created_at: Creation time in seconds.
            created_at_in_ms: Creation time in milliseconds, preferred when present.
            updated_at: Last update time in seconds.
            updated_at_in_ms: Last update time in milliseconds, preferred when present.

        """
        if id is None and client_oid is None:
            raise ValueError("Order has neither id nor client_oid")
        self.id = int(id) if id is not None else None
        self.client_oid = client_oid
        self.market = market
        self.side = Side(side)
        self.ord_type = OrderType(ord_type)
        self.volume = monetary_string(volume)
        self.price = monetary_string(price)
        self.stop_price = monetary_string(stop_price)
        self.state = OrderState(state) if state else None
        self.avg_price = monetary_string(avg_price)
        self.remaining_volume = monetary_string(remaining_volume)
        self.executed_volume = monetary_string(executed_volume)
        self.trades_count = trades_count
        self.group_id = group_id
        self.created_at = (
            created_at_in_ms
            if created_at_in_ms is not None
            else (created_at * 1000 if created_at is not None else None)
        )
        self.updated_at = (
            updated_at_in_ms
            if updated_at_in_ms is not None
            else (updated_at * 1000 if updated_at is not None else None)
        )


# ============================================================================
# MARKET DATA TYPES
# ============================================================================


@dataclass
class Ticker:
    """Latest ticker of a market."""

    market: str
    at: int
    buy: str | None
    sell: str | None
    open: str | None
    low: str | None
    high: str | None
    last: str | None
    vol: str | None
    vol_in_btc: str | None = None

    def __post_init__(self) -> None:
        for name in ("buy", "sell", "open", "low", "high", "last", "vol", "vol_in_btc"):
            setattr(self, name, monetary_string(getattr(self, name)))


@dataclass
class ServerTime:
    """Exchange clock in seconds since epoch."""

    timestamp: int

    def skew(self, local_timestamp: float) -> float:
        """Seconds the local clock runs ahead of the exchange (negative if behind)."""
        return local_timestamp - self.timestamp
