"""Bot configuration loaded from YAML.

Example file::

    symbol:        DOGETWD
    quantity:      365
    grid_number:   50
    profit_spread: 0.03
    upper_price:   3.0
    lower_price:   2.1
    long:          true
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from maicoin_max.errors import ValidationError
from maicoin_max.helpers import DEFAULT_TIMEOUT
from maicoin_max.types import numeric_to_decimal

log = logging.getLogger(__name__)

DEFAULT_TICK_INTERVAL: float = 1.0


class DecimalSafeLoader(yaml.SafeLoader):
    """SafeLoader that reads YAML floats as Decimal, straight from their text."""


def _construct_decimal(loader: DecimalSafeLoader, node: yaml.ScalarNode) -> Decimal:
    text = loader.construct_scalar(node).replace("_", "")
    try:
        value = Decimal(text)
    except InvalidOperation as e:
        raise yaml.constructor.ConstructorError(
            None, None, f"cannot read {text!r} as a decimal", node.start_mark
        ) from e
    if not value.is_finite():
        raise yaml.constructor.ConstructorError(
            None, None, f"non-finite number {text!r}", node.start_mark
        )
    return value


DecimalSafeLoader.add_constructor("tag:yaml.org,2002:float", _construct_decimal)


@dataclass(frozen=True)
class BotConfig:
    """Strategy parameters and run loop settings."""

    symbol: str
    quantity: Decimal
    grid_number: int
    profit_spread: Decimal
    upper_price: Decimal
    lower_price: Decimal
    long: bool
    tick_interval: float = DEFAULT_TICK_INTERVAL
    request_timeout: float = DEFAULT_TIMEOUT

    @property
    def market(self) -> str:
        """Market id as used in API paths (``DOGETWD`` -> ``dogetwd``)."""
        return self.symbol.lower()


def _required(data: dict[str, Any], key: str) -> Any:
    if key not in data or data[key] is None:
        raise ValidationError(f"Missing config key {key!r}")
    return data[key]


def parse_config(data: Any) -> BotConfig:
    """Validate a decoded YAML document into a BotConfig.

    Documents read by load_config already carry floats as Decimal. Floats
    passed in directly become Decimal through their string form.

    Raises:
        ValidationError: If a key is missing or has the wrong type

    """
    if not isinstance(data, dict):
        raise ValidationError(f"Config must be a mapping, got {type(data).__name__}")

    symbol = _required(data, "symbol")
    if not isinstance(symbol, str) or not symbol:
        raise ValidationError(f"Invalid symbol {symbol!r}")

    grid_number = _required(data, "grid_number")
    if isinstance(grid_number, bool) or not isinstance(grid_number, int):
        raise ValidationError(f"grid_number must be an integer, got {grid_number!r}")

    long = _required(data, "long")
    if not isinstance(long, bool):
        raise ValidationError(f"long must be true or false, got {long!r}")

    try:
        tick_interval = float(data.get("tick_interval", DEFAULT_TICK_INTERVAL))
        request_timeout = float(data.get("request_timeout", DEFAULT_TIMEOUT))
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid run loop setting: {e}") from e
    if tick_interval <= 0 or request_timeout <= 0:
        raise ValidationError("tick_interval and request_timeout must be positive")

    config = BotConfig(
        symbol=symbol,
        quantity=numeric_to_decimal(_required(data, "quantity")),
        grid_number=grid_number,
        profit_spread=numeric_to_decimal(_required(data, "profit_spread")),
        upper_price=numeric_to_decimal(_required(data, "upper_price")),
        lower_price=numeric_to_decimal(_required(data, "lower_price")),
        long=long,
        tick_interval=tick_interval,
        request_timeout=request_timeout,
    )
    if config.grid_number < 1:
        raise ValidationError(f"grid_number must be at least 1, got {grid_number}")
    for name in ("quantity", "profit_spread", "lower_price"):
        if getattr(config, name) <= 0:
            raise ValidationError(f"{name} must be positive")
    if config.lower_price >= config.upper_price:
        raise ValidationError(
            f"lower_price {config.lower_price} must be below upper_price {config.upper_price}"
        )
    return config


def load_config(path: str | Path) -> BotConfig:
    """Load a BotConfig from a YAML file.

    Raises:
        ValidationError: If the file cannot be read or parsed, or fails validation

    """
    path = Path(path)
    try:
        with open(path, "r") as fh:
            data = yaml.load(fh, Loader=DecimalSafeLoader)
    except (OSError, yaml.YAMLError) as e:
        raise ValidationError(f"Failed to load config {path}: {e}") from e

    config = parse_config(data)
    log.info("Loaded config for %s from %s", config.market, path)
    return config
