import base64
import logging
from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Any, Generator, Mapping
from urllib.parse import parse_qsl, urlsplit

import orjson
import pytest

from maicoin_max.api import MaxApiClient
from maicoin_max.config import BotConfig
from maicoin_max.nonce import NonceSource
from maicoin_max.types import Credentials
from tests.mock_executors import MockHttpExecutor, MockOutputNotExhausted

DATA_DIR = Path(__file__).parent.joinpath("data")

API_URL = "https://max.gaierror.xyz"
CLOCK_START_MS = 1_700_000_000_000

log = logging.getLogger(__name__)


class SteppingClock:
    """Millisecond clock advancing by ``step`` on every reading."""

    def __init__(self, start: int = CLOCK_START_MS, step: int = 0):
        self.now = start
        self.step = step

    def __call__(self) -> int:
        value = self.now
        self.now += self.step
        return value


@pytest.fixture
def clock() -> SteppingClock:
    # frozen by default, every nonce then comes from the last+1 path
    return SteppingClock()


@pytest.fixture
def mock_http_client(
    clock: SteppingClock,
) -> Generator[tuple[MaxApiClient, MockHttpExecutor], None, None]:
    mock_http = MockHttpExecutor()
    client = MaxApiClient(
        # the secret matters here, signatures are checked in some tests
        credentials=Credentials(access_key="FOO", secret_key=b"BAR"),
        api_url=API_URL,
        # replace real network requests with our mock
        executor=mock_http,
        nonce_source=NonceSource(clock),
    )

    yield (client, mock_http)

    if len(mock_http.staged_outputs) > 0:
        raise MockOutputNotExhausted(mock_http.staged_outputs)


@pytest.fixture
def bot_config() -> BotConfig:
    return BotConfig(
        symbol="DOGETWD",
        quantity=Decimal("365"),
        grid_number=50,
        profit_spread=Decimal("0.03"),
        upper_price=Decimal("3.0"),
        lower_price=Decimal("2.1"),
        long=True,
        tick_interval=0.01,
    )


def decode_payload(headers: Mapping[str, str]) -> dict[str, Any]:
    """JSON object carried in the X-MAX-PAYLOAD header of a signed request."""
    return orjson.loads(base64.b64decode(headers["X-MAX-PAYLOAD"]))


def query_pairs(url: str) -> list[tuple[str, str]]:
    return parse_qsl(urlsplit(url).query, keep_blank_values=True)


def url_path(url: str) -> str:
    return urlsplit(url).path


@lru_cache(maxsize=1)
def data_files() -> list[Path]:
    return list(DATA_DIR.iterdir())


@lru_cache(maxsize=None)
def json_data_files(name: str) -> list[Path]:
    return list(
        sorted(
            path
            for path in data_files()
            if path.match(f"*/{name}.*.json", case_sensitive=True)
        )
    )


def load_json(name: str, case: int | None = None) -> Any:
    case_part = f"{case}." if case else ""
    path = DATA_DIR / f"{name}.{case_part}json"
    with open(path, "rb") as fh:
        return orjson.loads(fh.read())


def load_json_all_cases(name: str) -> list[tuple[Any, Path]]:
    """Load all json payloads for a given base name (case0, case1, ...)."""
    results = []
    for path in json_data_files(name):
        log.debug("Loading json from %s", path.as_posix())
        with open(path, "rb") as fh:
            payload = orjson.loads(fh.read())
            results.append((payload, path))
    return results
