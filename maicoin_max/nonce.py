"""Millisecond nonce source for signed requests.

MAX rejects a nonce that is not larger than the last one it accepted from the
same key, so every signed request in the process draws from one NonceSource.
"""

import logging
import threading
from time import time_ns
from typing import Callable

from maicoin_max.errors import ClockError
from maicoin_max.types import Nonce

log = logging.getLogger(__name__)


def wall_clock_ms() -> int:
    """Current wall clock time in milliseconds since epoch."""
    return time_ns() // 1_000_000


class NonceSource:
    """Strictly increasing millisecond nonces, safe to share between threads.

    The wall clock seeds each value. When the clock repeats or steps back
    (two calls within one millisecond, NTP correction) the source advances
    from the last issued value instead.
    """

    def __init__(self, clock: Callable[[], int] = wall_clock_ms):
        """Initialize the nonce source.

        Args:
            clock: Callable returning the current time in milliseconds.

        """
        self._clock = clock
        self._last: Nonce = 0
        self._lock = threading.Lock()

    @property
    def last(self) -> Nonce:
        """The most recently issued nonce, 0 before the first call."""
        return self._last

    def next(self) -> Nonce:
        """Issue the next nonce.

        Returns:
            A nonce strictly greater than every nonce issued before.

        Raises:
            ClockError: If the clock fails or reports an unusable value.

        """
        with self._lock:
            try:
                now = self._clock()
            except (OSError, OverflowError, ValueError) as e:
                raise ClockError(f"Wall clock unavailable: {e}") from e

            if isinstance(now, bool) or not isinstance(now, int) or now < 0:
                raise ClockError(f"Wall clock returned unusable value {now!r}")

            if now <= self._last:
                log.debug(
                    "Clock at %d did not advance past last nonce %d", now, self._last
                )
                now = self._last + 1

            self._last = now
            return now
