"""Run loop owning a MaxApiClient.

The loop validates credentials and connectivity once, then ticks at a fixed
interval until a shutdown is requested. Shutdown is cooperative: the flag is
checked between ticks, so a tick in progress always completes.
"""

import logging
import signal
import threading
import time
from enum import Enum
from typing import Callable

from maicoin_max.api import MaxApiClient
from maicoin_max.config import BotConfig
from maicoin_max.errors import ApiError, AuthFailure, BaseError, TransportError

log = logging.getLogger(__name__)

# Local clock drift beyond this is worth a warning, nonces come from it
MAX_CLOCK_SKEW_SECONDS: float = 5.0

TickHandler = Callable[[MaxApiClient], None]


class RunState(Enum):
    """Lifecycle of a Runner."""

    STARTING = "starting"
    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"
    STOPPED = "stopped"


def idle_tick(client: MaxApiClient) -> None:
    """Tick handler that does nothing; strategies plug in their own."""
    return None


class Runner:
    """Drives a client through startup, the tick loop and shutdown."""

    def __init__(
        self,
        client: MaxApiClient,
        config: BotConfig,
        on_tick: TickHandler = idle_tick,
        auth_backoff: float = 5.0,
    ):
        """Initialize the runner.

        Args:
            client: Client the loop owns
            config: Market and timing settings
            on_tick: Called once per tick with the client
            auth_backoff: Extra seconds to wait after a mid-run AuthFailure

        """
        self.client = client
        self.config = config
        self.on_tick = on_tick
        self.auth_backoff = auth_backoff
        self.state = RunState.STARTING
        self.ticks = 0
        self._shutdown = threading.Event()
        # signal handlers run on the main thread, possibly while it holds this lock
        self._state_lock = threading.RLock()

    @property
    def shutdown_requested(self) -> bool:
        return self._shutdown.is_set()

    def request_shutdown(self) -> None:
        """Ask the loop to stop after the current tick. Safe to call repeatedly."""
        with self._state_lock:
            if self._shutdown.is_set():
                log.debug("Shutdown already requested")
                return
            self._shutdown.set()
            if self.state == RunState.RUNNING:
                self.state = RunState.SHUTTING_DOWN
        log.info("Shutdown requested")

    def install_signal_handlers(self) -> None:
        """Route SIGINT and SIGTERM to request_shutdown.

        Must be called from the main thread.
        """

        def signal_handler(signum, frame):
            log.info("Received signal %s", signal.Signals(signum).name)
            self.request_shutdown()

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

    def start(self) -> bool:
        """Validate credentials and connectivity.

        Returns:
            True if the loop may enter RUNNING, False if startup failed and the
            runner is STOPPED

        """
        market = self.config.market
        try:
            accounts = self.client.sync_accounts()
            log.info("Loaded %d account balances", len(accounts))

            orders = self.client.list_orders(market)
            log.info("Found %d orders on %s", len(orders), market)

            server_time = self.client.server_time()
            skew = server_time.skew(time.time())
            if abs(skew) > MAX_CLOCK_SKEW_SECONDS:
                log.warning("Local clock is %.1fs off the exchange clock", skew)
            else:
                log.info("Clock skew %.1fs", skew)

            ticker = self.client.ticker(market)
            log.info(
                "%s last price %s (bid %s, ask %s)",
                market,
                ticker.last,
                ticker.buy,
                ticker.sell,
            )
        except AuthFailure as e:
            log.error("Authentication failed during startup: %s", e)
            self.state = RunState.STOPPED
            return False
        except BaseError as e:
            log.error("Startup failed: %s", e)
            self.state = RunState.STOPPED
            return False
        return True

    def tick(self) -> None:
        """Run one tick, logging recoverable failures instead of raising."""
        self.ticks += 1
        try:
            self.on_tick(self.client)
        except AuthFailure as e:
            log.error("Tick %d rejected by exchange auth: %s", self.ticks, e)
            # nonce skew is the usual cause, give the clock room before retrying
            self._shutdown.wait(self.auth_backoff)
        except (TransportError, ApiError) as e:
            log.warning("Tick %d failed: %s", self.ticks, e)

    def run(self) -> int:
        """Start, loop until shutdown, stop.

        Returns:
            Process exit code: 0 after a normal shutdown, 1 if startup failed

        """
        log.info("Starting on %s", self.config.market)
        if not self.start():
            return 1

        with self._state_lock:
            if not self._shutdown.is_set():
                self.state = RunState.RUNNING
        log.info("Running, tick interval %.1fs", self.config.tick_interval)

        while not self._shutdown.is_set():
            self.tick()
            self._shutdown.wait(self.config.tick_interval)

        self.state = RunState.STOPPED
        log.info("Stopped after %d ticks", self.ticks)
        return 0
