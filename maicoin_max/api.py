"""HTTP API client for the MAX exchange.

This module provides the MaxApiClient class for interacting with the MAX REST
API, including market data queries, account management, and order operations.
"""

import logging
import threading
from typing import Any

from maicoin_max.auth import RequestBuilder, SignedRequest
from maicoin_max.errors import (
    ApiError,
    AuthFailure,
    DecodeError,
    NotFound,
    OrderRejected,
    RateLimited,
    ServerError,
    ValidationError,
)
from maicoin_max.executors import DEFAULT_HTTP_EXECUTOR, HttpExecutor
from maicoin_max.executors.interface import HttpResponse
from maicoin_max.helpers import DEFAULT_API_URL, DEFAULT_TIMEOUT, create_with
from maicoin_max.nonce import NonceSource
from maicoin_max.payload import (
    CancelOrderPayload,
    ListOrdersPayload,
    RequestPayload,
    SubmitOrderPayload,
)
from maicoin_max.types import (
    Account,
    CreateOrder,
    Credentials,
    Json,
    Member,
    Order,
    OrderBy,
    OrderId,
    OrderState,
    ServerTime,
    Ticker,
    VipLevel,
    VipTier,
)

log = logging.getLogger(__name__)


def error_details(body: Json) -> tuple[int | None, str] | None:
    """Extract ``(code, message)`` from a MAX error body, or None if it has none."""
    if not isinstance(body, dict):
        return None
    error = body.get("error")
    if error is None:
        return None
    if isinstance(error, dict):
        code = error.get("code")
        message = error.get("message")
        return (
            code if isinstance(code, int) else None,
            str(message) if message is not None else str(error),
        )
    return None, str(error)


def raise_response_errors(
    response: HttpResponse, error_type: type[ApiError] = ApiError
) -> None:
    """Check HTTP response status and body and raise appropriate errors.

    MAX reports failures as ``{"error": {"code": ..., "message": ...}}``. Some
    endpoints do so with a 2XX status, so the body is checked even on success.

    Args:
        response: The HTTP response to validate
        error_type: Error raised for request rejections not covered by a more
            specific type (OrderRejected for order endpoints)

    Raises:
        AuthFailure: For 401 status codes
        NotFound: For 404 status codes
        RateLimited: For 429 status codes
        ServerError: For 5XX status codes
        ApiError: For any other rejection, as ``error_type``

    """
    status = response.status
    details = error_details(response.body)

    if 200 <= status < 300:
        if details is None:
            return
        code, message = details
        raise error_type(status, message, code)

    if details is not None:
        code, message = details
    else:
        code = None
        message = str(response.body) if response.body else "<no error message>"

    if status == 401:
        raise AuthFailure(status, f"Unauthorized: {message}", code)

    if status == 404:
        raise NotFound(status, f"Not found: {message}", code)

    if status == 429:
        raise RateLimited(status, f"Rate limit exceeded: {message}", code)

    if 500 <= status < 600:
        raise ServerError(status, f"Server error ({status}): {message}", code)

    raise error_type(status, message, code)


class MaxApiClient:
    """MAX API client for account, order and market data operations.

    Examples:
        .. code-block:: python

            from maicoin_max import Credentials, MaxApiClient

            client = MaxApiClient(
                credentials=Credentials.from_strings("access-key", "secret-key"),
            )

            for account in client.sync_accounts():
                print(account.currency, account.balance)

            print(client.ticker("dogetwd").last)
    """

    _http_executor: HttpExecutor
    _builder: RequestBuilder

    def __init__(
        self,
        credentials: Credentials | None = None,
        api_url: str = DEFAULT_API_URL,
        executor: HttpExecutor | None = None,
        nonce_source: NonceSource | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """Initialize the MAX API client.

        Args:
            credentials: Access and secret key (optional for market data only)
            api_url: Base URL for the MAX API (default: production URL)
            executor: Custom HTTP executor (optional, uses default if not provided)
            nonce_source: Nonce source shared by every signed request of this
                credential (optional, a fresh one if not provided)
            timeout: Request timeout in seconds for the default executor

        """
        self._builder = RequestBuilder(credentials, api_url, nonce_source)
        self._http_executor = (
            executor if executor is not None else DEFAULT_HTTP_EXECUTOR(timeout=timeout)
        )
        self._accounts: tuple[Account, ...] = ()
        self._accounts_lock = threading.Lock()
        self.decode_warnings: list[str] = []

    @property
    def credentials(self) -> Credentials | None:
        """Credentials used to sign requests."""
        return self._builder.credentials

    @property
    def nonce_source(self) -> NonceSource:
        """Nonce source used to sign requests."""
        return self._builder.nonce_source

    @property
    def accounts(self) -> list[Account]:
        """Snapshot of the accounts from the last successful sync."""
        with self._accounts_lock:
            return list(self._accounts)

    ### ===================================================== Market API =====================================================

    def server_time(self) -> ServerTime:
        """Get the exchange clock.

        Returns:
            ServerTime: Seconds since epoch on the exchange

        Raises:
            DecodeError: If the API response cannot be parsed

        Endpoint:
            GET /api/v2/timestamp

        """
        response = self.__send_public_request("/api/v2/timestamp")
        if isinstance(response, bool) or not isinstance(response, int):
            raise DecodeError(f"Received invalid response {response=}")
        return ServerTime(timestamp=response)

    def ticker(self, market: str) -> Ticker:
        """Get the latest ticker of a market.

        Args:
            market: Market id (e.g., "dogetwd")

        Returns:
            Ticker: Best bid/ask, last price and daily range

        Raises:
            DecodeError: If the API response cannot be parsed

        Endpoint:
            GET /api/v2/tickers/{market}

        """
        market = market.lower()
        response = self.__send_public_request(f"/api/v2/tickers/{market}")
        try:
            result = create_with(Ticker, {**response, "market": market})  # type: ignore
        except (TypeError, KeyError, ValueError) as e:
            raise DecodeError(f"Received invalid response {response=}") from e
        return result

    ### ===================================================== Account API =====================================================

    def get_member_info(self) -> Member:
        """Get the profile of the authenticated member.

        Returns:
            Member: Serial number, email and account balances

        Raises:
            DecodeError: If the API response cannot be parsed

        Endpoint:
            GET /api/v2/members/me

        """
        response = self.__send_signed_request("GET", "/api/v2/members/me")
        try:
            result = Member(
                sn=str(response["sn"]),  # type: ignore
                email=response.get("email"),  # type: ignore
                accounts=[
                    create_with(Account, account)  # type: ignore
                    for account in response.get("accounts", [])  # type: ignore
                ],
            )
        except (TypeError, KeyError, ValueError, AttributeError) as e:
            raise DecodeError(f"Received invalid response {response=}") from e
        return result

    def sync_accounts(self) -> list[Account]:
        """Fetch all account balances and replace the local snapshot.

        Elements that fail to decode are skipped with a warning, collected in
        ``decode_warnings``; the rest still make it into the snapshot.

        Returns:
            list[Account]: The new snapshot, in response order

        Raises:
            DecodeError: If the response is not a list

        Endpoint:
            GET /api/v2/members/accounts

        """
        response = self.__send_signed_request("GET", "/api/v2/members/accounts")
        if not isinstance(response, list):
            raise DecodeError(f"Received invalid response {response=}")

        accounts: list[Account] = []
        warnings: list[str] = []
        for index, element in enumerate(response):
            try:
                accounts.append(create_with(Account, element))  # type: ignore
            except (TypeError, KeyError, ValueError) as e:
                log.warning("Skipping malformed account #%d: %s", index, e)
                warnings.append(f"account #{index}: {e}")

        with self._accounts_lock:
            self._accounts = tuple(accounts)
        self.decode_warnings = warnings

        log.info("Synced %d accounts (%d skipped)", len(accounts), len(warnings))
        return accounts

    def vip_level(self) -> VipLevel:
        """Get the fee tier of the authenticated member.

        Returns:
            VipLevel: Current and next fee tier

        Raises:
            DecodeError: If the API response cannot be parsed

        Endpoint:
            GET /api/v2/members/vip_level

        """
        response = self.__send_signed_request("GET", "/api/v2/members/vip_level")
        try:
            next_level = response.get("next_vip_level")  # type: ignore
            result = VipLevel(
                current=create_with(VipTier, response["current_vip_level"]),  # type: ignore
                next=create_with(VipTier, next_level) if next_level else None,  # type: ignore
            )
        except (TypeError, KeyError, ValueError, AttributeError) as e:
            raise DecodeError(f"Received invalid response {response=}") from e
        return result

    ### ===================================================== Order API =====================================================

    def list_orders(
        self,
        market: str,
        state: OrderState | str | None = None,
        order_by: OrderBy | str | None = None,
        group_id: int | None = None,
        pagination: bool | None = None,
        page: int | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[Order]:
        """List orders of a market.

        Args:
            market: Market id (e.g., "dogetwd")
            state: Only orders in this state
            order_by: Sort order
            group_id: Only orders of this group
            pagination: Whether the server paginates
            page: Page number
            limit: Page size
            offset: Number of orders to skip

        Returns:
            list[Order]: Orders in the order the server returned them

        Raises:
            ValidationError: If state or order_by is not a known value
            DecodeError: If the API response cannot be parsed

        Endpoint:
            GET /api/v2/orders

        """
        try:
            state = OrderState(state) if state is not None else None
            order_by = OrderBy(order_by) if order_by is not None else None
        except ValueError as e:
            raise ValidationError(f"Invalid order filter: {e}") from e

        response = self.__send_signed_request(
            "GET",
            "/api/v2/orders",
            ListOrdersPayload,
            market=market.lower(),
            state=state,
            order_by=order_by,
            group_id=group_id,
            pagination=pagination,
            page=page,
            limit=limit,
            offset=offset,
        )
        if not isinstance(response, list):
            raise DecodeError(f"Received invalid response {response=}")
        try:
            orders = [create_with(Order, order) for order in response]  # type: ignore
        except (TypeError, KeyError, ValueError) as e:
            raise DecodeError(f"Received invalid response {response=}") from e
        return orders

    def submit_order(self, order: CreateOrder) -> Order:
        """Submit a new order.

        Args:
            order: The order to create

        Returns:
            Order: The order as accepted by the exchange

        Raises:
            OrderRejected: If the exchange refuses the order
            DecodeError: If the API response cannot be parsed

        Example:
            .. code-block:: python

                client.submit_order(
                    CreateOrder("dogetwd", Side.BUY, volume="100", price="1.5")
                )

        Endpoint:
            POST /api/v2/orders

        """
        response = self.__send_signed_request(
            "POST",
            "/api/v2/orders",
            SubmitOrderPayload,
            error_type=OrderRejected,
            market=order.market,
            side=order.side,
            volume=order.volume,
            price=order.price,
            client_oid=order.client_oid,
            stop_price=order.stop_price,
            ord_type=order.ord_type,
            group_id=order.group_id,
        )
        try:
            result = create_with(Order, response)  # type: ignore
        except (TypeError, KeyError, ValueError) as e:
            raise DecodeError(f"Received invalid response {response=}") from e
        log.info(
            "Submitted %s %s %s @ %s as order %s",
            result.side.value,
            result.volume,
            result.market,
            result.price,
            result.id,
        )
        return result

    def cancel_order(
        self, order_id: OrderId | None = None, client_oid: str | None = None
    ) -> Order:
        """Cancel an existing order.

        Cancels an order using either the order id or the client_oid given
        when creating the order. At least one identifier must be provided.

        Args:
            order_id: The exchange order id (optional)
            client_oid: The client supplied order id (optional)

        Returns:
            Order: The order as reported after cancellation

        Raises:
            ValidationError: If neither order_id nor client_oid is provided
            OrderRejected: If the exchange refuses the cancellation
            DecodeError: If the API response cannot be parsed

        Endpoint:
            POST /api/v2/order/delete

        """
        if order_id is None and client_oid is None:
            raise ValidationError from ValueError(
                "Either order_id or client_oid must be provided"
            )

        response = self.__send_signed_request(
            "POST",
            "/api/v2/order/delete",
            CancelOrderPayload,
            error_type=OrderRejected,
            id=order_id,
            client_oid=client_oid,
        )
        try:
            result = create_with(Order, response)  # type: ignore
        except (TypeError, KeyError, ValueError) as e:
            raise DecodeError(f"Received invalid response {response=}") from e
        return result

    """ Deferred helpers """

    def __send_public_request(self, path: str, **params: Any) -> Json:
        """Send an unauthenticated GET request and return the checked body."""
        url = self._builder.public_url(path, **params)
        log.debug("GET %s", url)
        response = self._http_executor.send("GET", url)
        raise_response_errors(response)
        return response.body

    def __send_signed_request(
        self,
        method: str,
        path: str,
        payload_type: type[RequestPayload] = RequestPayload,
        error_type: type[ApiError] = ApiError,
        **params: Any,
    ) -> Json:
        """Sign with a fresh nonce, send, and return the checked body.

        Args:
            method: HTTP method (GET, POST)
            path: The API endpoint path
            payload_type: Payload variant of the endpoint
            error_type: Error raised when the exchange rejects the request
            **params: Payload fields

        Returns:
            Json: The parsed JSON response body

        """
        request: SignedRequest = self._builder.build(
            method, path, payload_type, **params
        )
        log.debug("%s %s", request.method, path)
        response = self._http_executor.send(
            request.method, request.url, request.headers, request.body
        )
        raise_response_errors(response, error_type)
        return response.body
