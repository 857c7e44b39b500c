from decimal import Decimal

import pytest

from maicoin_max.errors import ApiError, DecodeError, OrderRejected, ValidationError
from maicoin_max.executors.interface import HttpResponse
from maicoin_max.payload import SubmitOrderPayload, canonical_json
from maicoin_max.types import CreateOrder, OrderState, OrderType, Side
from tests.mock_executors import MockSuccessfulOutput
from tests.unit.conftest import API_URL, decode_payload, load_json, query_pairs


def is_order_post(call) -> bool:
    method, url, headers, body = call.arg_pack
    return (
        call.function_name == "send"
        and method == "POST"
        and url.startswith(f"{API_URL}/api/v2/orders?nonce=")
        and body is not None
    )


def test_submit_order(mock_http_client):
    client, mock_http = mock_http_client
    payload = load_json("response.order")

    mock_http.stage_output(
        MockSuccessfulOutput(
            output=HttpResponse(status=201, body=payload),
            call_validation=is_order_post,
        )
    )

    order = client.submit_order(
        CreateOrder("DOGETWD", Side.BUY, volume="100000.0", price=1)
    )

    assert order.id == payload["id"]
    assert order.side is Side.BUY
    assert order.ord_type is OrderType.LIMIT
    assert order.state is OrderState.WAIT
    assert order.volume == "100000.0"
    assert order.created_at == 1700000000001


def test_submit_order_wire_format(mock_http_client):
    client, mock_http = mock_http_client

    mock_http.stage_output(
        MockSuccessfulOutput(
            output=HttpResponse(status=201, body=load_json("response.order"))
        )
    )

    client.submit_order(
        CreateOrder("dogetwd", Side.BUY, volume=Decimal("100000.0"), price="1")
    )

    method, url, headers, body = mock_http.call_log[0].arg_pack
    sent = decode_payload(headers)
    assert sent == {
        "nonce": sent["nonce"],
        "path": "/api/v2/orders",
        "market": "dogetwd",
        "side": "buy",
        "volume": "100000.0",
        "price": "1",
        "ord_type": "limit",
    }
    assert list(sent) == [k for k, _ in query_pairs(url)]
    assert body == canonical_json(
        SubmitOrderPayload(
            nonce=sent["nonce"],
            path="/api/v2/orders",
            market="dogetwd",
            side=Side.BUY,
            volume=Decimal("100000.0"),
            price=Decimal("1"),
            ord_type=OrderType.LIMIT,
        )
    )


def test_submit_stop_order_carries_optional_fields(mock_http_client):
    client, mock_http = mock_http_client
    response = {
        **load_json("response.order"),
        "ord_type": "stop_limit",
        "stop_price": "0.95",
        "client_oid": "grid-1",
        "group_id": 3,
    }

    mock_http.stage_output(
        MockSuccessfulOutput(output=HttpResponse(status=201, body=response))
    )

    order = client.submit_order(
        CreateOrder(
            "dogetwd",
            Side.SELL,
            volume="10",
            price="0.9",
            ord_type=OrderType.STOP_LIMIT,
            stop_price="0.95",
            client_oid="grid-1",
            group_id=3,
        )
    )

    sent = decode_payload(mock_http.call_log[0].arg_pack[2])
    assert list(sent)[2:] == [
        "market",
        "side",
        "volume",
        "price",
        "client_oid",
        "stop_price",
        "ord_type",
        "group_id",
    ]
    assert sent["stop_price"] == "0.95"
    assert order.stop_price == "0.95"
    assert order.client_oid == "grid-1"


@pytest.mark.parametrize("status", [200, 400, 422])
def test_submit_order_rejected(mock_http_client, status):
    client, mock_http = mock_http_client

    mock_http.stage_output(
        MockSuccessfulOutput(
            output=HttpResponse(
                status=status, body={"error": {"message": "insufficient balance"}}
            ),
            call_validation=is_order_post,
        )
    )

    with pytest.raises(ApiError) as exc_info:
        client.submit_order(
            CreateOrder("dogetwd", Side.BUY, volume="100000.0", price="1")
        )

    assert isinstance(exc_info.value, OrderRejected)
    assert exc_info.value.message == "insufficient balance"
    assert exc_info.value.status_code == status
    assert exc_info.value.code is None


def test_submit_order_rejected_with_code(mock_http_client):
    client, mock_http = mock_http_client

    mock_http.stage_output(
        MockSuccessfulOutput(
            output=HttpResponse(
                status=400,
                body={"error": {"code": 2007, "message": "invalid volume"}},
            )
        )
    )

    with pytest.raises(OrderRejected) as exc_info:
        client.submit_order(CreateOrder("dogetwd", Side.BUY, volume="0", price="1"))

    assert exc_info.value.code == 2007
    assert str(exc_info.value) == "[2007] invalid volume (status: 400)"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"volume": "1"},
        {"volume": "1", "ord_type": OrderType.POST_ONLY},
        {"volume": "1", "price": "1", "ord_type": OrderType.STOP_LIMIT},
        {"volume": "1", "ord_type": OrderType.STOP_MARKET},
        {"volume": "-1", "price": "1"},
        {"volume": "1e5", "price": "1"},
    ],
)
def test_invalid_create_order_never_reaches_the_wire(mock_http_client, kwargs):
    client, mock_http = mock_http_client

    with pytest.raises(ValidationError):
        client.submit_order(CreateOrder("dogetwd", Side.BUY, **kwargs))

    assert mock_http.call_log == []


def test_market_order_needs_no_price(mock_http_client):
    client, mock_http = mock_http_client
    response = {**load_json("response.order"), "ord_type": "market", "price": None}

    mock_http.stage_output(
        MockSuccessfulOutput(output=HttpResponse(status=201, body=response))
    )

    order = client.submit_order(
        CreateOrder("dogetwd", Side.BUY, volume="10", ord_type=OrderType.MARKET)
    )

    assert "price" not in decode_payload(mock_http.call_log[0].arg_pack[2])
    assert order.price is None


def test_submit_order_deserialization_error(mock_http_client):
    client, mock_http = mock_http_client

    mock_http.stage_output(
        MockSuccessfulOutput(
            output=HttpResponse(status=201, body={"id": "not_a_number"}),
        )
    )

    with pytest.raises(DecodeError) as exc_info:
        client.submit_order(CreateOrder("dogetwd", Side.BUY, volume="1", price="1"))

    assert "Received invalid" in str(exc_info.value)
