"""Tests for HTTP error paths shared by every endpoint."""

import pytest

from maicoin_max.api import error_details, raise_response_errors
from maicoin_max.errors import (
    ApiError,
    AuthFailure,
    ExchangeError,
    NotFound,
    OrderRejected,
    RateLimited,
    ServerError,
    TransportError,
    TransportTimeout,
    TransportUnavailable,
)
from maicoin_max.executors.interface import HttpResponse
from tests.mock_executors import MockExceptionOutput, MockSuccessfulOutput


@pytest.mark.parametrize(
    "status,error_type",
    [
        (401, AuthFailure),
        (404, NotFound),
        (429, RateLimited),
        (500, ServerError),
        (503, ServerError),
        (400, ApiError),
        (403, ApiError),
    ],
)
def test_status_maps_to_error(mock_http_client, status, error_type):
    client, mock_http = mock_http_client

    mock_http.stage_output(
        MockSuccessfulOutput(
            output=HttpResponse(
                status=status, body={"error": {"code": 2000, "message": "nope"}}
            )
        )
    )

    with pytest.raises(error_type) as exc_info:
        client.sync_accounts()

    assert isinstance(exc_info.value, ExchangeError)
    assert exc_info.value.status_code == status
    assert exc_info.value.code == 2000
    assert "nope" in exc_info.value.message


def test_auth_failure_on_bad_signature(mock_http_client):
    client, mock_http = mock_http_client

    mock_http.stage_output(
        MockSuccessfulOutput(
            output=HttpResponse(
                status=401,
                body={"error": {"code": 2005, "message": "signature is incorrect"}},
            )
        )
    )

    with pytest.raises(AuthFailure) as exc_info:
        client.get_member_info()

    assert str(exc_info.value) == (
        "[2005] Unauthorized: signature is incorrect (status: 401)"
    )


def test_order_endpoints_keep_status_specific_errors(mock_http_client):
    client, mock_http = mock_http_client

    mock_http.stage_output(
        MockSuccessfulOutput(
            output=HttpResponse(status=401, body={"error": {"message": "bad nonce"}})
        )
    )

    with pytest.raises(AuthFailure) as exc_info:
        client.cancel_order(order_id=1)

    assert not isinstance(exc_info.value, OrderRejected)


def test_error_without_body(mock_http_client):
    client, mock_http = mock_http_client

    mock_http.stage_output(MockSuccessfulOutput(output=HttpResponse(status=502)))

    with pytest.raises(ServerError) as exc_info:
        client.vip_level()

    assert "<no error message>" in str(exc_info.value)


def test_error_object_in_2xx_body_raises(mock_http_client):
    client, mock_http = mock_http_client

    mock_http.stage_output(
        MockSuccessfulOutput(
            output=HttpResponse(status=200, body={"error": "temporarily unavailable"})
        )
    )

    with pytest.raises(ApiError) as exc_info:
        client.get_member_info()

    assert exc_info.value.message == "temporarily unavailable"


@pytest.mark.parametrize(
    "exception",
    [
        TransportTimeout("GET request timed out", timeout_seconds=1.0),
        TransportUnavailable("Connection refused", url="https://max.gaierror.xyz"),
        TransportError("connection reset"),
    ],
)
def test_transport_errors_propagate(mock_http_client, exception):
    client, mock_http = mock_http_client

    mock_http.stage_output(MockExceptionOutput(exception=exception))

    with pytest.raises(TransportError) as exc_info:
        client.sync_accounts()

    assert exc_info.value is exception


def test_failed_sync_keeps_previous_snapshot(mock_http_client):
    client, mock_http = mock_http_client

    mock_http.stage_output(
        [
            MockSuccessfulOutput(
                output=HttpResponse(
                    status=200,
                    body=[{"currency": "twd", "balance": "1.0", "locked": "0.0"}],
                )
            ),
            MockExceptionOutput(exception=TransportTimeout("timed out")),
        ]
    )

    client.sync_accounts()
    with pytest.raises(TransportTimeout):
        client.sync_accounts()

    assert [a.currency for a in client.accounts] == ["twd"]


@pytest.mark.parametrize(
    "body,expected",
    [
        ({"error": {"code": 2006, "message": "nonce too old"}}, (2006, "nonce too old")),
        ({"error": {"message": "bad"}}, (None, "bad")),
        ({"error": {"code": "x", "message": "bad"}}, (None, "bad")),
        ({"error": "plain"}, (None, "plain")),
        ({"success": True}, None),
        ([], None),
        (None, None),
    ],
)
def test_error_details(body, expected):
    assert error_details(body) == expected


def test_success_passes_through():
    raise_response_errors(HttpResponse(status=200, body={"id": 1}))
    raise_response_errors(HttpResponse(status=204))
