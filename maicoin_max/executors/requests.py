from typing import Mapping, override

import requests

from maicoin_max.errors import (
    BaseError,
    TransportError,
    TransportTimeout,
    TransportUnavailable,
)
from maicoin_max.executors.interface import HttpExecutor, HttpResponse
from maicoin_max.helpers import DEFAULT_TIMEOUT, decode_response_body, get_user_agent


class RequestsHttpExecutor(HttpExecutor):
    def __init__(self, timeout: float = DEFAULT_TIMEOUT):
        self.timeout = timeout
        self.session = requests.Session()

    @override
    def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str] | None = None,
        body: bytes | None = None,
    ) -> HttpResponse:
        request_headers = {"User-Agent": get_user_agent(), **(headers or {})}
        try:
            response = self.session.request(
                method, url, headers=request_headers, data=body, timeout=self.timeout
            )
        except BaseError:
            raise
        except requests.Timeout as e:
            raise TransportTimeout(
                f"{method} request to {url} timed out", timeout_seconds=self.timeout
            ) from e
        except requests.ConnectionError as e:
            raise TransportUnavailable(f"Failed to connect to {url}", url=url) from e
        except Exception as e:
            raise TransportError(f"{method} request to {url} failed: {e}") from e
        return HttpResponse(
            status=response.status_code,
            body=decode_response_body(response.status_code, response.content, url),
            headers=dict(response.headers),
        )
