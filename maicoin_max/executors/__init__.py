from maicoin_max.executors.defaults import DEFAULT_HTTP_EXECUTOR
from maicoin_max.executors.httpx import HttpxHttpExecutor
from maicoin_max.executors.interface import HttpExecutor, HttpResponse
from maicoin_max.executors.requests import RequestsHttpExecutor

__all__ = [
    "HttpExecutor",
    "HttpResponse",
    "HttpxHttpExecutor",
    "RequestsHttpExecutor",
    "DEFAULT_HTTP_EXECUTOR",
]
