"""Default executor configuration.

This module defines the default HTTP executor implementation used by the
client when no custom executor is provided.
"""

from typing import Type

from maicoin_max.executors.httpx import HttpxHttpExecutor
from maicoin_max.executors.interface import HttpExecutor

DEFAULT_HTTP_EXECUTOR: Type[HttpExecutor] = HttpxHttpExecutor
