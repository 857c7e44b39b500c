"""Environment configuration setup utilities.

This module provides functions for loading API credentials from .env files
or the process environment.
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

from maicoin_max.errors import MissingCredentialsError
from maicoin_max.helpers import DEFAULT_API_URL
from maicoin_max.types import Credentials

log = logging.getLogger(__name__)


def setup_environment(env_file: str | Path = ".env") -> tuple[str, Credentials]:
    """Load the API endpoint and credentials.

    Loads environment variables from a .env file if present, otherwise falls
    back to system environment variables. Variables already set in the
    environment take precedence over the file.

    Args:
        env_file: Path of the .env file to load

    Returns:
        Tuple:
            - api_url: The API endpoint URL (``MAX_API_URL``)
            - credentials: Access key (``MAX_API_KEY``) and secret key
              (``MAX_API_SECRET``)

    Raises:
        MissingCredentialsError: If the access key or secret key is not set

    """
    env_file_path = Path(env_file)
    if env_file_path.exists():
        log.info("Loading environment variables from %s", env_file_path)
        load_dotenv(env_file_path)
    else:
        log.info("%s not found. Falling back to environment variables.", env_file_path)

    api_url = os.environ.get("MAX_API_URL", DEFAULT_API_URL)
    access_key = os.environ.get("MAX_API_KEY", "")
    secret_key = os.environ.get("MAX_API_SECRET", "")

    if not access_key:
        raise MissingCredentialsError("MAX_API_KEY")
    if not secret_key:
        raise MissingCredentialsError("MAX_API_SECRET")

    log.info("Using API endpoint %s", api_url)
    return api_url, Credentials.from_strings(access_key, secret_key)
