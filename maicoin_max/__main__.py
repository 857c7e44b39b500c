"""Command line entry point: ``python -m maicoin_max --config bot.yaml``."""

import argparse
import logging
import sys

from maicoin_max.api import MaxApiClient
from maicoin_max.config import load_config
from maicoin_max.env_setup import setup_environment
from maicoin_max.errors import BaseError
from maicoin_max.runner import Runner

log = logging.getLogger("maicoin_max")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="maicoin_max",
        description="Run the MAX exchange client loop",
    )
    parser.add_argument(
        "--config", default="config.yaml", help="YAML strategy config (default: config.yaml)"
    )
    parser.add_argument(
        "--env-file", default=".env", help="File holding MAX_API_KEY and MAX_API_SECRET"
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="[%(asctime)s] %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    try:
        api_url, credentials = setup_environment(args.env_file)
        config = load_config(args.config)
    except BaseError as e:
        log.error("Cannot start: %s", e)
        return 1

    client = MaxApiClient(
        credentials=credentials, api_url=api_url, timeout=config.request_timeout
    )
    runner = Runner(client, config)
    runner.install_signal_handlers()
    return runner.run()


if __name__ == "__main__":
    sys.exit(main())
