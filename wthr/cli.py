"""Command-line entry point: post (or preview) one city's weather."""

from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence

import requests

from .cities import CITY_CONFIGS, city_keys
from .config import Settings, resolve_run_config
from .errors import PostRunError, WthrError
from .poster import run_city
from utils.logging_utils import get_tagged_logger, setup_logging

logger = get_tagged_logger(__name__, tag="cli")


def build_parser() -> argparse.ArgumentParser:
    choices = city_keys(CITY_CONFIGS)
    parser = argparse.ArgumentParser(
        prog="wthr-post",
        description="Generate a weather post with an LLM and publish it to Bluesky.",
    )
    parser.add_argument(
        "--city",
        required=True,
        choices=choices,
        help=f"City to post weather for ({', '.join(choices)})",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Generate the post without publishing to Bluesky",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Override LOG_LEVEL (DEBUG, INFO, WARNING, ...)",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Parse flags, run once, and map failures to a non-zero exit code."""
    args = build_parser().parse_args(argv)

    try:
        settings = Settings()
        setup_logging(level=(args.log_level or settings.log_level).upper(), job_name=f"wthr-{args.city}")
        run_config = resolve_run_config(args.city, args.dry_run, settings)
    except WthrError as exc:
        logger.error("Configuration error for %s: %s", args.city, exc)
        return 1
    except ValueError as exc:
        # pydantic ValidationError or a bad log level
        logger.error("Invalid configuration for %s: %s", args.city, exc)
        return 1

    with requests.Session() as session:
        try:
            run_city(run_config, session=session)
        except PostRunError as exc:
            logger.error("Run for %s failed during %s: %s", exc.city, exc.step, exc.cause)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
