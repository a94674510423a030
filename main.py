"""Project entry-point (purge check CLI).

This module:
- Loads configuration (config.json + environment)
- Reads the purge job from a JSON file or from the command line
- Checks every URL, reports to Discord and prints the results as JSON
"""

import argparse
import json
import logging
import sys
import time
from typing import Any, Optional

import utils.config
import utils.title
from module.purge_checker import run_purge_check
from utils.loader import Loader

CURRENT_VERSION = "v1.0"


def _wait_with_spinner(seconds: float) -> None:
    with Loader("Waiting for the purge to propagate...", 0.05):
        time.sleep(seconds)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Verify that purged URLs were refreshed and report to Discord.")
    parser.add_argument("urls", nargs="*", help="URLs to check")
    parser.add_argument("--job", help="JSON file with post_id, purge_time and urls")
    parser.add_argument("--post-id", help="Identifier of the purged post")
    parser.add_argument("--purge-time", type=float, help="Unix timestamp (seconds) of the purge")
    parser.add_argument("--config", default="config.json", help="Path to the config file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def load_job(args: argparse.Namespace) -> dict[str, Any]:
    """Build the purge job from `--job` or from the individual arguments.

    Command line values override those read from the job file.

    Raises:
        OSError: If the job file cannot be read.
        ValueError: If the job file is not a JSON object.
    """
    job: dict[str, Any] = {}
    if args.job:
        with open(args.job, "r", encoding="utf-8") as f:
            job = json.load(f)
        if not isinstance(job, dict):
            raise ValueError(f"{args.job} must contain a JSON object")

    if args.urls:
        job["urls"] = args.urls
    if args.purge_time is not None:
        job["purge_time"] = args.purge_time
    if args.post_id is not None:
        job["post_id"] = args.post_id
    return job


def run_cli(argv: Optional[list[str]] = None) -> int:
    """Run one purge check and return the process exit code."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    utils.title.print_title(CURRENT_VERSION)

    try:
        config = utils.config.load_config(args.config)
        job = load_job(args)
        result = run_purge_check(job, config, sleep=_wait_with_spinner)
    except (OSError, ValueError) as exc:
        print(f"[!] {exc}", file=sys.stderr)
        return 2

    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(run_cli())
