"""pr_review_cli entry point.

Fetches a pull request diff with ``gh`` and prints an LLM review verdict.
Usage: pr_review_cli -pr <PR_URL>
"""

import argparse
import logging
import sys
from typing import Callable

from pr_review.config import FileConfig, Settings, get_settings, load_config
from pr_review.errors import ConfigError, PRReviewError
from pr_review.log_setup import configure_logging
from pr_review.services.diff_fetcher import DiffFetcher
from pr_review.services.reviewer import ReviewFn, ReviewGenerator

logger = logging.getLogger(__name__)

USAGE = "Usage: pr_review_cli -pr <PR_URL>"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="pr_review_cli",
        description="Review a GitHub pull request with an LLM",
    )
    parser.add_argument("-pr", dest="pr_url", default="", help="URL of the pull request")
    return parser.parse_args(argv)


def print_review(review: str) -> None:
    print(review)


def _load_file_config(settings: Settings) -> FileConfig | None:
    """Load the config file, or fall back to empty defaults when allowed.

    Returns None if loading failed and the settings require a config.
    """
    try:
        return load_config(settings)
    except ConfigError as e:
        if settings.require_config:
            print("Error loading config:", e.message)
            return None
        logger.warning("Config not loaded (%s); continuing with empty defaults", e.message)
        return FileConfig()


def main(
    argv: list[str] | None = None,
    *,
    settings: Settings | None = None,
    fetch_diff: Callable[[str], str] | None = None,
    generate_review: ReviewFn | None = None,
) -> int:
    """Run the review pipeline and return the process exit code."""
    settings = settings or get_settings()
    args = parse_args(argv)
    configure_logging(settings.log_level)

    if not args.pr_url:
        print(USAGE)
        return 0

    config = _load_file_config(settings)
    if config is None:
        return settings.error_exit_code

    fetch_diff = fetch_diff or DiffFetcher(settings).fetch_diff
    generate_review = generate_review or ReviewGenerator(settings).generate

    try:
        diff = fetch_diff(args.pr_url)
    except PRReviewError as e:
        print("Error fetching PR diff:", e.message)
        return settings.error_exit_code

    try:
        review = generate_review(diff, config.apikey.key)
    except PRReviewError as e:
        print("Error generating final consideration:", e.message)
        return settings.error_exit_code

    print_review(review)
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
