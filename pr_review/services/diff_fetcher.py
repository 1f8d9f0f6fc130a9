"""Fetch pull request diffs through the GitHub CLI."""

import logging
import subprocess
from dataclasses import dataclass
from typing import Callable

from pr_review.config import Settings, get_settings
from pr_review.errors import DiffFetchError, InvalidURLError

logger = logging.getLogger(__name__)

# (org, repo, pr_number) -> unified diff text
DiffRunner = Callable[[str, str, str], str]


@dataclass(frozen=True)
class PullRequestRef:
    org: str
    repo: str
    number: str

    @property
    def repo_slug(self) -> str:
        return f"{self.org}/{self.repo}"


def parse_pr_url(url: str) -> PullRequestRef:
    """Extract org, repo and PR number from a pull request URL.

    URL format: https://github.com/{org}/{repo}/pull/{number}
    """
    parts = url.split("/")
    if len(parts) < 7:
        raise InvalidURLError("invalid PR URL")
    return PullRequestRef(org=parts[3], repo=parts[4], number=parts[6])


def run_gh_pr_diff(org: str, repo: str, number: str, gh_binary: str = "gh") -> str:
    """Run ``gh pr diff`` and return its stdout unmodified.

    Raises subprocess.CalledProcessError on non-zero exit and OSError when
    the binary cannot be started.
    """
    cmd = [gh_binary, "pr", "diff", "-R", f"{org}/{repo}", number]
    result = subprocess.run(cmd, check=True, capture_output=True)
    return result.stdout.decode("utf-8", errors="replace")


def _decode_output(output: bytes | str | None) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode("utf-8", errors="replace")
    return output


class DiffFetcher:
    def __init__(self, settings: Settings | None = None, runner: DiffRunner | None = None):
        self.settings = settings or get_settings()
        self.runner = runner or self._default_runner

    def _default_runner(self, org: str, repo: str, number: str) -> str:
        return run_gh_pr_diff(org, repo, number, gh_binary=self.settings.gh_binary)

    def fetch_diff(self, url: str) -> str:
        """Return the unified diff for the pull request at ``url``."""
        ref = parse_pr_url(url)
        logger.info("Fetching diff for %s#%s", ref.repo_slug, ref.number)

        try:
            diff = self.runner(ref.org, ref.repo, ref.number)
        except subprocess.CalledProcessError as e:
            err = _decode_output(e.stderr or e.stdout).strip()
            logger.warning("gh pr diff failed with exit code %s: %s", e.returncode, err)
            message = f"error running gh pr diff: exit status {e.returncode}"
            if err:
                message = f"{message}: {err}"
            raise DiffFetchError(message) from e
        except (subprocess.SubprocessError, OSError) as e:
            raise DiffFetchError(f"error running gh pr diff: {e}") from e

        logger.debug("Fetched %d characters of diff", len(diff))
        return diff
