import pytest
import subprocess
import sys
from unittest.mock import MagicMock, patch
from pr_review.config import Settings
from pr_review.errors import DiffFetchError, InvalidURLError
from pr_review.services.diff_fetcher import DiffFetcher, parse_pr_url, run_gh_pr_diff


SAMPLE_DIFF = "diff --git a/x.py b/x.py\n+print('hi')\n\n"


class TestParsePrUrl:
    def test_standard_url(self):
        ref = parse_pr_url("https://github.com/orgX/repoY/pull/123")
        assert ref.org == "orgX"
        assert ref.repo == "repoY"
        assert ref.number == "123"
        assert ref.repo_slug == "orgX/repoY"

    def test_extra_segments_ignored(self):
        ref = parse_pr_url("https://github.com/psf/requests/pull/42/files")
        assert (ref.org, ref.repo, ref.number) == ("psf", "requests", "42")

    @pytest.mark.parametrize(
        "url",
        ["", "not-a-url", "https://github.com/psf/requests", "https://github.com/psf/requests/pull"],
    )
    def test_short_url_rejected(self, url):
        with pytest.raises(InvalidURLError):
            parse_pr_url(url)


class TestRunGhPrDiff:
    def test_invokes_gh(self):
        completed = MagicMock(stdout=SAMPLE_DIFF.encode())
        with patch("subprocess.run", return_value=completed) as mock_run:
            diff = run_gh_pr_diff("orgX", "repoY", "123")

        assert diff == SAMPLE_DIFF
        args, kwargs = mock_run.call_args
        assert args[0] == ["gh", "pr", "diff", "-R", "orgX/repoY", "123"]
        assert kwargs["check"] is True
        assert kwargs["capture_output"] is True

    def test_custom_binary(self):
        completed = MagicMock(stdout=b"")
        with patch("subprocess.run", return_value=completed) as mock_run:
            run_gh_pr_diff("o", "r", "1", gh_binary="/usr/local/bin/gh")
        assert mock_run.call_args[0][0][0] == "/usr/local/bin/gh"


class TestDiffFetcher:
    def test_returns_diff_unmodified(self):
        runner = MagicMock(return_value=SAMPLE_DIFF)
        fetcher = DiffFetcher(Settings(), runner=runner)

        diff = fetcher.fetch_diff("https://github.com/orgX/repoY/pull/123")

        assert diff == SAMPLE_DIFF
        runner.assert_called_once_with("orgX", "repoY", "123")

    def test_invalid_url_spawns_nothing(self):
        runner = MagicMock()
        fetcher = DiffFetcher(Settings(), runner=runner)

        with pytest.raises(InvalidURLError):
            fetcher.fetch_diff("https://github.com/orgX")

        runner.assert_not_called()

    def test_invalid_url_default_runner_spawns_nothing(self):
        fetcher = DiffFetcher(Settings())
        with patch("subprocess.run") as mock_run:
            with pytest.raises(InvalidURLError):
                fetcher.fetch_diff("https://github.com/orgX/repoY")
        mock_run.assert_not_called()

    def test_non_zero_exit_wrapped(self):
        error = subprocess.CalledProcessError(
            1, ["gh"], output="", stderr="could not find pull request"
        )
        fetcher = DiffFetcher(Settings(), runner=MagicMock(side_effect=error))

        with pytest.raises(DiffFetchError) as exc_info:
            fetcher.fetch_diff("https://github.com/orgX/repoY/pull/123")

        assert exc_info.value.__cause__ is error
        assert "could not find pull request" in exc_info.value.message

    def test_missing_binary_wrapped(self):
        fetcher = DiffFetcher(Settings(gh_binary="no-such-gh"))
        with patch("subprocess.run", side_effect=FileNotFoundError("no-such-gh")):
            with pytest.raises(DiffFetchError):
                fetcher.fetch_diff("https://github.com/orgX/repoY/pull/123")

    def test_default_runner_uses_settings_binary(self):
        fetcher = DiffFetcher(Settings(gh_binary="gh-custom"))
        completed = MagicMock(stdout=SAMPLE_DIFF.encode())
        with patch("subprocess.run", return_value=completed) as mock_run:
            fetcher.fetch_diff("https://github.com/orgX/repoY/pull/7")
        assert mock_run.call_args[0][0] == ["gh-custom", "pr", "diff", "-R", "orgX/repoY", "7"]


def write_fake_gh(tmp_path, stdout: bytes, stderr: bytes = b"", exit_code: int = 0):
    script = tmp_path / "gh"
    script.write_text(
        f"#!{sys.executable}\n"
        "import sys\n"
        f"sys.stdout.buffer.write({stdout!r})\n"
        f"sys.stderr.buffer.write({stderr!r})\n"
        f"sys.exit({exit_code})\n"
    )
    script.chmod(0o755)
    return str(script)


@pytest.mark.skipif(sys.platform == "win32", reason="needs an executable script")
class TestRunGhPrDiffProcess:
    def test_crlf_and_trailing_newlines_kept(self, tmp_path):
        gh = write_fake_gh(tmp_path, b"a\r\nb\r\nc\rd\n\n")
        assert run_gh_pr_diff("orgX", "repoY", "123", gh_binary=gh) == "a\r\nb\r\nc\rd\n\n"

    def test_utf8_decoded(self, tmp_path):
        gh = write_fake_gh(tmp_path, "+print('héllo')\n".encode("utf-8"))
        assert run_gh_pr_diff("o", "r", "1", gh_binary=gh) == "+print('héllo')\n"

    def test_arguments_passed(self, tmp_path):
        script = tmp_path / "gh"
        script.write_text(
            f"#!{sys.executable}\n"
            "import sys\n"
            "sys.stdout.write(' '.join(sys.argv[1:]))\n"
        )
        script.chmod(0o755)
        assert run_gh_pr_diff("orgX", "repoY", "123", gh_binary=str(script)) == (
            "pr diff -R orgX/repoY 123"
        )

    def test_non_zero_exit_reports_stderr(self, tmp_path):
        gh = write_fake_gh(tmp_path, b"", stderr=b"no pull requests found\n", exit_code=1)
        fetcher = DiffFetcher(Settings(gh_binary=gh))

        with pytest.raises(DiffFetchError) as exc_info:
            fetcher.fetch_diff("https://github.com/orgX/repoY/pull/123")

        assert exc_info.value.message == (
            "error running gh pr diff: exit status 1: no pull requests found"
        )

    def test_fetcher_returns_process_output_unmodified(self, tmp_path):
        gh = write_fake_gh(tmp_path, b"diff --git a/x b/x\r\n+y\r\n")
        fetcher = DiffFetcher(Settings(gh_binary=gh))
        assert fetcher.fetch_diff("https://github.com/orgX/repoY/pull/123") == (
            "diff --git a/x b/x\r\n+y\r\n"
        )
