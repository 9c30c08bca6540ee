import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from click.testing import CliRunner

import lines_changed.cli as cli
from lines_changed.github.github_client import GitHubError
from lines_changed.grouping.group_model import FileChange, LineCounts
from lines_changed.report.comment_body import COMMENT_IDENTIFIER


GROUPS_YAML = """
- label: "Generated"
  patterns: ["**/dist/**"]
  count: false
"""


class DummyGitHubClient:
    def __init__(self, files=None, error=None):
        self.files = files or []
        self.error = error
        self.upserts = []

    def list_pull_request_files(self, pr_number):
        if self.error:
            raise self.error
        return self.files

    def upsert_comment(self, pr_number, body, marker):
        self.upserts.append((pr_number, body, marker))
        return "created"


class TestCLI(unittest.TestCase):
    def setUp(self) -> None:
        self.runner = CliRunner()
        self.files = [FileChange("src/main.ts", 100, 50), FileChange("dist/index.js", 1000, 0)]
        self.base_args = ["--github-token", "t", "--repository", "octo/repo", "--pr-number", "7"]

    def test_posts_comment(self) -> None:
        dummy = DummyGitHubClient(self.files)
        with patch.object(cli, "GitHubClient", return_value=dummy):
            result = self.runner.invoke(cli.main, self.base_args + ["--file-groups", GROUPS_YAML])

        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        self.assertEqual(len(dummy.upserts), 1)
        pr_number, body, marker = dummy.upserts[0]
        self.assertEqual(pr_number, 7)
        self.assertEqual(marker, COMMENT_IDENTIFIER)
        self.assertIn("**+100** / **-50**", body)
        self.assertIn("added-lines=100", result.output)
        self.assertIn("uncounted-added-lines=1000", result.output)
        self.assertIn("total-files=2", result.output)

    def test_config_error_exits_before_api_calls(self) -> None:
        with patch.object(cli, "GitHubClient") as client_cls:
            result = self.runner.invoke(
                cli.main,
                self.base_args + ["--file-groups", '- label: "X"\n  patterns: ["a"]\n  count: "yes"\n'],
            )
        self.assertEqual(result.exit_code, cli.EXIT_CONFIG_ERROR)
        self.assertIn("'count' must be a boolean", result.output)
        client_cls.assert_not_called()

    def test_pattern_warnings_do_not_fail(self) -> None:
        dummy = DummyGitHubClient(self.files)
        groups = '- label: "Abs"\n  patterns: ["/src/**"]\n'
        with patch.object(cli, "GitHubClient", return_value=dummy):
            result = self.runner.invoke(cli.main, self.base_args + ["--file-groups", groups])
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        self.assertIn('Invalid pattern in group "Abs"', result.output)

    def test_missing_token(self) -> None:
        result = self.runner.invoke(cli.main, ["--repository", "octo/repo", "--pr-number", "7"])
        self.assertEqual(result.exit_code, cli.EXIT_INVALID_USAGE)

    def test_bad_repository(self) -> None:
        result = self.runner.invoke(cli.main, ["--github-token", "t", "--repository", "octo", "--pr-number", "7"])
        self.assertEqual(result.exit_code, cli.EXIT_INVALID_USAGE)

    def test_missing_pr_number(self) -> None:
        result = self.runner.invoke(cli.main, ["--github-token", "t", "--repository", "octo/repo"])
        self.assertEqual(result.exit_code, cli.EXIT_INVALID_USAGE)
        self.assertIn("pull requests", result.output)

    def test_pr_context_from_event_payload(self) -> None:
        dummy = DummyGitHubClient(self.files)
        event = {"pull_request": {"number": 12, "base": {"sha": "b" * 40}, "head": {"sha": "c" * 40}}}
        with tempfile.TemporaryDirectory() as tmp:
            event_path = Path(tmp) / "event.json"
            event_path.write_text(json.dumps(event))
            with patch.object(cli, "GitHubClient", return_value=dummy):
                result = self.runner.invoke(
                    cli.main,
                    ["--github-token", "t", "--repository", "octo/repo"],
                    env={"GITHUB_EVENT_PATH": str(event_path)},
                )
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        pr_number, body, _ = dummy.upserts[0]
        self.assertEqual(pr_number, 12)
        self.assertIn("cccccc", body)

    def test_github_error_mapping(self) -> None:
        cases = [
            (GitHubError("Bad credentials", status_code=401), "token is invalid"),
            (GitHubError("Not Found", status_code=404), "not found"),
            (GitHubError("API rate limit exceeded", status_code=403), "rate limit exceeded"),
            (GitHubError("boom", status_code=500), "GitHub API error: boom"),
        ]
        for error, expected in cases:
            with self.subTest(status=error.status_code):
                with patch.object(cli, "GitHubClient", return_value=DummyGitHubClient(error=error)):
                    result = self.runner.invoke(cli.main, self.base_args)
                self.assertEqual(result.exit_code, cli.EXIT_API_FAILURE)
                self.assertIn(expected, result.output)

    def test_dry_run_with_files_json(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            files_path = Path(tmp) / "files.json"
            files_path.write_text(
                json.dumps([
                    {"filename": "src/a.ts", "additions": 3, "deletions": 1},
                    {"filename": "dist/a.js", "additions": 10, "deletions": 0},
                ])
            )
            with patch.object(cli, "GitHubClient") as client_cls:
                result = self.runner.invoke(
                    cli.main,
                    ["--files-json", str(files_path), "--dry-run", "--file-groups", GROUPS_YAML],
                )
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        self.assertIn(COMMENT_IDENTIFIER, result.output)
        self.assertIn("**+3** / **-1**", result.output)
        client_cls.assert_not_called()

    def test_invalid_files_json(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            files_path = Path(tmp) / "files.json"
            files_path.write_text('{"filename": "a"}')
            result = self.runner.invoke(cli.main, ["--files-json", str(files_path), "--dry-run"])
        self.assertEqual(result.exit_code, cli.EXIT_INVALID_USAGE)

    def test_outputs_written_to_github_output(self) -> None:
        dummy = DummyGitHubClient(self.files)
        with tempfile.TemporaryDirectory() as tmp:
            output_path = Path(tmp) / "output.txt"
            with patch.object(cli, "GitHubClient", return_value=dummy):
                result = self.runner.invoke(
                    cli.main, self.base_args, env={"GITHUB_OUTPUT": str(output_path)}
                )
            content = output_path.read_text()
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        self.assertIn("added-lines=1100\n", content)
        self.assertIn("removed-lines=50\n", content)
        self.assertIn("total-files=2\n", content)

    def test_whitespace_counts_requested_when_enabled(self) -> None:
        dummy = DummyGitHubClient(self.files)
        adjusted = {"src/main.ts": LineCounts(90, 45)}
        with patch.object(cli, "GitHubClient", return_value=dummy):
            with patch.object(cli, "get_whitespace_counts", return_value=adjusted) as ws:
                result = self.runner.invoke(
                    cli.main,
                    self.base_args + ["--ignore-whitespace", "--base-sha", "b1", "--head-sha", "h1"],
                )
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        config, base_sha, head_sha, _ = ws.call_args[0]
        self.assertTrue(config.default_group.ignore_whitespace)
        self.assertEqual((base_sha, head_sha), ("b1", "h1"))
        self.assertIn("added-lines=1090", result.output)


class TestGetWhitespaceCounts(unittest.TestCase):
    def make_config(self, ignore_whitespace: bool):
        return cli.parse_file_groups("", "Changed", ignore_whitespace)

    def test_not_requested(self) -> None:
        with patch.object(cli, "GitClient") as git_cls:
            self.assertIsNone(cli.get_whitespace_counts(self.make_config(False), "b", "h", Path("/repo")))
        git_cls.assert_not_called()

    def test_missing_shas(self) -> None:
        self.assertIsNone(cli.get_whitespace_counts(self.make_config(True), None, "h", Path("/repo")))

    def test_no_checkout(self) -> None:
        with patch.object(cli.GitClient, "find_repo_root", return_value=None):
            self.assertIsNone(cli.get_whitespace_counts(self.make_config(True), "b", "h", Path("/repo")))

    def test_uses_git_client(self) -> None:
        adjusted = {"a.py": LineCounts(1, 1)}
        with patch.object(cli.GitClient, "find_repo_root", return_value=Path("/repo")):
            with patch.object(cli.GitClient, "get_whitespace_line_counts", return_value=adjusted) as get_counts:
                result = cli.get_whitespace_counts(self.make_config(True), "b", "h", Path("/repo"))
        self.assertEqual(result, adjusted)
        get_counts.assert_called_once_with("b", "h")


if __name__ == "__main__":
    unittest.main()
