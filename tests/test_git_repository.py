"""End-to-end resolution against throw-away git repositories."""

from __future__ import annotations

import shutil
import subprocess
import tempfile
import unittest
from pathlib import Path

from magic_opener import git
from magic_opener.config import Config
from magic_opener.exceptions import UnknownRevisionError
from magic_opener.models import CommitPage, PullRequestPage, RepositoryBranchPage
from magic_opener.resolver import resolve

_IDENTITY = [
    "-c", "user.name=Test User",
    "-c", "user.email=test@example.com",
    "-c", "commit.gpgsign=false",
]


@unittest.skipUnless(shutil.which("git"), "git is not installed")
class GitRepositoryTests(unittest.TestCase):
    def setUp(self) -> None:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.repo = Path(tmp.name).resolve()
        self.config = Config()
        self._git("init", "-q")
        self._git("symbolic-ref", "HEAD", "refs/heads/main")
        self._git("remote", "add", "origin", "git@github.com:octo/widgets.git")
        self._commit("Initial commit")
        self.initial = self._git("rev-parse", "HEAD")
        self._commit("Add widgets (#123)")
        self.merged = self._git("rev-parse", "HEAD")

    def _git(self, *args: str) -> str:
        proc = subprocess.run(
            ["git", *_IDENTITY, *args],
            cwd=self.repo,
            capture_output=True,
            text=True,
            check=True,
        )
        return proc.stdout.strip()

    def _commit(self, message: str) -> None:
        self._git("commit", "-q", "--allow-empty", "--no-verify", "-m", message)

    def test_repository_helpers(self) -> None:
        self.assertEqual(git.rev_parse_toplevel(self.repo), self.repo)
        self.assertEqual(git.remote_url(self.repo), "git@github.com:octo/widgets.git")
        self.assertIsNone(git.remote_url(self.repo, "missing"))
        self.assertEqual(git.current_branch(self.repo), "main")
        self.assertTrue(self.merged.startswith(git.short_head(self.repo)))
        self.assertEqual(git.default_branch(self.repo), "main")
        self.assertIsNone(git.upstream_ref(self.repo, "main"))

    def test_default_branch_from_remote_head(self) -> None:
        self._git("update-ref", "refs/remotes/origin/trunk", "HEAD")
        self._git("symbolic-ref", "refs/remotes/origin/HEAD", "refs/remotes/origin/trunk")

        self.assertEqual(git.default_branch(self.repo), "trunk")

    def test_default_branch_is_repository_root(self) -> None:
        resolution = resolve(None, self.config, cwd=self.repo)

        self.assertEqual(resolution.target, RepositoryBranchPage(None))
        self.assertEqual(resolution.location, "https://github.com/octo/widgets")

    def test_pushed_feature_branch(self) -> None:
        self._git("checkout", "-q", "-b", "feature/login")
        self._git("update-ref", "refs/remotes/origin/feature/login", "HEAD")
        self._git("branch", "-q", "--set-upstream-to=origin/feature/login")

        resolution = resolve(None, self.config, cwd=self.repo)

        self.assertEqual(resolution.target, RepositoryBranchPage("feature/login"))
        self.assertEqual(resolution.location, "https://github.com/octo/widgets/compare/feature/login?expand=1")

    def test_unpushed_feature_branch(self) -> None:
        self._git("checkout", "-q", "-b", "wip")

        with self.assertLogs("magic_opener.resolver", level="WARNING"):
            resolution = resolve(None, self.config, cwd=self.repo)

        self.assertEqual(resolution.target, RepositoryBranchPage("wip"))

    def test_commit_with_pr_reference(self) -> None:
        resolution = resolve(self.merged[:10], self.config, cwd=self.repo)

        self.assertEqual(resolution.target, PullRequestPage(123))
        self.assertEqual(resolution.location, "https://github.com/octo/widgets/pull/123")

    def test_commit_without_pr_reference(self) -> None:
        resolution = resolve(self.initial[:7], self.config, cwd=self.repo)

        self.assertEqual(resolution.target, CommitPage(self.initial))

    def test_unknown_commit(self) -> None:
        with self.assertRaises(UnknownRevisionError):
            resolve("ffffffffffffffff", self.config, cwd=self.repo)

    def test_detached_head(self) -> None:
        self._git("checkout", "-q", "--detach", self.initial)

        resolution = resolve(None, self.config, cwd=self.repo)

        self.assertEqual(resolution.target, CommitPage(self.initial))

    def test_subdirectory(self) -> None:
        nested = self.repo / "src" / "pkg"
        nested.mkdir(parents=True)

        resolution = resolve("9", self.config, cwd=nested)

        self.assertEqual(resolution.location, "https://github.com/octo/widgets/pull/9")


if __name__ == "__main__":
    unittest.main()
