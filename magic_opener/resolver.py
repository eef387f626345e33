"""Turn a CLI argument plus repository state into something to open."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import quote

from . import git
from .config import Config
from .exceptions import NotARepositoryError, UnknownRevisionError, UnsupportedRemoteError
from .models import (
    CommitPage,
    FilesystemPath,
    Forge,
    PullRequestPage,
    RemoteDescriptor,
    RepositoryBranchPage,
    RepoState,
    ResolutionTarget,
)
from .remote import parse_remote

log = logging.getLogger(__name__)

_PR_NUMBER_RE = re.compile(r"[0-9]+")
_COMMIT_RE = re.compile(r"[0-9a-fA-F]{7,40}")

_URL_TEMPLATES: dict[Forge, dict[str, str]] = {
    Forge.GITHUB: {
        "branch": "{root}/compare/{branch}?expand=1",
        "pull": "{root}/pull/{number}",
        "commit": "{root}/commit/{sha}",
    },
    Forge.GITLAB: {
        "branch": "{root}/-/merge_requests/new?merge_request%5Bsource_branch%5D={branch}",
        "pull": "{root}/-/merge_requests/{number}",
        "commit": "{root}/-/commit/{sha}",
    },
    Forge.BITBUCKET: {
        "branch": "{root}/pull-requests/new?source={branch}",
        "pull": "{root}/pull-requests/{number}",
        "commit": "{root}/commits/{sha}",
    },
}


@dataclass(frozen=True)
class Resolution:
    """A resolved target plus the remote its URL is built from."""

    target: ResolutionTarget
    remote: RemoteDescriptor | None = None

    @property
    def location(self) -> str:
        return build_url(self.target, self.remote)


def resolve(argument: str | None, config: Config, *, cwd: Path | None = None) -> Resolution:
    """Classify ``argument`` and resolve it against the repository at ``cwd``.

    Positive integers are pull requests, hex tokens that name a commit are
    commits (or the pull request their message references), no argument means
    the current branch, and anything else is a filesystem path.
    """

    cwd = cwd or Path.cwd()
    if argument is not None and not argument.strip():
        argument = None

    if argument is None:
        state = load_repo_state(cwd, config)
        return Resolution(branch_target(state, config), state.remote)

    if _PR_NUMBER_RE.fullmatch(argument) and int(argument) > 0:
        repo_path = _require_repo(cwd)
        log.debug("Treating %s as a pull request number", argument)
        return Resolution(PullRequestPage(int(argument)), load_remote(repo_path, config))

    if _COMMIT_RE.fullmatch(argument):
        repo_path = git.rev_parse_toplevel(cwd)
        if repo_path is None:
            if _path_exists(argument, cwd):
                return Resolution(FilesystemPath(argument))
            raise NotARepositoryError(f"Cannot resolve commit {argument}: not inside a git repository.")
        sha = git.resolve_commit(repo_path, argument)
        if sha is None:
            if _path_exists(argument, cwd):
                log.debug("%s is not a commit but exists on disk, opening as a path", argument)
                return Resolution(FilesystemPath(argument))
            raise UnknownRevisionError(argument)
        remote = load_remote(repo_path, config)
        return Resolution(commit_target(repo_path, sha, config), remote)

    if argument == ".":
        return Resolution(FilesystemPath(str(cwd.absolute())))
    return Resolution(FilesystemPath(argument))


def load_repo_state(cwd: Path, config: Config) -> RepoState:
    repo_path = _require_repo(cwd)
    remote = load_remote(repo_path, config)
    branch = git.current_branch(repo_path)
    default = git.default_branch(repo_path, config.remote, config.default_branches)
    if not default:
        default = config.default_branches[0] if config.default_branches else "main"
        log.debug("No default branch detected, assuming %s", default)

    upstream_branch: str | None = None
    diverged = True
    if branch:
        upstream = git.upstream_ref(repo_path, branch)
        if upstream:
            prefix = f"{config.remote}/"
            if upstream.startswith(prefix):
                upstream_branch = upstream[len(prefix):]
            diverged = git.differs_from(repo_path, upstream)

    return RepoState(
        repo_path=repo_path,
        remote=remote,
        branch=branch,
        head=git.short_head(repo_path),
        default_branch=default,
        upstream_branch=upstream_branch,
        diverged_from_upstream=diverged,
    )


def load_remote(repo_path: Path, config: Config) -> RemoteDescriptor:
    url = git.remote_url(repo_path, config.remote)
    if not url:
        raise UnsupportedRemoteError(f"Found a git repository, but no URL is set for remote '{config.remote}'.")
    return parse_remote(url)


def branch_target(state: RepoState, config: Config) -> ResolutionTarget:
    if state.detached:
        sha = git.resolve_commit(state.repo_path, "HEAD")
        if sha is None:
            raise UnknownRevisionError("HEAD")
        log.debug("HEAD is detached at %s", state.head)
        return commit_target(state.repo_path, sha, config)
    if state.on_default_branch:
        return RepositoryBranchPage(None)
    branch = state.upstream_branch or state.branch
    if state.diverged_from_upstream:
        log.warning("Branch %s is not in sync with %s; the page may be missing or out of date.", state.branch, config.remote)
    return RepositoryBranchPage(branch)


def commit_target(repo_path: Path, sha: str, config: Config) -> ResolutionTarget:
    number = find_pr_reference(git.commit_message(repo_path, sha), config.pr_pattern)
    if number is not None:
        log.debug("Commit %s references pull request #%d", sha[:12], number)
        return PullRequestPage(number)
    return CommitPage(sha)


def find_pr_reference(message: str, pattern: re.Pattern[str]) -> int | None:
    """Return the pull request number referenced by a commit message.

    A reference in the subject line wins, and the last one there is used, so
    a revert titled ``Revert "Fix (#12)" (#15)`` points at #15. Otherwise the
    first reference in the body is returned.
    """

    subject_end = message.find("\n")
    if subject_end == -1:
        subject_end = len(message)
    in_subject: int | None = None
    first: int | None = None
    for match in pattern.finditer(message):
        number = _first_group(match)
        if number is None:
            continue
        if first is None:
            first = number
        if match.start() < subject_end:
            in_subject = number
    return in_subject if in_subject is not None else first


def build_url(target: ResolutionTarget, remote: RemoteDescriptor | None) -> str:
    if isinstance(target, FilesystemPath):
        return target.path
    if remote is None:
        raise UnsupportedRemoteError("A remote is required to build a repository URL.")
    root = remote.web_url
    templates = _URL_TEMPLATES[remote.forge]
    match target:
        case RepositoryBranchPage(branch=None):
            return root
        case RepositoryBranchPage(branch=branch):
            return templates["branch"].format(root=root, branch=quote(branch, safe="/"))
        case PullRequestPage(number=number):
            return templates["pull"].format(root=root, number=number)
        case CommitPage(sha=sha):
            return templates["commit"].format(root=root, sha=sha)
        case _:
            raise TypeError(f"Unhandled target: {target!r}")


def _first_group(match: re.Match[str]) -> int | None:
    for value in match.groups():
        if value and value.isdigit():
            return int(value)
    return None


def _require_repo(cwd: Path) -> Path:
    repo_path = git.rev_parse_toplevel(cwd)
    if repo_path is None:
        raise NotARepositoryError(f"Not inside a git repository: {cwd}")
    return repo_path


def _path_exists(argument: str, cwd: Path) -> bool:
    return (cwd / Path(argument).expanduser()).exists()


__all__ = [
    "Resolution",
    "resolve",
    "load_repo_state",
    "load_remote",
    "branch_target",
    "commit_target",
    "find_pr_reference",
    "build_url",
]
