"""Dataclasses shared across modules."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Union


class Forge(str, Enum):
    """Hosted git service whose URL layout we know."""

    GITHUB = "github"
    GITLAB = "gitlab"
    BITBUCKET = "bitbucket"

    @classmethod
    def from_host(cls, host: str) -> "Forge":
        lowered = host.lower()
        if "gitlab" in lowered:
            return cls.GITLAB
        if "bitbucket" in lowered:
            return cls.BITBUCKET
        return cls.GITHUB


@dataclass(frozen=True)
class RemoteDescriptor:
    """Repository coordinates parsed from a git remote URL."""

    host: str
    owner: str
    name: str
    scheme: str
    url: str = ""

    @property
    def forge(self) -> Forge:
        return Forge.from_host(self.host)

    @property
    def web_url(self) -> str:
        return f"https://{self.host}/{self.owner}/{self.name}"


@dataclass(frozen=True)
class RepoState:
    """Ambient repository state read from the working directory."""

    repo_path: Path
    remote: RemoteDescriptor
    branch: str | None
    head: str
    default_branch: str
    upstream_branch: str | None = None
    diverged_from_upstream: bool = False

    @property
    def detached(self) -> bool:
        return self.branch is None

    @property
    def on_default_branch(self) -> bool:
        return self.branch == self.default_branch


@dataclass(frozen=True)
class RepositoryBranchPage:
    """Repository root (``branch`` is None) or the compare page for a branch."""

    branch: str | None = None


@dataclass(frozen=True)
class PullRequestPage:
    number: int


@dataclass(frozen=True)
class CommitPage:
    sha: str


@dataclass(frozen=True)
class FilesystemPath:
    path: str


ResolutionTarget = Union[RepositoryBranchPage, PullRequestPage, CommitPage, FilesystemPath]


__all__ = [
    "Forge",
    "RemoteDescriptor",
    "RepoState",
    "RepositoryBranchPage",
    "PullRequestPage",
    "CommitPage",
    "FilesystemPath",
    "ResolutionTarget",
]
