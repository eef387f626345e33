"""Custom error hierarchy for magic-opener."""

from __future__ import annotations


class OpenerError(RuntimeError):
    """Base error for the CLI."""


class NotARepositoryError(OpenerError):
    """Raised when git interpretation is needed outside a git repository."""


class UnsupportedRemoteError(OpenerError):
    """Raised when the remote URL is missing or cannot be parsed."""


class UnknownRevisionError(OpenerError):
    """Raised when a commit-ish argument does not resolve to a commit."""

    def __init__(self, revision: str):
        super().__init__(f"Unknown revision: {revision}")
        self.revision = revision


class OpenerInvocationError(OpenerError):
    """Raised when the OS opener cannot be launched or exits non-zero."""


class ConfigError(OpenerError):
    """Raised when environment configuration is invalid."""


class GitCommandError(OpenerError):
    """Raised when an underlying git command fails."""

    def __init__(self, command: list[str], returncode: int, stderr: str | None = None):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr or ""
        message = f"git command failed (exit {returncode}): {' '.join(command)}"
        detail = self.stderr.strip().splitlines()
        if detail:
            message = f"{message}: {detail[-1]}"
        super().__init__(message)


__all__ = [
    "OpenerError",
    "NotARepositoryError",
    "UnsupportedRemoteError",
    "UnknownRevisionError",
    "OpenerInvocationError",
    "ConfigError",
    "GitCommandError",
]
