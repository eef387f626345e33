"""Hand a resolved URL or path to whatever opens it."""

from __future__ import annotations

import logging
import os
import socket
import subprocess
import sys
from pathlib import Path

import typer

from .config import Config
from .exceptions import OpenerInvocationError

log = logging.getLogger(__name__)

MACOS_OPEN = "/usr/bin/open"
LOCALHOST = "localhost"


def is_url(location: str) -> bool:
    return "://" in location


def map_for_client(location: str, config: Config) -> str:
    """Rewrite a local path so the SSH client machine can reach it.

    URLs pass through. Paths are tilde-expanded, and paths under the configured
    mount prefix are placed below ``$SSH_CLIENT_HOME/Mounts``.
    """

    if not config.forward or is_url(location):
        return location
    expanded = os.path.expanduser(location)
    prefix = config.mount_prefix
    if prefix and config.client_home and _under_prefix(expanded, prefix):
        return f"{config.client_home}/Mounts{expanded}"
    return expanded


def launch(location: str, config: Config) -> None:
    if config.forward:
        forward(location, config)
        return
    if config.open_command:
        _run([config.open_command, location])
    elif sys.platform == "darwin":
        args = [MACOS_OPEN]
        if is_url(location):
            args.append("--background")
        _run([*args, location])
    else:
        log.debug("Launching %s with the default application", location)
        code = typer.launch(location)
        if code != 0:
            raise OpenerInvocationError(f"Default application launcher exited with status {code} for {location}")


def passthrough(args: list[str], config: Config) -> None:
    """Hand option-style arguments (``-a Safari file``) to the system opener as-is."""

    _run([config.open_command or MACOS_OPEN, *args])


def forward(location: str, config: Config) -> None:
    """Send ``location`` to the listener on the SSH client's forwarded port."""

    log.debug("Forwarding %s to %s:%d", location, LOCALHOST, config.forward_port)
    try:
        with socket.create_connection((LOCALHOST, config.forward_port), timeout=5) as stream:
            stream.sendall(location.encode("utf-8"))
    except OSError as exc:
        raise OpenerInvocationError(
            f"Unable to reach the opener listener on {LOCALHOST}:{config.forward_port}: {exc}"
        ) from exc


def _run(command: list[str]) -> None:
    log.debug("Running command: %s", " ".join(command))
    try:
        proc = subprocess.run(command, capture_output=True, text=True, check=False)
    except OSError as exc:
        raise OpenerInvocationError(f"Failed to run {command[0]}: {exc}") from exc
    if proc.returncode != 0:
        detail = proc.stderr.strip().splitlines()
        message = f"{command[0]} exited with status {proc.returncode}"
        if detail:
            message = f"{message}: {detail[-1]}"
        raise OpenerInvocationError(message)


def _under_prefix(path: str, prefix: str) -> bool:
    try:
        Path(path).relative_to(prefix)
    except ValueError:
        return False
    return True


__all__ = ["is_url", "map_for_client", "launch", "passthrough", "forward"]
