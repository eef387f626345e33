"""Tests for environment configuration."""

from __future__ import annotations

import unittest
from pathlib import Path

from magic_opener.config import DEFAULT_BRANCHES, compile_pr_pattern, load_config
from magic_opener.exceptions import ConfigError


class LoadConfigTests(unittest.TestCase):
    def test_defaults(self) -> None:
        config = load_config({})

        self.assertEqual(config.remote, "origin")
        self.assertEqual(config.default_branches, DEFAULT_BRANCHES)
        self.assertIsNone(config.open_command)
        self.assertFalse(config.forward)
        self.assertEqual(config.forward_port, 2226)
        self.assertIsNone(config.client_home)
        self.assertIsNone(config.mount_prefix)

    def test_environment_overrides(self) -> None:
        config = load_config(
            {
                "MAGIC_OPENER_REMOTE": "upstream",
                "MAGIC_OPENER_DEFAULT_BRANCHES": "trunk, main ,",
                "MAGIC_OPENER_COMMAND": "xdg-open",
                "MAGIC_OPENER_FORWARD_PORT": "4000",
                "MAGIC_OPENER_MOUNT_PREFIX": "/bits",
                "SSH_CLIENT_HOME": "/Users/me",
                "SSH_TTY": "/dev/pts/1",
            }
        )

        self.assertEqual(config.remote, "upstream")
        self.assertEqual(config.default_branches, ("trunk", "main"))
        self.assertEqual(config.open_command, "xdg-open")
        self.assertEqual(config.forward_port, 4000)
        self.assertEqual(config.mount_prefix, "/bits")
        self.assertEqual(config.client_home, Path("/Users/me"))
        self.assertTrue(config.forward)

    def test_remote_argument_beats_environment(self) -> None:
        config = load_config({"MAGIC_OPENER_REMOTE": "upstream"}, remote="fork")

        self.assertEqual(config.remote, "fork")

    def test_no_forward_disables_ssh_handoff(self) -> None:
        config = load_config({"SSH_TTY": "/dev/pts/1", "MAGIC_OPENER_NO_FORWARD": "1"})

        self.assertFalse(config.forward)

    def test_custom_pr_pattern(self) -> None:
        config = load_config({"MAGIC_OPENER_PR_PATTERN": r"PR-(\d+)"})

        match = config.pr_pattern.search("Ship it PR-88")
        self.assertIsNotNone(match)
        self.assertEqual(match.group(1), "88")

    def test_invalid_port(self) -> None:
        for raw in ["abc", "0", "70000"]:
            with self.subTest(raw=raw):
                with self.assertRaises(ConfigError):
                    load_config({"MAGIC_OPENER_FORWARD_PORT": raw})


class CompilePrPatternTests(unittest.TestCase):
    def test_invalid_regex(self) -> None:
        with self.assertRaises(ConfigError):
            compile_pr_pattern(r"(#\d+")

    def test_pattern_needs_a_group(self) -> None:
        with self.assertRaises(ConfigError):
            compile_pr_pattern(r"#\d+")


if __name__ == "__main__":
    unittest.main()
