"""Tests for the git repository lifecycle."""
import os
import shlex
from unittest.mock import patch

import pytest

from gitemplate.core.results import ResultKind
from gitemplate.services.git_manager import (
    POSTREPLACE_SCRIPT,
    GitManager,
    build_commit_message,
    parse_origin_sha,
    parse_origin_url,
)
from helpers import completed, exec_commands

SHA = "7858ada150cf927d6d8a6b3a7f8b63d9917d4185"
REMOTE_SHOW = (
    "* remote origin\n"
    "  Fetch URL: git@github.com:user/repo-fetch.git\n"
    "  Push  URL: git@github.com:user/repo-push.git\n"
)


@pytest.fixture
def clone_config(tmp_path, config):
    """Config whose dst does not exist yet."""
    config.dst = str(tmp_path / "dst")
    return config


def fake_git(dst, overrides=None):
    """Build a subprocess.run side effect emulating git for a clone into dst."""
    overrides = overrides or {}

    def run_side_effect(*args, **kwargs):
        cmd = args[0]
        for prefix, result in overrides.items():
            if cmd.startswith(prefix):
                return result
        if cmd.startswith("git clone"):
            os.makedirs(os.path.join(dst, ".git", "objects"))
            return completed(stdout=f"Cloning into '{dst}'...\n")
        if cmd == "git rev-parse HEAD":
            return completed(stdout=SHA + "\n")
        if cmd.startswith("git remote show"):
            return completed(stdout=REMOTE_SHOW)
        return completed()

    return run_side_effect


class TestParsers:
    """Test origin metadata parsing and message generation."""

    def test_origin_sha_is_first_ten_chars(self):
        assert parse_origin_sha(SHA + "\n") == "7858ada150"

    def test_origin_url_uses_fetch_url(self):
        assert parse_origin_url(REMOTE_SHOW) == "git@github.com:user/repo-fetch.git"

    def test_origin_url_missing(self):
        assert parse_origin_url("fatal: 'origin' does not appear to be a git repository") == ""

    def test_commit_message_keeps_allowed_chars(self):
        message = build_commit_message("git@github.com:user/repo-fetch.git", "7858ada150")
        assert message == "Initial commit from gitemplate: git@github.com:user/repo-fetch.git#7858ada150"

    def test_commit_message_replaces_every_unsafe_char(self):
        message = build_commit_message('https://x.io/a?b=c"$(rm)', "abc")
        assert message == "Initial commit from gitemplate: https://x.io/a_b_c___rm_#abc"


class TestCloneRepo:
    """Test cloning and origin capture."""

    def test_destination_exists(self, tree_config, shell, events):
        res = GitManager(tree_config, shell).clone_repo()

        assert res.code == 1
        assert res.kind is ResultKind.PRECONDITION
        assert res.output == "Destination already exists"
        assert exec_commands(events) == []

    @patch('subprocess.run')
    def test_clone_captures_origin_and_drops_git_dir(self, mock_run, clone_config, shell, events):
        dst = clone_config.dst
        mock_run.side_effect = fake_git(dst)

        res = GitManager(clone_config, shell).clone_repo()

        assert res.ok
        assert exec_commands(events) == [
            f"git clone /src {shlex.quote(dst)}",
            "git rev-parse HEAD",
            "git remote show -n origin",
        ]
        assert clone_config.origin_sha == "7858ada150"
        assert clone_config.origin_url == "git@github.com:user/repo-fetch.git"
        assert not os.path.exists(os.path.join(dst, ".git"))
        assert shell.cwd == dst

    @patch('subprocess.run')
    def test_clone_failure_stops(self, mock_run, clone_config, shell, events):
        mock_run.return_value = completed(returncode=128, stdout="fatal: repository '/src' does not exist")

        res = GitManager(clone_config, shell).clone_repo()

        assert res.code == 128
        assert len(exec_commands(events)) == 1
        assert clone_config.origin_sha == ""

    @patch('subprocess.run')
    def test_rev_parse_failure_stops(self, mock_run, clone_config, shell, events):
        mock_run.side_effect = fake_git(
            clone_config.dst, {"git rev-parse": completed(returncode=1, stdout="bad HEAD")}
        )

        res = GitManager(clone_config, shell).clone_repo()

        assert res.code == 1
        assert "git remote show -n origin" not in exec_commands(events)
        assert os.path.exists(os.path.join(clone_config.dst, ".git"))

    @patch('subprocess.run')
    def test_remote_show_failure_stops(self, mock_run, clone_config, shell):
        mock_run.side_effect = fake_git(
            clone_config.dst, {"git remote show": completed(returncode=2)}
        )

        res = GitManager(clone_config, shell).clone_repo()

        assert res.code == 2
        assert clone_config.origin_url == ""

    @patch('subprocess.run')
    def test_missing_fetch_url_is_failure(self, mock_run, clone_config, shell):
        mock_run.side_effect = fake_git(
            clone_config.dst, {"git remote show": completed(stdout="* remote origin\n")}
        )

        res = GitManager(clone_config, shell).clone_repo()

        assert not res.ok
        assert "fetch URL" in res.output

    @patch('subprocess.run')
    def test_checks_out_commit(self, mock_run, clone_config, shell, events):
        mock_run.side_effect = fake_git(clone_config.dst)
        clone_config.commit = "1234abc"

        GitManager(clone_config, shell).clone_repo()

        assert exec_commands(events)[1] == "git checkout --quiet 1234abc"
        assert exec_commands(events)[2] == "git rev-parse HEAD"


class TestInitRepo:
    """Test re-initialization of the destination."""

    @patch('subprocess.run')
    def test_init_repo(self, mock_run, tree_config, shell, events):
        mock_run.return_value = completed()
        tree_config.origin_url = "git@github.com:user/repo-fetch.git"
        tree_config.origin_sha = "7858ada150"

        res = GitManager(tree_config, shell).init_repo()

        assert res.ok
        assert exec_commands(events) == [
            "git init",
            "git add .",
            'git commit -m "Initial commit from gitemplate: git@github.com:user/repo-fetch.git#7858ada150"',
        ]
        assert all(call.kwargs["cwd"] == tree_config.dst for call in mock_run.call_args_list)

    @patch('subprocess.run')
    def test_init_repo_stops_on_failure(self, mock_run, tree_config, shell, events):
        def run_side_effect(*args, **kwargs):
            if args[0] == "git add .":
                return completed(returncode=1, stdout="add failed")
            return completed()

        mock_run.side_effect = run_side_effect

        res = GitManager(tree_config, shell).init_repo()

        assert res.output == "add failed"
        assert exec_commands(events) == ["git init", "git add ."]


class TestSetGithubOrigin:
    """Test remote registration."""

    @patch('subprocess.run')
    def test_set_origin(self, mock_run, tree_config, shell, events):
        mock_run.return_value = completed()

        res = GitManager(tree_config, shell).set_github_origin()

        assert res.ok
        assert exec_commands(events) == ["git remote add origin git@github.com:user/proj.git"]
        assert mock_run.call_args.kwargs["cwd"] == tree_config.dst


class TestRunPostReplace:
    """Test the optional post-replace hook."""

    def _write_hook(self, dst, body):
        hook = os.path.join(dst, POSTREPLACE_SCRIPT)
        with open(hook, "w") as f:
            f.write("#!/bin/sh\n" + body)
        os.chmod(hook, 0o755)
        return hook

    def test_no_hook_is_noop(self, tree_config, shell, events):
        res = GitManager(tree_config, shell).run_post_replace()

        assert res.ok
        assert exec_commands(events) == []

    def test_hook_runs_in_dst_and_is_removed(self, tree_config, shell):
        hook = self._write_hook(tree_config.dst, "echo ran > hook-ran.txt\n")

        res = GitManager(tree_config, shell).run_post_replace()

        assert res.ok
        assert os.path.exists(os.path.join(tree_config.dst, "hook-ran.txt"))
        assert not os.path.exists(hook)

    def test_failed_hook_is_kept(self, tree_config, shell):
        hook = self._write_hook(tree_config.dst, "echo broken\nexit 4\n")

        res = GitManager(tree_config, shell).run_post_replace()

        assert res.code == 4
        assert "broken" in res.output
        assert os.path.exists(hook)
