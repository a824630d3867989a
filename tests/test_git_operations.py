# Tests for repofleet.git.operations
# Git command execution for clone and pull

import shlex
import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from repofleet.git.operations import (
    GitError,
    _run_git,
    clone,
    is_git_repo,
    pull,
    ssh_command,
)


def completed(returncode: int = 0, stdout: str = "") -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(args=["git"], returncode=returncode, stdout=stdout)


class TestGitError:
    """Tests for GitError exception."""

    def test_basic_error(self):
        err = GitError("test message")
        assert err.message == "test message"
        assert err.returncode == 1
        assert err.stderr == ""
        assert str(err) == "test message"

    def test_error_with_output(self):
        err = GitError("git clone failed (exit 128)", returncode=128, stderr="fatal: repository not found")
        assert err.returncode == 128
        assert str(err) == "git clone failed (exit 128)\nfatal: repository not found"


class TestRunGit:
    """Tests for _run_git helper."""

    @patch("repofleet.git.operations.subprocess.run")
    def test_successful_command(self, mock_run):
        mock_run.return_value = completed(stdout="clean")
        result = _run_git("status")
        assert result.stdout == "clean"
        assert mock_run.call_args[0][0] == ["git", "status"]
        assert mock_run.call_args[1]["env"] is None

    @patch("repofleet.git.operations.subprocess.run")
    def test_failed_command_carries_output(self, mock_run):
        mock_run.return_value = completed(returncode=128, stdout="fatal: not a git repository\n")
        with pytest.raises(GitError) as exc_info:
            _run_git("pull")
        assert exc_info.value.returncode == 128
        assert exc_info.value.stderr == "fatal: not a git repository"
        assert "git pull failed (exit 128)" in str(exc_info.value)

    @patch("repofleet.git.operations.subprocess.run")
    def test_failed_command_no_check(self, mock_run):
        mock_run.return_value = completed(returncode=1)
        assert _run_git("bad", check=False).returncode == 1

    @patch("repofleet.git.operations.subprocess.run", side_effect=FileNotFoundError)
    def test_git_not_found(self, mock_run):
        with pytest.raises(GitError, match="git command not found"):
            _run_git("status")

    @patch("repofleet.git.operations.subprocess.run")
    def test_private_key_sets_ssh_command(self, mock_run):
        mock_run.return_value = completed()
        _run_git("fetch", private_key="/keys/id_ed25519")
        env = mock_run.call_args[1]["env"]
        assert env["GIT_SSH_COMMAND"] == ssh_command("/keys/id_ed25519")
        assert "-i /keys/id_ed25519" in env["GIT_SSH_COMMAND"]
        assert "IdentitiesOnly=yes" in env["GIT_SSH_COMMAND"]

    def test_ssh_command_quotes_key_path(self):
        args = shlex.split(ssh_command("/home/me/my keys/id_ed25519"))
        assert args[:3] == ["ssh", "-i", "/home/me/my keys/id_ed25519"]
        assert "StrictHostKeyChecking=accept-new" in args


class TestClone:
    """Tests for clone()."""

    @patch("repofleet.git.operations.subprocess.run")
    def test_clone_creates_parent(self, mock_run, temp_dir: Path):
        mock_run.return_value = completed()
        target = temp_dir / "deep" / "tree" / "repo"

        clone("git@github.com:a/repo.git", target)

        assert target.parent.is_dir()
        assert mock_run.call_args[0][0] == ["git", "clone", "git@github.com:a/repo.git", str(target)]

    @patch("repofleet.git.operations.subprocess.run")
    def test_clone_with_branch(self, mock_run, temp_dir: Path):
        mock_run.return_value = completed()

        clone("git@github.com:a/repo.git", temp_dir / "repo", branch="develop")

        assert mock_run.call_args[0][0] == [
            "git",
            "clone",
            "--branch",
            "develop",
            "git@github.com:a/repo.git",
            str(temp_dir / "repo"),
        ]

    def test_clone_requires_url(self, temp_dir: Path):
        with pytest.raises(GitError, match="URL is required"):
            clone("", temp_dir / "repo")

    @patch("repofleet.git.operations.subprocess.run")
    def test_clone_failure(self, mock_run, temp_dir: Path):
        mock_run.return_value = completed(returncode=128, stdout="fatal: Could not read from remote repository.")
        with pytest.raises(GitError, match="git clone failed"):
            clone("git@github.com:a/repo.git", temp_dir / "repo")


class TestPull:
    """Tests for pull()."""

    @patch("repofleet.git.operations.subprocess.run")
    def test_pull(self, mock_run, temp_dir: Path):
        mock_run.return_value = completed()

        pull(temp_dir / "repo", private_key="/k")

        assert mock_run.call_args[0][0] == ["git", "pull"]
        assert mock_run.call_args[1]["cwd"] == temp_dir / "repo"
        assert "GIT_SSH_COMMAND" in mock_run.call_args[1]["env"]


class TestIsGitRepo:
    """Tests for is_git_repo()."""

    def test_with_git_dir(self, temp_dir: Path, make_git_repo):
        assert is_git_repo(make_git_repo(temp_dir / "repo"))

    def test_without_git_dir(self, temp_dir: Path):
        assert not is_git_repo(temp_dir)
