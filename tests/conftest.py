"""
Pytest configuration and shared fixtures for worktree-pilot tests.
"""

import subprocess
import tempfile
from pathlib import Path
from typing import Callable, Generator

import pytest


def _git(repo_path: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args],
        cwd=repo_path,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


@pytest.fixture
def temp_directory() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir).resolve()


@pytest.fixture
def temp_dir(temp_directory: Path) -> Path:
    """Alias for temp_directory."""
    return temp_directory


@pytest.fixture
def run_git() -> Callable[..., str]:
    """Run a git command in a repository and return its stdout."""
    return _git


@pytest.fixture
def isolated_home(temp_directory: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point HOME at an empty directory so no user config is picked up."""
    home = temp_directory / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for name in ("WTP_TERMINAL_MODE", "WTP_WORKTREE_DIRECTORY_PATTERN", "WTP_CLEANUP_DEFAULT_MODE"):
        monkeypatch.delenv(name, raising=False)
    return home


@pytest.fixture
def git_repo(temp_directory: Path) -> Generator[Path, None, None]:
    """Create a temporary git repository with one commit on main."""
    repo_path = temp_directory / "test-repo"
    repo_path.mkdir()

    _git(repo_path, "init")
    _git(repo_path, "checkout", "-b", "main")
    _git(repo_path, "config", "user.email", "test@example.com")
    _git(repo_path, "config", "user.name", "Test User")
    _git(repo_path, "config", "commit.gpgsign", "false")

    readme = repo_path / "README.md"
    readme.write_text("# Test Repository\n")

    _git(repo_path, "add", ".")
    _git(repo_path, "commit", "-m", "Initial commit")

    yield repo_path


@pytest.fixture
def git_repo_with_origin(git_repo: Path, temp_directory: Path) -> Path:
    """A git_repo whose main branch is pushed to a local bare origin."""
    origin = temp_directory / "origin.git"
    subprocess.run(
        ["git", "init", "--bare", str(origin)],
        capture_output=True,
        check=True,
    )
    _git(git_repo, "remote", "add", "origin", str(origin))
    _git(git_repo, "push", "-u", "origin", "main")
    return git_repo


@pytest.fixture
def git_worktree(git_repo: Path, temp_directory: Path) -> Generator[Path, None, None]:
    """Create a git worktree on branch test-branch."""
    worktree_path = temp_directory / "test-worktree"

    _git(git_repo, "worktree", "add", "-b", "test-branch", str(worktree_path))

    yield worktree_path

    subprocess.run(
        ["git", "worktree", "remove", "--force", str(worktree_path)],
        cwd=git_repo,
        capture_output=True
    )


def commit_file(repo_path: Path, name: str, content: str = "change\n", message: str = "Update") -> str:
    """Write a file, commit it and return the new HEAD sha."""
    (repo_path / name).write_text(content)
    _git(repo_path, "add", name)
    _git(repo_path, "commit", "-m", message)
    return _git(repo_path, "rev-parse", "HEAD")


@pytest.fixture
def make_commit() -> Callable[..., str]:
    """Commit a file in a repository or worktree."""
    return commit_file
