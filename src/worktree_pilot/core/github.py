"""Pull request lookups through the GitHub CLI."""

import json
import logging
import subprocess
from pathlib import Path

from worktree_pilot.exceptions import (
    GitHubCliUnavailableError,
    GitHubError,
    GitHubTimeoutError,
)
from worktree_pilot.models.status import PrStatus
from worktree_pilot.utils.platform import command_exists

logger = logging.getLogger(__name__)

DEFAULT_GH_TIMEOUT = 30


class GitHubService:
    """Wraps the `gh` executable. Every call is bounded by a timeout."""

    def __init__(self, timeout: float = DEFAULT_GH_TIMEOUT):
        self.timeout = timeout

    def _run_gh(self, args: list[str], cwd: Path | None = None) -> subprocess.CompletedProcess:
        """
        Run gh with the configured timeout.

        Raises:
            GitHubCliUnavailableError: If the gh executable cannot be started.
            GitHubTimeoutError: If gh does not finish in time. The child is killed.
        """
        command = ["gh", *args]
        logger.debug(f"Running: {' '.join(command)}")
        try:
            return subprocess.run(
                command,
                cwd=cwd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise GitHubTimeoutError(command, self.timeout) from e
        except OSError as e:
            raise GitHubCliUnavailableError(f"Failed to run gh: {e}") from e

    def is_cli_available(self) -> bool:
        """Check that gh is installed and logged in."""
        if not command_exists("gh"):
            logger.info("gh executable not found on PATH")
            return False

        try:
            result = self._run_gh(["auth", "status"])
        except GitHubError as e:
            logger.warning(f"Could not check gh authentication: {e}")
            return False

        if result.returncode != 0:
            logger.info(f"gh is not authenticated: {result.stderr.strip()}")
            return False
        return True

    def get_pull_request_status_for_branch(self, repo_path: Path, branch: str) -> PrStatus:
        """
        Classify the most recent pull request whose head is branch.

        Args:
            repo_path: Repository directory gh should run in.
            branch: Head branch name.

        Returns:
            PrStatus of the newest matching pull request, or PrStatus.NONE.

        Raises:
            GitHubTimeoutError: If gh does not answer in time.
            GitHubError: If gh fails or returns output that cannot be parsed.
        """
        result = self._run_gh(
            [
                "pr", "list",
                "--head", branch,
                "--state", "all",
                "--json", "state",
                "--limit", "1",
            ],
            cwd=repo_path,
        )

        if result.returncode != 0:
            raise GitHubError(
                f"gh pr list failed for '{branch}': {result.stderr.strip()}"
            )

        try:
            data = json.loads(result.stdout or "[]")
        except json.JSONDecodeError as e:
            raise GitHubError(f"Unexpected gh output for '{branch}': {e}") from e

        if not data:
            return PrStatus.NONE
        return PrStatus.from_gh_state(data[0].get("state", ""))
