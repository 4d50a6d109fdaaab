"""
Candidate selection for worktree cleanup.

Each cleanup mode narrows the list of removable worktrees:
- all: every worktree
- remoteless: branches without a live upstream
- merged: branches already contained in the default branch
- github: branches whose pull request was merged or closed
- interactive: whatever the user ticks in a checkbox prompt

Except in interactive mode, a worktree with uncommitted changes is never
selected unless force is set. Remoteless and merged also hold back branches
with unpushed commits.
"""

import logging
from pathlib import Path
from typing import Callable, Optional, Sequence

from InquirerPy import inquirer
from InquirerPy.base.control import Choice
from rich.console import Console

from worktree_pilot.core.branch_status import BranchStatusResolver
from worktree_pilot.core.git import GitService
from worktree_pilot.core.github import GitHubService
from worktree_pilot.exceptions import GitHubCliUnavailableError, GitHubError, GitHubTimeoutError
from worktree_pilot.models.modes import CleanupMode
from worktree_pilot.models.status import BranchStatus, PrStatus
from worktree_pilot.models.worktree_info import WorktreeInfo

logger = logging.getLogger(__name__)

# Receives one label per candidate, returns the indices the user picked.
Selector = Callable[[list[str]], list[int]]

GH_UNAVAILABLE_MESSAGE = (
    "GitHub CLI (gh) is not installed or not authenticated. "
    "Install it from https://cli.github.com and run 'gh auth login'."
)


def checkbox_selector(labels: list[str]) -> list[int]:
    """Let the user tick worktrees in an InquirerPy checkbox prompt."""
    try:
        selected = inquirer.checkbox(
            message="Select worktrees to remove:",
            choices=[Choice(value=index, name=label) for index, label in enumerate(labels)],
            instruction="(space to toggle, enter to confirm)",
        ).execute()
    except KeyboardInterrupt:
        return []
    return list(selected or [])


class CleanupFilterPipeline:
    """Narrows cleanup candidates according to a CleanupMode."""

    def __init__(
        self,
        git_service: Optional[GitService] = None,
        resolver: Optional[BranchStatusResolver] = None,
        github_service: Optional[GitHubService] = None,
        selector: Optional[Selector] = None,
        console: Optional[Console] = None,
    ):
        self.git = git_service or GitService()
        self.resolver = resolver or BranchStatusResolver(self.git)
        self.github = github_service or GitHubService()
        self.selector = selector or checkbox_selector
        self.console = console or Console()

    def filter(
        self,
        repo_path: Path,
        candidates: Sequence[WorktreeInfo],
        mode: CleanupMode,
        force: bool = False,
    ) -> list[WorktreeInfo]:
        """
        Select the candidates eligible for removal under mode.

        Args:
            repo_path: Any path inside the repository.
            candidates: Worktrees to consider, in listing order.
            mode: Cleanup mode.
            force: Skip the uncommitted/unpushed safety checks.

        Returns:
            Eligible worktrees in their original order.

        Raises:
            GitHubCliUnavailableError: In github mode, if gh is missing or not logged in.
            GitHubError: In github mode, if origin is not hosted on GitHub.
        """
        candidates = list(candidates)
        if not candidates:
            return []

        logger.debug(f"Filtering {len(candidates)} worktree(s) with mode '{mode.value}'")

        if mode == CleanupMode.ALL:
            return self._filter_all(candidates, force)
        if mode == CleanupMode.REMOTELESS:
            return self._filter_by_status(
                repo_path, candidates, force, lambda s: s.is_resolved and not s.has_remote
            )
        if mode == CleanupMode.MERGED:
            return self._filter_by_status(
                repo_path, candidates, force, lambda s: s.is_merged or s.is_identical
            )
        if mode == CleanupMode.GITHUB:
            return self._filter_github(repo_path, candidates, force)
        if mode == CleanupMode.INTERACTIVE:
            return self._filter_interactive(repo_path, candidates)

        raise ValueError(f"Unknown cleanup mode: {mode}")

    def _skip(self, worktree: WorktreeInfo, reason: str) -> None:
        logger.info(f"Skipping {worktree.branch}: {reason}")
        self.console.print(f"[dim]Skipping {worktree.branch} - {reason}[/dim]")

    def _passes_uncommitted_gate(self, worktree: WorktreeInfo, force: bool) -> bool:
        if force:
            return True
        if self.git.has_uncommitted_changes(worktree.path):
            self._skip(worktree, "has uncommitted changes")
            return False
        return True

    def _passes_status_gate(self, status: BranchStatus, worktree: WorktreeInfo, force: bool) -> bool:
        if force:
            return True
        if status.has_uncommitted_changes:
            self._skip(worktree, "has uncommitted changes")
            return False
        if status.has_unpushed_commits:
            self._skip(worktree, "has unpushed commits")
            return False
        return True

    def _filter_all(self, candidates: list[WorktreeInfo], force: bool) -> list[WorktreeInfo]:
        return [wt for wt in candidates if self._passes_uncommitted_gate(wt, force)]

    def _filter_by_status(
        self,
        repo_path: Path,
        candidates: list[WorktreeInfo],
        force: bool,
        eligible: Callable[[BranchStatus], bool],
    ) -> list[WorktreeInfo]:
        statuses = self.resolver.resolve_many(repo_path, candidates)

        selected = []
        for worktree, status in zip(candidates, statuses):
            if not eligible(status):
                logger.debug(f"{worktree.branch} does not match: {status}")
                continue
            if self._passes_status_gate(status, worktree, force):
                selected.append(worktree)
        return selected

    def _filter_github(
        self, repo_path: Path, candidates: list[WorktreeInfo], force: bool
    ) -> list[WorktreeInfo]:
        if not self.github.is_cli_available():
            logger.error("gh is unavailable, github cleanup mode cannot run")
            raise GitHubCliUnavailableError(GH_UNAVAILABLE_MESSAGE)

        if not self.git.is_github_repo(repo_path):
            raise GitHubError("Not a GitHub repository (origin is not on github.com)")

        eligible = []
        with self.console.status("[bold green]Checking pull requests...") as status:
            for index, worktree in enumerate(candidates, start=1):
                status.update(
                    f"[bold green]Checking pull requests ({index}/{len(candidates)})[/bold green] "
                    f"[dim]{worktree.branch}[/dim]"
                )
                try:
                    pr_status = self.github.get_pull_request_status_for_branch(
                        repo_path, worktree.branch
                    )
                except GitHubTimeoutError as e:
                    self._skip(worktree, f"PR lookup timed out ({e})")
                    continue
                except Exception as e:
                    logger.warning(f"PR lookup failed for {worktree.branch}: {e}")
                    self._skip(worktree, f"failed to check PR status: {e}")
                    continue

                if pr_status in (PrStatus.MERGED, PrStatus.CLOSED):
                    eligible.append(worktree)
                elif pr_status == PrStatus.OPEN:
                    self._skip(worktree, "PR is still open")
                else:
                    self._skip(worktree, "no PR found")

        return [wt for wt in eligible if self._passes_uncommitted_gate(wt, force)]

    def _filter_interactive(
        self, repo_path: Path, candidates: list[WorktreeInfo]
    ) -> list[WorktreeInfo]:
        statuses = self.resolver.resolve_many(repo_path, candidates)
        labels = [
            f"{status.indicator} {wt.branch} ({wt.path})"
            for wt, status in zip(candidates, statuses)
        ]

        picked = self.selector(labels)
        chosen = sorted({i for i in picked if 0 <= i < len(candidates)})
        return [candidates[i] for i in chosen]
