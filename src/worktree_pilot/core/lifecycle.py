"""
Worktree lifecycle: switching to a branch's worktree and cleaning worktrees up.

The orchestrator sequences git operations, user hooks, confirmation prompts
and terminal opening. It prints progress to a rich Console and leaves exit
handling to the caller.
"""

import logging
import os
import re
from pathlib import Path
from typing import Callable, Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm as RichConfirm

from worktree_pilot.config import Config
from worktree_pilot.core.cleanup import CleanupFilterPipeline
from worktree_pilot.core.git import GitService
from worktree_pilot.core.hooks import HookRunner
from worktree_pilot.core.terminals.registry import TerminalProviderRegistry, default_providers
from worktree_pilot.exceptions import NotAGitRepositoryError
from worktree_pilot.models.modes import CleanupMode, TerminalMode
from worktree_pilot.models.status import CleanupResult
from worktree_pilot.models.worktree_info import WorktreeInfo

logger = logging.getLogger(__name__)

# (message, default) -> answer
Confirm = Callable[[str, bool], bool]


def click_confirm(message: str, default: bool) -> bool:
    return click.confirm(message, default=default)


def console_confirm(console: Console) -> Confirm:
    """Build a Confirm that prompts through console instead of stdout."""

    def confirm(message: str, default: bool) -> bool:
        return RichConfirm.ask(escape(message), default=default, console=console)

    return confirm


def sanitize_branch_name(branch: str) -> str:
    """
    Sanitize branch name for use in directory names.

    Args:
        branch: The branch name to sanitize.

    Returns:
        Sanitized string safe for directory names.
    """
    sanitized = branch.replace("/", "-")
    sanitized = re.sub(r"[^\w\-.]", "", sanitized)
    return sanitized


class WorktreeLifecycle:
    """Drives the switch and cleanup workflows."""

    def __init__(
        self,
        config: Optional[Config] = None,
        git_service: Optional[GitService] = None,
        registry: Optional[TerminalProviderRegistry] = None,
        pipeline: Optional[CleanupFilterPipeline] = None,
        hooks: Optional[HookRunner] = None,
        console: Optional[Console] = None,
        confirm: Optional[Confirm] = None,
    ):
        self.config = config or Config()
        self.console = console or Console()
        self.git = git_service or GitService()
        self.registry = registry or TerminalProviderRegistry(default_providers(self.console))
        self.pipeline = pipeline or CleanupFilterPipeline(git_service=self.git, console=self.console)
        self.hooks = hooks or HookRunner()
        self.confirm = confirm or click_confirm

    def _primary_root(self, start: Optional[Path] = None) -> tuple[Path, list[WorktreeInfo]]:
        """
        Locate the repository and list its worktrees.

        Git commands run from the primary worktree so they keep working while
        linked worktrees are being removed.

        Raises:
            NotAGitRepositoryError: If start is not inside a git repository.
        """
        repo_root = self.git.find_repo_root(start)
        if repo_root is None:
            raise NotAGitRepositoryError("Not in a git repository")

        worktrees = self.git.list_worktrees(repo_root)
        if worktrees:
            return worktrees[0].path, worktrees
        return repo_root, worktrees

    def resolve_worktree_path(
        self,
        repo_root: Path,
        branch: str,
        directory: Optional[str] = None,
    ) -> Path:
        """
        Work out where the worktree for branch should live.

        Uses directory when given, else the configured directory pattern with
        {repo_name} and {branch} filled in. Environment variables and ~ are
        expanded. Relative results are anchored at repo_root.
        """
        if directory:
            raw = directory
        else:
            raw = (
                self.config.worktree.directory_pattern
                .replace("{repo_name}", repo_root.name)
                .replace("{branch}", sanitize_branch_name(branch))
            )

        expanded = Path(os.path.expanduser(os.path.expandvars(raw)))
        if not expanded.is_absolute():
            expanded = repo_root / expanded
        return Path(os.path.abspath(expanded))

    def _open(self, path: Path, mode: TerminalMode, after_init: Optional[str]) -> int:
        if self.registry.open_worktree(path, mode, self.config.scripts.session_init, after_init):
            return 0
        self.console.print(f"[red]Failed to open {path} ({mode.value})[/red]")
        return 1

    def switch(
        self,
        branch: str,
        terminal_mode: Optional[TerminalMode] = None,
        after_init: Optional[str] = None,
        from_branch: Optional[str] = None,
        directory: Optional[str] = None,
        auto_confirm: bool = False,
        start: Optional[Path] = None,
    ) -> int:
        """
        Open the worktree for branch, creating it first if needed.

        Args:
            branch: Branch to switch to.
            terminal_mode: How to open the worktree. Defaults to the configured mode.
            after_init: One-off command run after the session init script.
            from_branch: Start point when a new branch has to be created.
            directory: Explicit worktree directory instead of the pattern.
            auto_confirm: Skip the creation prompt.
            start: Directory to locate the repository from. Defaults to cwd.

        Returns:
            Process exit code.

        Raises:
            NotAGitRepositoryError: If not inside a git repository.
            NoTerminalProviderError: If no backend can open the requested mode.
        """
        mode = terminal_mode or self.config.terminal.mode
        repo_root, worktrees = self._primary_root(start)

        existing = next((wt for wt in worktrees if wt.branch == branch), None)
        if existing is not None:
            logger.info(f"Found existing worktree for '{branch}' at {existing.path}")
            self.console.print(
                f"Switching to existing worktree [cyan]{branch}[/cyan] at {existing.path}"
            )
            return self._open(existing.path, mode, after_init)

        worktree_path = self.resolve_worktree_path(repo_root, branch, directory)
        scripts = self.config.scripts

        if not self.hooks.run(scripts.pre_create, repo_root):
            self.console.print("[red]pre_create hook failed, worktree not created[/red]")
            return 1

        if not auto_confirm and not self.confirm(
            f"Create worktree for '{branch}' at {worktree_path}?", True
        ):
            self.console.print("[yellow]Cancelled[/yellow]")
            return 0

        with self.console.status(f"[bold green]Creating worktree for {branch}..."):
            created = self.git.create_worktree(repo_root, worktree_path, branch, from_branch)

        if not created:
            self.console.print(f"[red]Failed to create worktree for '{branch}'[/red]")
            return 1

        self.console.print(f"[green]Created worktree:[/green] {worktree_path}")

        if not self.hooks.run(scripts.post_create, worktree_path):
            self.console.print("[yellow]post_create hook failed[/yellow]")
        self.hooks.run(scripts.post_create_async, worktree_path, run_async=True)

        return self._open(worktree_path, mode, after_init)

    def cleanup(
        self,
        mode: Optional[CleanupMode] = None,
        dry_run: bool = False,
        force: bool = False,
        auto_confirm: bool = False,
        start: Optional[Path] = None,
    ) -> CleanupResult:
        """
        Remove worktrees selected by mode, along with their local branches.

        The candidate list is printed before anything is removed. A failure on
        one worktree is reported and the remaining ones are still processed.

        Args:
            mode: Cleanup mode. Defaults to the configured mode.
            dry_run: Only report what would be removed.
            force: Skip safety checks and force removal and branch deletion.
            auto_confirm: Skip the confirmation prompt.
            start: Directory to locate the repository from. Defaults to cwd.

        Returns:
            CleanupResult with counts of removed worktrees and deleted branches.

        Raises:
            NotAGitRepositoryError: If not inside a git repository.
            GitHubError: If github mode cannot query pull requests at all.
        """
        mode = mode or self.config.cleanup.default_mode
        repo_root, worktrees = self._primary_root(start)

        candidates = [wt for wt in worktrees if not wt.is_primary]
        if not candidates:
            self.console.print("No worktrees to clean up")
            return CleanupResult()

        selected = self.pipeline.filter(repo_root, candidates, mode, force)
        if not selected:
            self.console.print("No worktrees match cleanup criteria")
            return CleanupResult()

        result = CleanupResult(candidates=len(selected), dry_run=dry_run)

        self.console.print(f"\n[bold]Worktrees to remove ({len(selected)}):[/bold]")
        for wt in selected:
            self.console.print(f"  • [cyan]{wt.branch}[/cyan] ({wt.path})")

        if dry_run:
            self.console.print("\n[yellow]Dry run - no changes made[/yellow]")
            return result

        if not auto_confirm and not self.confirm(f"Remove {len(selected)} worktree(s)?", False):
            self.console.print("[yellow]Cancelled[/yellow]")
            result.cancelled = True
            return result

        scripts = self.config.scripts
        if not self.hooks.run(scripts.pre_cleanup, repo_root):
            self.console.print("[red]pre_cleanup hook failed, nothing removed[/red]")
            result.failed = [wt.branch for wt in selected]
            return result

        for wt in selected:
            self._remove_one(repo_root, wt, force, result)

        if not self.hooks.run(scripts.post_cleanup, repo_root):
            self.console.print("[yellow]post_cleanup hook failed[/yellow]")

        color = "green" if not result.failed else "yellow"
        self.console.print(f"\n[{color}]{result.summary}[/{color}]")
        return result

    def _remove_one(
        self, repo_root: Path, worktree: WorktreeInfo, force: bool, result: CleanupResult
    ) -> None:
        try:
            if not self.git.remove_worktree(repo_root, worktree.path, force):
                self.console.print(f"[red]✗ Failed to remove {worktree.path}[/red]")
                result.failed.append(worktree.branch)
                return

            result.removed += 1
            self.console.print(f"[green]✓[/green] Removed {worktree.path}")

            if worktree.is_detached or not self.git.branch_exists_locally(repo_root, worktree.branch):
                return

            if self.git.delete_branch(repo_root, worktree.branch, force):
                result.branches_deleted += 1
                self.console.print(f"[green]✓[/green] Deleted branch {worktree.branch}")
            else:
                self.console.print(f"[yellow]Could not delete branch {worktree.branch}[/yellow]")
        except Exception as e:
            logger.exception(f"Unexpected error while removing {worktree.path}")
            self.console.print(f"[red]✗ Error removing {worktree.path}: {e}[/red]")
            result.failed.append(worktree.branch)
