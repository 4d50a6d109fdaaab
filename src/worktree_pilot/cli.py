"""CLI entry point for worktree-pilot."""

from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from worktree_pilot.config import Config, load_config
from worktree_pilot.core.git import GitService
from worktree_pilot.core.lifecycle import WorktreeLifecycle, console_confirm
from worktree_pilot.core.terminals.registry import TerminalProviderRegistry, default_providers
from worktree_pilot.exceptions import GitHubError, NoTerminalProviderError, NotAGitRepositoryError
from worktree_pilot.logging_config import setup_logging
from worktree_pilot.models.modes import CleanupMode, TerminalMode

console = Console()
err_console = Console(stderr=True)


def get_config(ctx: click.Context) -> Config:
    """Load configuration for the repository around the current directory."""
    repo_root = GitService().find_repo_root()
    return load_config(project_dir=repo_root, config_path=ctx.obj.get("config_path"))


def get_lifecycle(config: Config, quiet_stdout: bool = False) -> WorktreeLifecycle:
    """
    Build a WorktreeLifecycle wired to the CLI consoles.

    Args:
        config: Loaded configuration.
        quiet_stdout: Send progress output to stderr so stdout only carries
            what the terminal provider prints (echo mode).
    """
    registry = TerminalProviderRegistry(default_providers(console))
    if quiet_stdout:
        return WorktreeLifecycle(
            config=config,
            registry=registry,
            console=err_console,
            confirm=console_confirm(err_console),
        )
    return WorktreeLifecycle(config=config, registry=registry, console=console)


@click.group()
@click.version_option(package_name="worktree-pilot")
@click.option("-v", "--verbose", is_flag=True, help="Show informational log messages.")
@click.option("--debug", is_flag=True, help="Show debug log messages.")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="Extra config file layered over the global and project config.",
)
@click.pass_context
def main(ctx: click.Context, verbose: bool, debug: bool, config_path: Optional[str]) -> None:
    """worktree-pilot - one git worktree per branch.

    Switch to branches in their own worktrees, open them in your terminal
    or editor, and clean up the ones you no longer need.
    """
    setup_logging(verbose=verbose, debug=debug)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


@main.command("switch")
@click.argument("branch")
@click.option(
    "-t",
    "--terminal",
    "terminal_mode",
    type=click.Choice([m.value for m in TerminalMode]),
    help="How to open the worktree (default: terminal.mode from config).",
)
@click.option("--after-init", help="Command to run after the session init script.")
@click.option("--from", "from_branch", help="Start point when creating a new branch.")
@click.option("--dir", "directory", help="Directory for the new worktree.")
@click.option("-y", "--yes", is_flag=True, help="Create the worktree without asking.")
@click.pass_context
def switch_worktree(
    ctx: click.Context,
    branch: str,
    terminal_mode: Optional[str],
    after_init: Optional[str],
    from_branch: Optional[str],
    directory: Optional[str],
    yes: bool,
) -> None:
    """Switch to BRANCH, creating a worktree for it if needed.

    An existing worktree for BRANCH is opened as-is. Otherwise a new one is
    created from the configured directory pattern.

    Example:
        wtp switch feature/login
        wtp switch bugfix-42 --from release/1.2 -t vscode
        eval "$(wtp switch feature/login -t echo)"
    """
    config = get_config(ctx)
    mode = TerminalMode(terminal_mode) if terminal_mode else config.terminal.mode
    lifecycle = get_lifecycle(config, quiet_stdout=mode == TerminalMode.ECHO)

    try:
        exit_code = lifecycle.switch(
            branch,
            terminal_mode=mode,
            after_init=after_init,
            from_branch=from_branch,
            directory=directory,
            auto_confirm=yes,
        )
    except (NotAGitRepositoryError, NoTerminalProviderError) as e:
        raise click.ClickException(str(e)) from e

    ctx.exit(exit_code)


@main.command("cleanup")
@click.option(
    "-m",
    "--mode",
    type=click.Choice([m.value for m in CleanupMode]),
    help="Which worktrees to remove (default: cleanup.default_mode from config).",
)
@click.option("-d", "--dry-run", is_flag=True, help="Show what would be removed.")
@click.option(
    "-f",
    "--force",
    is_flag=True,
    help="Ignore uncommitted/unpushed changes and force branch deletion.",
)
@click.option("-y", "--yes", is_flag=True, help="Remove without asking.")
@click.pass_context
def cleanup_worktrees(
    ctx: click.Context,
    mode: Optional[str],
    dry_run: bool,
    force: bool,
    yes: bool,
) -> None:
    """Remove worktrees and their local branches.

    Modes:
        all          every worktree except the main one
        remoteless   branches without an upstream
        merged       branches already merged into the default branch
        github       branches whose pull request is merged or closed
        interactive  pick worktrees from a list

    Example:
        wtp cleanup --mode merged --dry-run
        wtp cleanup -m github -y
    """
    config = get_config(ctx)
    lifecycle = get_lifecycle(config)

    try:
        result = lifecycle.cleanup(
            mode=CleanupMode(mode) if mode else None,
            dry_run=dry_run,
            force=force,
            auto_confirm=yes,
        )
    except (NotAGitRepositoryError, GitHubError) as e:
        raise click.ClickException(str(e)) from e

    ctx.exit(result.exit_code)


@main.command("config")
@click.option("--show", is_flag=True, default=True, help="Show the effective configuration.")
@click.pass_context
def show_config(ctx: click.Context, show: bool) -> None:
    """Show the effective configuration.

    Values come from the global file, the project file, --config and
    WTP_* environment variables, in that order. Unset scripts are omitted.

    Example:
        wtp config --show
        wtp -c ./ci.toml config
    """
    config = get_config(ctx)

    table = Table(title="Configuration", show_header=True, header_style="bold cyan")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    for section_name in Config.model_fields:
        section = getattr(config, section_name)
        for key, value in section.model_dump(mode="json").items():
            if value is None:
                continue
            table.add_row(f"{section_name}.{key}", escape(str(value)))

    console.print()
    console.print(table)
    console.print()


@main.command("list")
def list_worktrees() -> None:
    """List all worktrees for this repository.

    Example:
        wtp list
    """
    git = GitService()
    repo_root = git.find_repo_root()
    if repo_root is None:
        raise click.ClickException("Not in a git repository")

    worktrees = git.list_worktrees(repo_root)

    table = Table(title="Git Worktrees", show_header=True, header_style="bold cyan")
    table.add_column("", justify="center")
    table.add_column("Branch", style="green")
    table.add_column("Commit", style="dim")
    table.add_column("Path")

    for wt in worktrees:
        marker = "[bold]*[/bold]" if wt.is_current else ""
        branch = f"{wt.branch} [blue](main)[/blue]" if wt.is_primary else wt.branch
        table.add_row(marker, branch, wt.head_commit, wt.short_path)

    console.print()
    console.print(table)
    console.print()


if __name__ == "__main__":
    main()
