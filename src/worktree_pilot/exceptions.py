"""Custom exceptions for worktree-pilot."""


class WorktreePilotError(Exception):
    """Base exception for all worktree-pilot errors."""


class NotAGitRepositoryError(WorktreePilotError):
    """Raised when the path is not inside a git repository."""


class GitHubError(WorktreePilotError):
    """Base exception for GitHub CLI lookups."""


class GitHubCliUnavailableError(GitHubError):
    """Raised when gh is missing or not authenticated."""


class GitHubTimeoutError(GitHubError):
    """Raised when a gh invocation exceeds its timeout."""

    def __init__(self, command: list[str], timeout: float):
        self.command = command
        self.timeout = timeout
        super().__init__(f"'{' '.join(command)}' timed out after {timeout:g}s")


class NoTerminalProviderError(WorktreePilotError):
    """Raised when no terminal backend can handle the requested mode."""

    def __init__(self, mode: str):
        self.mode = mode
        super().__init__(f"No terminal provider available for mode '{mode}'")
