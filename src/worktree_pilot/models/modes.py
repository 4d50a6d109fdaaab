"""Enumerations for user-selectable modes."""

from enum import Enum


class TerminalMode(str, Enum):
    """How a worktree should be opened."""

    TAB = "tab"
    WINDOW = "window"
    INPLACE = "inplace"
    ECHO = "echo"
    VSCODE = "vscode"
    CURSOR = "cursor"


class CleanupMode(str, Enum):
    """Which worktrees a cleanup run should consider."""

    ALL = "all"
    REMOTELESS = "remoteless"
    MERGED = "merged"
    INTERACTIVE = "interactive"
    GITHUB = "github"
