"""
worktree-pilot - create, open and clean up git worktrees.

This package switches between branches by giving each one its own worktree,
opens worktrees in the user's terminal or editor, and removes worktrees that
are merged, remoteless or closed on GitHub.
"""

__version__ = "0.1.0"

from worktree_pilot.config import Config, load_config

__all__ = [
    "__version__",
    "Config",
    "load_config",
]
