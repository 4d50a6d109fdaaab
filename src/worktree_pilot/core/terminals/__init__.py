"""
Terminal and editor backends.

Each backend is a TerminalProvider with a fixed name, platform set, priority
and supported modes. TerminalProviderRegistry chooses between them.
"""

from worktree_pilot.core.terminals.base import TerminalProvider, compose_shell_command
from worktree_pilot.core.terminals.registry import (
    TerminalProviderRegistry,
    combine_init_commands,
    default_providers,
)

__all__ = [
    "TerminalProvider",
    "TerminalProviderRegistry",
    "combine_init_commands",
    "compose_shell_command",
    "default_providers",
]
