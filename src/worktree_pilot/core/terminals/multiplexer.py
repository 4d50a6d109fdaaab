"""tmux backend: opens worktrees as windows in the current tmux session."""

import logging
import os
import subprocess
from pathlib import Path
from typing import Optional

import libtmux

from worktree_pilot.core.terminals.base import TerminalProvider, compose_shell_command
from worktree_pilot.models.modes import TerminalMode
from worktree_pilot.utils.platform import Platform, command_exists

logger = logging.getLogger(__name__)


class TmuxProvider(TerminalProvider):
    """Opens a new window in the tmux session the user is attached to."""

    name = "tmux"
    supported_platforms = Platform.LINUX | Platform.MACOS
    priority = 150
    modes = frozenset({TerminalMode.TAB, TerminalMode.WINDOW})

    def __init__(self):
        self._server: Optional[libtmux.Server] = None

    @property
    def server(self) -> libtmux.Server:
        """Get or create libtmux server instance."""
        if self._server is None:
            self._server = libtmux.Server()
        return self._server

    def is_inside_tmux(self) -> bool:
        """Check if currently running inside a tmux session."""
        return "TMUX" in os.environ

    def is_available(self) -> bool:
        return self.is_inside_tmux() and command_exists("tmux")

    def get_current_session_name(self) -> Optional[str]:
        """Get the name of the current tmux session if inside tmux."""
        if not self.is_inside_tmux():
            return None

        try:
            result = subprocess.run(
                ["tmux", "display-message", "-p", "#S"],
                capture_output=True,
                text=True,
                check=True
            )
            return result.stdout.strip()
        except (subprocess.CalledProcessError, OSError):
            return None

    def open(self, path: Path, mode: TerminalMode, init_command: Optional[str] = None) -> bool:
        session_name = self.get_current_session_name()
        if not session_name:
            logger.error("[tmux] could not determine the current session")
            return False

        try:
            session = self.server.sessions.filter(session_name=session_name)[0]
            session.new_window(
                window_name=path.name,
                start_directory=str(path),
                window_shell=compose_shell_command(path, init_command) if init_command else None,
                attach=True,
            )
        except (libtmux.exc.LibTmuxException, IndexError) as e:
            logger.error(f"[tmux] failed to open window: {e}")
            return False

        return True
