"""GNOME Terminal backend."""

from pathlib import Path
from typing import Optional

from worktree_pilot.core.terminals.base import TerminalProvider, compose_shell_command
from worktree_pilot.models.modes import TerminalMode
from worktree_pilot.utils.platform import Platform, command_exists


class GnomeTerminalProvider(TerminalProvider):
    name = "GNOME Terminal"
    supported_platforms = Platform.LINUX
    priority = 50
    modes = frozenset({TerminalMode.TAB, TerminalMode.WINDOW})

    def is_available(self) -> bool:
        return command_exists("gnome-terminal")

    def build_command(
        self, path: Path, mode: TerminalMode, init_command: Optional[str]
    ) -> list[str]:
        flag = "--window" if mode == TerminalMode.WINDOW else "--tab"
        command = ["gnome-terminal", flag, f"--working-directory={path}"]
        if init_command:
            command += ["--", "bash", "-c", compose_shell_command(path, init_command)]
        return command

    def open(self, path: Path, mode: TerminalMode, init_command: Optional[str] = None) -> bool:
        return self._run(self.build_command(path, mode, init_command))
