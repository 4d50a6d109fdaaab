"""Windows Terminal backend."""

from pathlib import Path
from typing import Optional

from worktree_pilot.core.terminals.base import TerminalProvider
from worktree_pilot.models.modes import TerminalMode
from worktree_pilot.utils.platform import Platform, command_exists


class WindowsTerminalProvider(TerminalProvider):
    name = "Windows Terminal"
    supported_platforms = Platform.WINDOWS
    priority = 100
    modes = frozenset({TerminalMode.TAB, TerminalMode.WINDOW})

    def is_available(self) -> bool:
        return command_exists("wt")

    def build_command(
        self, path: Path, mode: TerminalMode, init_command: Optional[str]
    ) -> list[str]:
        subcommand = "new-window" if mode == TerminalMode.WINDOW else "new-tab"
        command = ["wt", subcommand, "-d", str(path)]
        if init_command:
            command += ["powershell", "-NoExit", "-Command", init_command]
        return command

    def open(self, path: Path, mode: TerminalMode, init_command: Optional[str] = None) -> bool:
        return self._spawn(self.build_command(path, mode, init_command))
