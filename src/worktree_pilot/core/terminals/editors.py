"""Editor backends. These open the folder and ignore init commands."""

import logging
from pathlib import Path
from typing import Optional

from worktree_pilot.core.terminals.base import TerminalProvider
from worktree_pilot.models.modes import TerminalMode
from worktree_pilot.utils.platform import Platform, command_exists

logger = logging.getLogger(__name__)


class EditorProvider(TerminalProvider):
    """Opens a worktree folder with an editor's command-line launcher."""

    executable: str
    supported_platforms = Platform.ALL
    priority = 100

    def is_available(self) -> bool:
        return command_exists(self.executable)

    def open(self, path: Path, mode: TerminalMode, init_command: Optional[str] = None) -> bool:
        if init_command:
            logger.info(f"[{self.name}] init commands are not run when opening an editor")
        return self._spawn([self.executable, str(path)])


class VSCodeProvider(EditorProvider):
    name = "VS Code"
    executable = "code"
    modes = frozenset({TerminalMode.VSCODE})


class CursorProvider(EditorProvider):
    name = "Cursor"
    executable = "cursor"
    modes = frozenset({TerminalMode.CURSOR})
