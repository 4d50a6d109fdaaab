"""Backends that need no terminal automation at all."""

import logging
import os
import shlex
from pathlib import Path
from typing import Optional

from rich.console import Console

from worktree_pilot.core.terminals.base import TerminalProvider
from worktree_pilot.models.modes import TerminalMode
from worktree_pilot.utils.platform import Platform

logger = logging.getLogger(__name__)


class EchoProvider(TerminalProvider):
    """
    Prints a `cd` line instead of opening anything.

    Useful with a shell wrapper: eval "$(wtp switch feature -t echo)".
    """

    name = "Echo"
    supported_platforms = Platform.ALL
    priority = 0
    modes = frozenset({TerminalMode.ECHO})

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def is_available(self) -> bool:
        return True

    def open(self, path: Path, mode: TerminalMode, init_command: Optional[str] = None) -> bool:
        line = f"cd {shlex.quote(str(path))}"
        if init_command:
            line += f" && {init_command}"
        self.console.print(line, markup=False, highlight=False, soft_wrap=True)
        return True


class InplaceProvider(TerminalProvider):
    """Changes this process's directory. The parent shell is unaffected."""

    name = "Inplace"
    supported_platforms = Platform.ALL
    priority = 0
    modes = frozenset({TerminalMode.INPLACE})

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def is_available(self) -> bool:
        return True

    def open(self, path: Path, mode: TerminalMode, init_command: Optional[str] = None) -> bool:
        try:
            os.chdir(path)
        except OSError as e:
            logger.error(f"[Inplace] cannot change directory to {path}: {e}")
            return False
        self.console.print(f"Changed directory to [cyan]{path}[/cyan]")
        if init_command:
            self.console.print(f"[dim]Run init commands manually: {init_command}[/dim]")
        return True
