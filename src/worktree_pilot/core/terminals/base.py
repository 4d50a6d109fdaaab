"""Common interface for terminal and editor backends."""

import logging
import shlex
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import ClassVar, Optional

from worktree_pilot.models.modes import TerminalMode
from worktree_pilot.utils.platform import Platform

logger = logging.getLogger(__name__)

SPAWN_TIMEOUT = 30


def compose_shell_command(path: Path, init_command: Optional[str]) -> str:
    """
    Build a shell line that enters path, runs init_command, then stays interactive.

    The trailing `exec $SHELL` keeps the terminal open after init_command exits,
    whether or not it succeeded.
    """
    parts = [f"cd {shlex.quote(str(path))}"]
    if init_command:
        parts.append(init_command)
    return " && ".join(parts) + "; exec $SHELL"


class TerminalProvider(ABC):
    """
    A backend that can open a directory in a terminal or editor.

    Subclasses declare their name, platforms, priority and modes as class
    attributes and implement the availability probe and open().
    """

    name: ClassVar[str]
    supported_platforms: ClassVar[Platform]
    priority: ClassVar[int]
    modes: ClassVar[frozenset[TerminalMode]]

    @abstractmethod
    def is_available(self) -> bool:
        """Probe whether the backend is installed or currently running."""

    def supports_mode(self, mode: TerminalMode) -> bool:
        return mode in self.modes

    def supports_platform(self, platform: Platform) -> bool:
        return bool(self.supported_platforms & platform)

    @abstractmethod
    def open(self, path: Path, mode: TerminalMode, init_command: Optional[str] = None) -> bool:
        """
        Open path using this backend.

        Returns:
            True on success. Backend failures are logged and reported as False.
        """

    def _run(self, command: list[str]) -> bool:
        """Run an automation command synchronously, turning failures into False."""
        logger.debug(f"[{self.name}] {' '.join(command)}")
        try:
            result = subprocess.run(
                command, capture_output=True, text=True, timeout=SPAWN_TIMEOUT
            )
        except subprocess.TimeoutExpired:
            logger.error(f"[{self.name}] timed out after {SPAWN_TIMEOUT}s")
            return False
        except OSError as e:
            logger.error(f"[{self.name}] failed to start {command[0]}: {e}")
            return False

        if result.returncode != 0:
            logger.error(
                f"[{self.name}] exited with code {result.returncode}: {result.stderr.strip()}"
            )
            return False
        return True

    def _spawn(self, command: list[str], cwd: Optional[Path] = None) -> bool:
        """Start a GUI program without waiting for it to exit."""
        logger.debug(f"[{self.name}] {' '.join(command)}")
        try:
            subprocess.Popen(
                command,
                cwd=cwd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as e:
            logger.error(f"[{self.name}] failed to start {command[0]}: {e}")
            return False
        return True

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r} priority={self.priority}>"
