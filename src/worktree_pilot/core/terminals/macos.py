"""macOS terminal backends driven through AppleScript."""

import subprocess
from pathlib import Path
from typing import Optional

from worktree_pilot.core.terminals.base import TerminalProvider, compose_shell_command
from worktree_pilot.models.modes import TerminalMode
from worktree_pilot.utils.platform import Platform

ITERM_APP_PATH = Path("/Applications/iTerm.app")


def applescript_string(value: str) -> str:
    """Quote value as an AppleScript string literal."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class ITerm2Provider(TerminalProvider):
    name = "iTerm2"
    supported_platforms = Platform.MACOS
    priority = 100
    modes = frozenset({TerminalMode.TAB, TerminalMode.WINDOW})

    def is_available(self) -> bool:
        if ITERM_APP_PATH.exists():
            return True
        try:
            result = subprocess.run(
                ["pgrep", "-x", "iTerm2"], capture_output=True, text=True, timeout=5
            )
        except (OSError, subprocess.TimeoutExpired):
            return False
        return result.returncode == 0

    def build_script(self, path: Path, mode: TerminalMode, init_command: Optional[str]) -> str:
        command = applescript_string(compose_shell_command(path, init_command))
        if mode == TerminalMode.WINDOW:
            return "\n".join([
                'tell application "iTerm2"',
                "    create window with default profile",
                "    tell current session of current window",
                f"        write text {command}",
                "    end tell",
                "end tell",
            ])
        return "\n".join([
            'tell application "iTerm2"',
            "    if (count of windows) = 0 then",
            "        create window with default profile",
            "    else",
            "        tell current window to create tab with default profile",
            "    end if",
            "    tell current session of current window",
            f"        write text {command}",
            "    end tell",
            "end tell",
        ])

    def open(self, path: Path, mode: TerminalMode, init_command: Optional[str] = None) -> bool:
        return self._run(["osascript", "-e", self.build_script(path, mode, init_command)])


class TerminalAppProvider(TerminalProvider):
    name = "Terminal.app"
    supported_platforms = Platform.MACOS
    priority = 50
    modes = frozenset({TerminalMode.TAB, TerminalMode.WINDOW})

    def is_available(self) -> bool:
        # Ships with every macOS install
        return True

    def build_script(self, path: Path, mode: TerminalMode, init_command: Optional[str]) -> str:
        command = applescript_string(compose_shell_command(path, init_command))
        if mode == TerminalMode.TAB:
            return "\n".join([
                'tell application "Terminal"',
                "    activate",
                "    if (count of windows) > 0 then",
                '        tell application "System Events" to keystroke "t" using command down',
                "        delay 0.2",
                f"        do script {command} in front window",
                "    else",
                f"        do script {command}",
                "    end if",
                "end tell",
            ])
        return "\n".join([
            'tell application "Terminal"',
            "    activate",
            f"    do script {command}",
            "end tell",
        ])

    def open(self, path: Path, mode: TerminalMode, init_command: Optional[str] = None) -> bool:
        return self._run(["osascript", "-e", self.build_script(path, mode, init_command)])
