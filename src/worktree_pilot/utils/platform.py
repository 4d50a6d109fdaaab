"""Host platform detection and executable lookup."""

import shutil
import sys
from enum import IntFlag


class Platform(IntFlag):
    """Operating systems a terminal backend can run on."""

    WINDOWS = 1
    MACOS = 2
    LINUX = 4
    ALL = WINDOWS | MACOS | LINUX


def current_platform() -> Platform:
    """Return the Platform flag for the running interpreter."""
    if sys.platform.startswith("win"):
        return Platform.WINDOWS
    if sys.platform == "darwin":
        return Platform.MACOS
    return Platform.LINUX


def command_exists(command: str) -> bool:
    """Check if an executable is on PATH."""
    return shutil.which(command) is not None
