"""Logging configuration for worktree-pilot."""

import logging

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """
    Configure logging for the application.

    Args:
        verbose: If True, show INFO level messages.
        debug: If True, show DEBUG level messages with source locations.
    """
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = RichHandler(
        console=Console(stderr=True),
        show_time=debug,
        show_path=debug,
        markup=False,
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s" if debug else "%(message)s"))
    root_logger.addHandler(handler)

    # GitPython is chatty at DEBUG level
    logging.getLogger("git").setLevel(max(level, logging.INFO))
