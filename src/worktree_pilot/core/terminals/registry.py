"""Selection of the best terminal backend for a requested mode."""

import logging
from pathlib import Path
from typing import Iterable, Optional

from rich.console import Console

from worktree_pilot.core.terminals.base import TerminalProvider
from worktree_pilot.core.terminals.editors import CursorProvider, VSCodeProvider
from worktree_pilot.core.terminals.fallback import EchoProvider, InplaceProvider
from worktree_pilot.core.terminals.linux import GnomeTerminalProvider
from worktree_pilot.core.terminals.macos import ITerm2Provider, TerminalAppProvider
from worktree_pilot.core.terminals.multiplexer import TmuxProvider
from worktree_pilot.core.terminals.windows import WindowsTerminalProvider
from worktree_pilot.exceptions import NoTerminalProviderError
from worktree_pilot.models.modes import TerminalMode
from worktree_pilot.utils.platform import Platform, current_platform

logger = logging.getLogger(__name__)


def default_providers(console: Optional[Console] = None) -> list[TerminalProvider]:
    """Every known backend, in registration order."""
    return [
        ITerm2Provider(),
        TerminalAppProvider(),
        WindowsTerminalProvider(),
        TmuxProvider(),
        GnomeTerminalProvider(),
        VSCodeProvider(),
        CursorProvider(),
        EchoProvider(console),
        InplaceProvider(console),
    ]


def combine_init_commands(*commands: Optional[str]) -> Optional[str]:
    """Join the non-empty commands with '; ', keeping their order."""
    parts = [c.strip() for c in commands if c and c.strip()]
    return "; ".join(parts) or None


class TerminalProviderRegistry:
    """
    Holds the backends usable on this platform and picks one per request.

    Selection keeps providers that support the mode and report themselves
    available, then takes the highest priority. Ties go to the provider
    registered first.
    """

    def __init__(
        self,
        providers: Optional[Iterable[TerminalProvider]] = None,
        platform: Optional[Platform] = None,
    ):
        platform = platform if platform is not None else current_platform()
        self.providers: list[TerminalProvider] = []
        seen: set[type] = set()

        for provider in providers if providers is not None else default_providers():
            if not provider.supports_platform(platform):
                logger.debug(f"Skipping {provider.name}: not supported on {platform!r}")
                continue
            if type(provider) in seen:
                logger.debug(f"Skipping duplicate provider {provider.name}")
                continue
            seen.add(type(provider))
            self.providers.append(provider)

    def candidates(self, mode: TerminalMode) -> list[TerminalProvider]:
        """Providers that could serve mode right now, in registration order."""
        return [p for p in self.providers if p.supports_mode(mode) and p.is_available()]

    def select(self, mode: TerminalMode) -> Optional[TerminalProvider]:
        """
        Pick the provider for mode.

        Returns:
            The highest-priority available provider, or None if none qualifies.
        """
        best: Optional[TerminalProvider] = None
        for provider in self.candidates(mode):
            if best is None or provider.priority > best.priority:
                best = provider

        if best is None:
            logger.info(f"No provider available for mode '{mode.value}'")
        else:
            logger.debug(f"Selected {best.name} for mode '{mode.value}'")
        return best

    def open_worktree(
        self,
        path: Path,
        mode: TerminalMode,
        session_init: Optional[str] = None,
        after_init: Optional[str] = None,
    ) -> bool:
        """
        Open path with the provider selected for mode.

        session_init runs before after_init when both are given.

        Returns:
            False when the selected provider fails.

        Raises:
            NoTerminalProviderError: If no provider qualifies for mode.
        """
        provider = self.select(mode)
        if provider is None:
            raise NoTerminalProviderError(mode.value)

        init_command = combine_init_commands(session_init, after_init)
        logger.info(f"Opening {path} with {provider.name}")
        return provider.open(path, mode, init_command)
