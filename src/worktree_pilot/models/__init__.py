"""
Pydantic models for worktree-pilot.

This package contains data models for:
- Worktree listings
- Branch and pull request status
- Terminal and cleanup modes
- Cleanup results
"""

from worktree_pilot.models.modes import CleanupMode, TerminalMode
from worktree_pilot.models.status import BranchStatus, CleanupResult, PrStatus
from worktree_pilot.models.worktree_info import WorktreeInfo

__all__ = [
    "BranchStatus",
    "CleanupMode",
    "CleanupResult",
    "PrStatus",
    "TerminalMode",
    "WorktreeInfo",
]
