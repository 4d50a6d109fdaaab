"""Models describing branch state and the outcome of cleanup runs."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field


class PrStatus(str, Enum):
    """State of the most recent pull request for a branch."""

    OPEN = "open"
    CLOSED = "closed"
    MERGED = "merged"
    NONE = "none"

    @classmethod
    def from_gh_state(cls, state: str) -> "PrStatus":
        """Map a `gh pr list --json state` value onto a PrStatus."""
        try:
            return cls(state.strip().lower())
        except ValueError:
            return cls.NONE


class BranchStatus(BaseModel):
    """
    Snapshot of a worktree branch compared to its upstream and the default branch.

    A status with ``is_resolved=False`` is the all-false fallback produced when
    the branch could not be inspected. Such a status must never make a worktree
    look eligible for removal.
    """

    branch: str
    path: Path
    has_remote: bool = False
    is_merged: bool = False
    is_identical: bool = False
    has_uncommitted_changes: bool = False
    has_unpushed_commits: bool = False
    is_resolved: bool = Field(
        default=True, description="False when the status is an unknown-state fallback"
    )

    class Config:
        arbitrary_types_allowed = True

    @classmethod
    def unknown(cls, branch: str, path: Path) -> "BranchStatus":
        return cls(branch=branch, path=path, is_resolved=False)

    @property
    def indicator(self) -> str:
        """Single-character marker shown next to a worktree in pickers."""
        if self.has_uncommitted_changes:
            return "!"
        if self.has_unpushed_commits:
            return "↑"
        return "✓"


class CleanupResult(BaseModel):
    """Result of a cleanup run."""

    candidates: int = 0
    removed: int = 0
    branches_deleted: int = 0
    failed: list[str] = Field(default_factory=list)
    dry_run: bool = False
    cancelled: bool = False

    @property
    def exit_code(self) -> int:
        return 1 if self.failed else 0

    @property
    def summary(self) -> str:
        return (
            f"Removed {self.removed} of {self.candidates} worktree(s), "
            f"deleted {self.branches_deleted} local branch(es)"
        )
