"""Model describing one entry of `git worktree list`."""

from pathlib import Path

from pydantic import BaseModel, Field

DETACHED_MARKER = "(detached)"


class WorktreeInfo(BaseModel):
    """A checked-out worktree and the branch it holds."""

    path: Path = Field(description="Filesystem location of the worktree")
    branch: str = Field(description="Checked-out branch, or a marker for detached/bare entries")
    head_commit: str = Field(default="", description="Short SHA of the HEAD commit")
    is_primary: bool = Field(
        default=False, description="Whether this is the repository's main worktree"
    )
    is_current: bool = Field(
        default=False, description="Whether the process is running inside this worktree"
    )

    class Config:
        arbitrary_types_allowed = True

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def is_detached(self) -> bool:
        return self.branch == DETACHED_MARKER

    @property
    def short_path(self) -> str:
        """Path with the home directory collapsed to ``~``."""
        home = Path.home()
        if self.path.is_relative_to(home):
            return f"~/{self.path.relative_to(home)}"
        return str(self.path)
