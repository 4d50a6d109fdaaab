"""
Core modules for worktree-pilot.

This package contains the business logic for:
- Git and worktree operations
- Branch status resolution
- GitHub pull request lookups
- Hook execution
- Cleanup candidate filtering
- The switch and cleanup workflows
"""

from worktree_pilot.core.branch_status import BranchStatusResolver
from worktree_pilot.core.cleanup import CleanupFilterPipeline
from worktree_pilot.core.git import GitService
from worktree_pilot.core.github import GitHubService
from worktree_pilot.core.hooks import HookRunner
from worktree_pilot.core.lifecycle import WorktreeLifecycle

__all__ = [
    "BranchStatusResolver",
    "CleanupFilterPipeline",
    "GitHubService",
    "GitService",
    "HookRunner",
    "WorktreeLifecycle",
]
