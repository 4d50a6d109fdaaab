"""Resolve merge, remote and working-tree state for worktree branches."""

import logging
from pathlib import Path
from typing import Iterable, Optional

from git import Repo
from git.exc import GitCommandError

from worktree_pilot.core.git import GitService
from worktree_pilot.models.status import BranchStatus
from worktree_pilot.models.worktree_info import WorktreeInfo

logger = logging.getLogger(__name__)


class BranchStatusResolver:
    """
    Computes BranchStatus snapshots for worktrees.

    Any failure while reading the repository yields an unresolved all-false
    status. Callers treat that as "unknown", which keeps the worktree out of
    every automatic cleanup mode.
    """

    def __init__(self, git_service: Optional[GitService] = None):
        self.git = git_service or GitService()

    def resolve(
        self,
        repo_path: Path,
        worktree: WorktreeInfo,
        default_branch: Optional[str] = None,
    ) -> BranchStatus:
        """
        Compute the status of a single worktree branch.

        Args:
            repo_path: Any path inside the repository.
            worktree: Worktree whose branch should be inspected.
            default_branch: Precomputed merge baseline. Looked up when omitted.

        Returns:
            BranchStatus for the worktree.
        """
        try:
            if default_branch is None:
                default_branch = self.git.get_default_branch(repo_path)
            with self.git.open_repo(repo_path) as repo:
                return self._resolve(repo, worktree, default_branch)
        except Exception as e:
            logger.warning(f"Could not resolve status for '{worktree.branch}': {e}")
            return BranchStatus.unknown(worktree.branch, worktree.path)

    def resolve_many(
        self, repo_path: Path, worktrees: Iterable[WorktreeInfo]
    ) -> list[BranchStatus]:
        """
        Compute statuses for several worktrees in one pass.

        The repository is opened and the default branch looked up once. Results
        keep the input order.
        """
        worktrees = list(worktrees)
        try:
            default_branch = self.git.get_default_branch(repo_path)
            repo = self.git.open_repo(repo_path)
        except Exception as e:
            logger.warning(f"Could not open repository at {repo_path}: {e}")
            return [BranchStatus.unknown(wt.branch, wt.path) for wt in worktrees]

        logger.debug(f"Comparing {len(worktrees)} branch(es) against '{default_branch}'")

        statuses = []
        with repo:
            for wt in worktrees:
                try:
                    statuses.append(self._resolve(repo, wt, default_branch))
                except Exception as e:
                    logger.warning(f"Could not resolve status for '{wt.branch}': {e}")
                    statuses.append(BranchStatus.unknown(wt.branch, wt.path))
        return statuses

    def _resolve(
        self, repo: Repo, worktree: WorktreeInfo, default_branch: Optional[str]
    ) -> BranchStatus:
        try:
            head = repo.heads[worktree.branch]
        except IndexError:
            logger.debug(f"Local branch '{worktree.branch}' not found")
            return BranchStatus.unknown(worktree.branch, worktree.path)

        tip = head.commit
        tracking = head.tracking_branch()
        has_remote = tracking is not None and tracking.is_valid()

        has_unpushed = False
        if has_remote:
            has_unpushed = not repo.is_ancestor(tip.hexsha, tracking.commit.hexsha)

        is_merged = False
        is_identical = False
        if default_branch:
            try:
                default_tip = repo.commit(default_branch)
            except (GitCommandError, ValueError) as e:
                raise RuntimeError(f"cannot read default branch '{default_branch}': {e}") from e
            is_identical = tip.hexsha == default_tip.hexsha
            is_merged = is_identical or repo.is_ancestor(tip.hexsha, default_tip.hexsha)

        with Repo(worktree.path) as worktree_repo:
            has_uncommitted = worktree_repo.is_dirty(untracked_files=True)

        return BranchStatus(
            branch=worktree.branch,
            path=worktree.path,
            has_remote=has_remote,
            is_merged=is_merged,
            is_identical=is_identical,
            has_uncommitted_changes=has_uncommitted,
            has_unpushed_commits=has_unpushed,
        )
