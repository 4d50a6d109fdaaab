"""Git repository and worktree operations."""

import logging
from pathlib import Path
from typing import Optional

from git import Repo
from git.exc import GitCommandError, InvalidGitRepositoryError, NoSuchPathError

from worktree_pilot.exceptions import NotAGitRepositoryError
from worktree_pilot.models.worktree_info import DETACHED_MARKER, WorktreeInfo

logger = logging.getLogger(__name__)

DEFAULT_BRANCH_CANDIDATES = ("main", "master")
DEFAULT_REMOTE = "origin"


class GitService:
    """
    Thin wrapper over GitPython for the worktree operations the tool needs.

    Every method takes the repository path explicitly and opens the repository
    on demand, so the service holds no state between calls.
    """

    def open_repo(self, repo_path: Path) -> Repo:
        """
        Open the repository containing repo_path.

        Raises:
            NotAGitRepositoryError: If repo_path is not inside a git repository.
        """
        try:
            return Repo(repo_path, search_parent_directories=True)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise NotAGitRepositoryError(f"Not a git repository: {repo_path}") from e

    def find_repo_root(self, start: Optional[Path] = None) -> Optional[Path]:
        """
        Find the top-level directory of the repository containing start.

        Args:
            start: Directory to search from. Defaults to the current directory.

        Returns:
            Path to the working tree root, or None outside a repository.
        """
        try:
            repo = self.open_repo(start or Path.cwd())
        except NotAGitRepositoryError:
            return None
        with repo:
            if repo.working_tree_dir is None:
                return None
            return Path(repo.working_tree_dir)

    def list_worktrees(self, repo_path: Path) -> list[WorktreeInfo]:
        """
        List all worktrees for the repository.

        The first entry reported by git is the primary worktree.

        Args:
            repo_path: Any path inside the repository.

        Returns:
            List of WorktreeInfo objects, primary first.
        """
        try:
            with self.open_repo(repo_path) as repo:
                output = repo.git.worktree("list", "--porcelain")
        except GitCommandError as e:
            logger.error(f"Failed to list worktrees: {e.stderr}")
            return []

        entries: list[dict] = []
        current_wt: dict = {}
        for line in output.split("\n"):
            line = line.strip()

            if not line:
                if current_wt:
                    entries.append(current_wt)
                    current_wt = {}
                continue

            if line.startswith("worktree "):
                current_wt["path"] = line[9:]
            elif line.startswith("HEAD "):
                current_wt["head"] = line[5:]
            elif line.startswith("branch "):
                current_wt["branch"] = line[7:]
            elif line == "detached":
                current_wt["detached"] = True
            elif line == "bare":
                current_wt["bare"] = True

        if current_wt:
            entries.append(current_wt)

        worktrees = [
            self._parse_worktree_entry(entry, is_primary=index == 0)
            for index, entry in enumerate(entries)
        ]
        self._mark_current(worktrees)
        return worktrees

    def _parse_worktree_entry(self, entry: dict, is_primary: bool) -> WorktreeInfo:
        branch_ref = entry.get("branch", "")

        if branch_ref.startswith("refs/heads/"):
            branch = branch_ref[11:]
        elif entry.get("bare"):
            branch = "(bare)"
        else:
            branch = branch_ref or DETACHED_MARKER

        return WorktreeInfo(
            path=Path(entry.get("path", "")),
            branch=branch,
            head_commit=entry.get("head", "")[:7],
            is_primary=is_primary,
        )

    def _mark_current(self, worktrees: list[WorktreeInfo]) -> None:
        """Flag the worktree the process is running in, preferring the deepest match."""
        try:
            cwd = Path.cwd().resolve()
        except OSError:
            return

        best: Optional[WorktreeInfo] = None
        for wt in worktrees:
            wt_path = wt.path.resolve()
            if cwd == wt_path or wt_path in cwd.parents:
                if best is None or len(wt_path.parts) > len(best.path.resolve().parts):
                    best = wt
        if best is not None:
            best.is_current = True

    def _ref_exists(self, repo: Repo, ref: str) -> bool:
        try:
            repo.git.show_ref("--verify", "--quiet", ref)
            return True
        except GitCommandError:
            return False

    def branch_exists_locally(self, repo_path: Path, branch: str) -> bool:
        with self.open_repo(repo_path) as repo:
            return self._ref_exists(repo, f"refs/heads/{branch}")

    def branch_exists_remotely(
        self, repo_path: Path, branch: str, remote: str = DEFAULT_REMOTE
    ) -> bool:
        with self.open_repo(repo_path) as repo:
            return self._ref_exists(repo, f"refs/remotes/{remote}/{branch}")

    def get_default_branch(self, repo_path: Path) -> Optional[str]:
        """
        Resolve the branch used as the merge baseline.

        Tries main, master, origin/main, origin/master and finally the first
        local branch.

        Returns:
            A ref name usable with git rev-parse, or None for an empty repository.
        """
        with self.open_repo(repo_path) as repo:
            return self._default_branch(repo)

    def _default_branch(self, repo: Repo) -> Optional[str]:
        for name in DEFAULT_BRANCH_CANDIDATES:
            if self._ref_exists(repo, f"refs/heads/{name}"):
                return name
        for name in DEFAULT_BRANCH_CANDIDATES:
            if self._ref_exists(repo, f"refs/remotes/{DEFAULT_REMOTE}/{name}"):
                return f"{DEFAULT_REMOTE}/{name}"
        heads = list(repo.heads)
        if heads:
            return heads[0].name
        return None

    def create_worktree(
        self,
        repo_path: Path,
        path: Path,
        branch: str,
        from_branch: Optional[str] = None,
    ) -> bool:
        """
        Create a worktree at path with branch checked out.

        An existing local branch is attached as-is. Otherwise a new branch is
        created from from_branch, else tracking origin/<branch> when that
        exists, else from the default branch.

        Args:
            repo_path: Any path inside the repository.
            path: Directory for the new worktree.
            branch: Branch to check out.
            from_branch: Start point for a new branch.

        Returns:
            True on success, False if git refused.
        """
        with self.open_repo(repo_path) as repo:
            target = str(path)

            if self._ref_exists(repo, f"refs/heads/{branch}"):
                args = ["add", target, branch]
            elif from_branch:
                args = ["add", "-b", branch, target, from_branch]
            elif self._ref_exists(repo, f"refs/remotes/{DEFAULT_REMOTE}/{branch}"):
                args = ["add", "--track", "-b", branch, target, f"{DEFAULT_REMOTE}/{branch}"]
            else:
                base = self._default_branch(repo)
                args = ["add", "-b", branch, target]
                if base:
                    args.append(base)

            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                logger.info(f"git worktree {' '.join(args)}")
                repo.git.worktree(*args)
            except GitCommandError as e:
                logger.error(f"Failed to create worktree for '{branch}': {e.stderr.strip()}")
                return False
            except OSError as e:
                logger.error(f"Failed to create parent directory for {path}: {e}")
                return False

        return True

    def remove_worktree(self, repo_path: Path, path: Path, force: bool = False) -> bool:
        """Remove the worktree at path. Returns False if git refused."""
        args = ["remove"]
        if force:
            args.append("--force")
        args.append(str(path))

        try:
            with self.open_repo(repo_path) as repo:
                repo.git.worktree(*args)
        except GitCommandError as e:
            logger.error(f"Failed to remove worktree {path}: {e.stderr.strip()}")
            return False

        return True

    def delete_branch(self, repo_path: Path, branch: str, force: bool = False) -> bool:
        """Delete a local branch with -d, or -D when force is set."""
        try:
            with self.open_repo(repo_path) as repo:
                repo.git.branch("-D" if force else "-d", branch)
        except GitCommandError as e:
            logger.error(f"Failed to delete branch '{branch}': {e.stderr.strip()}")
            return False
        return True

    def has_uncommitted_changes(self, path: Path) -> bool:
        """
        Check the worktree at path for staged, unstaged or untracked changes.

        Returns True when the state cannot be read so callers never treat an
        unreadable worktree as clean.
        """
        try:
            with Repo(path) as repo:
                return repo.is_dirty(untracked_files=True)
        except Exception as e:
            logger.warning(f"Could not read status of {path}: {e}")
            return True

    def get_remote_url(self, repo_path: Path, remote: str = DEFAULT_REMOTE) -> Optional[str]:
        with self.open_repo(repo_path) as repo:
            try:
                return repo.remote(remote).url
            except (ValueError, GitCommandError):
                return None

    def is_github_repo(self, repo_path: Path) -> bool:
        """Check whether origin points at github.com."""
        url = self.get_remote_url(repo_path)
        return bool(url) and "github.com" in url

