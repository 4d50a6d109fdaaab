"""
Unit tests for CleanupFilterPipeline.

Tests cover:
- Mode-specific selection (all, remoteless, merged, github, interactive)
- The uncommitted/unpushed safety gate and --force
- Ordering of results
- GitHub lookup failures
"""

from io import StringIO
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from rich.console import Console

from worktree_pilot.core.branch_status import BranchStatusResolver
from worktree_pilot.core.cleanup import CleanupFilterPipeline
from worktree_pilot.core.git import GitService
from worktree_pilot.core.github import GitHubService
from worktree_pilot.exceptions import GitHubCliUnavailableError, GitHubError, GitHubTimeoutError
from worktree_pilot.models.modes import CleanupMode
from worktree_pilot.models.status import BranchStatus, PrStatus
from worktree_pilot.models.worktree_info import WorktreeInfo

REPO = Path("/repo")


def wt(branch: str) -> WorktreeInfo:
    return WorktreeInfo(path=Path(f"/worktrees/{branch}"), branch=branch)


def status(branch: str, **fields) -> BranchStatus:
    return BranchStatus(branch=branch, path=Path(f"/worktrees/{branch}"), **fields)


class PipelineHarness:
    """Builds a pipeline around mocked collaborators."""

    def __init__(self, statuses=None, dirty=(), pr_statuses=None):
        self.output = StringIO()
        self.git = MagicMock(spec=GitService)
        self.git.has_uncommitted_changes.side_effect = lambda path: path.name in dirty
        self.git.is_github_repo.return_value = True

        self.resolver = MagicMock(spec=BranchStatusResolver)
        statuses = statuses or {}
        self.resolver.resolve_many.side_effect = lambda repo, wts: [
            statuses.get(w.branch, BranchStatus.unknown(w.branch, w.path)) for w in wts
        ]

        self.github = MagicMock(spec=GitHubService)
        self.github.is_cli_available.return_value = True
        pr_statuses = pr_statuses or {}

        def lookup(repo, branch):
            value = pr_statuses.get(branch, PrStatus.NONE)
            if isinstance(value, Exception):
                raise value
            return value

        self.github.get_pull_request_status_for_branch.side_effect = lookup

        self.selector = MagicMock(return_value=[])
        self.pipeline = CleanupFilterPipeline(
            git_service=self.git,
            resolver=self.resolver,
            github_service=self.github,
            selector=self.selector,
            console=Console(file=self.output, width=200),
        )

    @property
    def printed(self) -> str:
        return self.output.getvalue()


def branches(worktrees):
    return [w.branch for w in worktrees]


class TestMergedMode:
    """Tests for merged mode, including the documented scenarios."""

    CANDIDATES = [wt("feature-x"), wt("feature-y")]

    def test_selects_only_merged_branch(self):
        harness = PipelineHarness(statuses={
            "feature-x": status("feature-x", is_merged=True),
            "feature-y": status("feature-y", is_merged=False),
        })

        result = harness.pipeline.filter(REPO, self.CANDIDATES, CleanupMode.MERGED)

        assert branches(result) == ["feature-x"]

    def test_unpushed_commits_block_merged_branch(self):
        harness = PipelineHarness(statuses={
            "feature-x": status("feature-x", is_merged=True, has_unpushed_commits=True),
            "feature-y": status("feature-y"),
        })

        result = harness.pipeline.filter(REPO, self.CANDIDATES, CleanupMode.MERGED)

        assert result == []
        assert "unpushed" in harness.printed

    def test_identical_counts_as_merged(self):
        harness = PipelineHarness(statuses={
            "feature-x": status("feature-x", is_identical=True),
        })

        result = harness.pipeline.filter(REPO, [wt("feature-x")], CleanupMode.MERGED)

        assert branches(result) == ["feature-x"]

    def test_uncommitted_changes_block_unless_forced(self):
        statuses = {"feature-x": status("feature-x", is_merged=True, has_uncommitted_changes=True)}

        harness = PipelineHarness(statuses=statuses)
        assert harness.pipeline.filter(REPO, [wt("feature-x")], CleanupMode.MERGED) == []

        harness = PipelineHarness(statuses=statuses)
        forced = harness.pipeline.filter(REPO, [wt("feature-x")], CleanupMode.MERGED, force=True)
        assert branches(forced) == ["feature-x"]

    def test_unresolved_status_is_never_selected(self):
        harness = PipelineHarness()

        result = harness.pipeline.filter(REPO, [wt("mystery")], CleanupMode.MERGED, force=True)

        assert result == []


class TestRemotelessMode:
    """Tests for remoteless mode."""

    def test_selects_branches_without_upstream(self):
        harness = PipelineHarness(statuses={
            "local": status("local", has_remote=False),
            "tracked": status("tracked", has_remote=True),
        })

        result = harness.pipeline.filter(REPO, [wt("local"), wt("tracked")], CleanupMode.REMOTELESS)

        assert branches(result) == ["local"]

    def test_unresolved_branch_is_not_treated_as_remoteless(self):
        harness = PipelineHarness()

        result = harness.pipeline.filter(REPO, [wt("renamed")], CleanupMode.REMOTELESS)

        assert result == []

    def test_dirty_remoteless_branch_needs_force(self):
        harness = PipelineHarness(statuses={
            "local": status("local", has_uncommitted_changes=True),
        })

        assert harness.pipeline.filter(REPO, [wt("local")], CleanupMode.REMOTELESS) == []
        assert branches(
            harness.pipeline.filter(REPO, [wt("local")], CleanupMode.REMOTELESS, force=True)
        ) == ["local"]


class TestAllMode:
    """Tests for all mode."""

    def test_keeps_order_and_drops_dirty(self):
        harness = PipelineHarness(dirty={"b"})

        result = harness.pipeline.filter(REPO, [wt("c"), wt("b"), wt("a")], CleanupMode.ALL)

        assert branches(result) == ["c", "a"]
        harness.resolver.resolve_many.assert_not_called()

    def test_force_bypasses_gate(self):
        harness = PipelineHarness(dirty={"b"})

        result = harness.pipeline.filter(REPO, [wt("c"), wt("b")], CleanupMode.ALL, force=True)

        assert branches(result) == ["c", "b"]
        harness.git.has_uncommitted_changes.assert_not_called()

    def test_empty_candidates(self):
        harness = PipelineHarness()

        assert harness.pipeline.filter(REPO, [], CleanupMode.ALL) == []


class TestGitHubMode:
    """Tests for github mode."""

    def test_cli_unavailable_raises(self):
        harness = PipelineHarness(statuses={"x": status("x", is_merged=True)})
        harness.github.is_cli_available.return_value = False

        with pytest.raises(GitHubCliUnavailableError, match="not installed or not authenticated"):
            harness.pipeline.filter(REPO, [wt("x")], CleanupMode.GITHUB)

        harness.resolver.resolve_many.assert_not_called()
        harness.github.get_pull_request_status_for_branch.assert_not_called()

    def test_non_github_remote_raises(self):
        harness = PipelineHarness()
        harness.git.is_github_repo.return_value = False

        with pytest.raises(GitHubError, match="Not a GitHub repository"):
            harness.pipeline.filter(REPO, [wt("x")], CleanupMode.GITHUB)

        harness.github.get_pull_request_status_for_branch.assert_not_called()

    def test_classifies_pull_request_states(self):
        harness = PipelineHarness(pr_statuses={
            "merged": PrStatus.MERGED,
            "closed": PrStatus.CLOSED,
            "open": PrStatus.OPEN,
            "none": PrStatus.NONE,
        })
        candidates = [wt("open"), wt("merged"), wt("none"), wt("closed")]

        result = harness.pipeline.filter(REPO, candidates, CleanupMode.GITHUB)

        assert branches(result) == ["merged", "closed"]
        assert "open - PR is still open" in harness.printed
        assert "none - no PR found" in harness.printed

    def test_lookup_failure_skips_only_that_branch(self):
        harness = PipelineHarness(pr_statuses={
            "broken": GitHubError("boom"),
            "slow": GitHubTimeoutError(["gh", "pr", "list"], 30),
            "merged": PrStatus.MERGED,
        })

        result = harness.pipeline.filter(
            REPO, [wt("broken"), wt("slow"), wt("merged")], CleanupMode.GITHUB
        )

        assert branches(result) == ["merged"]
        assert "failed to check PR status" in harness.printed
        assert "timed out" in harness.printed
        assert harness.github.get_pull_request_status_for_branch.call_count == 3

    def test_dirty_merged_pr_branch_is_kept(self):
        harness = PipelineHarness(dirty={"merged"}, pr_statuses={"merged": PrStatus.MERGED})

        assert harness.pipeline.filter(REPO, [wt("merged")], CleanupMode.GITHUB) == []


class TestInteractiveMode:
    """Tests for interactive mode."""

    def test_returns_selected_subset_in_listing_order(self):
        harness = PipelineHarness(statuses={
            "a": status("a"),
            "b": status("b", has_uncommitted_changes=True, has_unpushed_commits=True),
            "c": status("c", has_unpushed_commits=True),
        })
        harness.selector.return_value = [2, 0]

        result = harness.pipeline.filter(REPO, [wt("a"), wt("b"), wt("c")], CleanupMode.INTERACTIVE)

        assert branches(result) == ["a", "c"]

    def test_labels_carry_status_indicators(self):
        harness = PipelineHarness(statuses={
            "a": status("a"),
            "b": status("b", has_uncommitted_changes=True, has_unpushed_commits=True),
            "c": status("c", has_unpushed_commits=True),
        })

        harness.pipeline.filter(REPO, [wt("a"), wt("b"), wt("c")], CleanupMode.INTERACTIVE)

        labels = harness.selector.call_args[0][0]
        assert [label.split()[0] for label in labels] == ["✓", "!", "↑"]

    def test_dirty_selection_is_not_filtered(self):
        harness = PipelineHarness(
            statuses={"b": status("b", has_uncommitted_changes=True)},
            dirty={"b"},
        )
        harness.selector.return_value = [0]

        result = harness.pipeline.filter(REPO, [wt("b")], CleanupMode.INTERACTIVE)

        assert branches(result) == ["b"]

    def test_nothing_selected(self):
        harness = PipelineHarness()

        assert harness.pipeline.filter(REPO, [wt("a")], CleanupMode.INTERACTIVE) == []


@pytest.mark.parametrize("mode", [m for m in CleanupMode if m != CleanupMode.INTERACTIVE])
def test_dirty_worktrees_never_selected_without_force(mode):
    harness = PipelineHarness(
        statuses={"d": status("d", has_uncommitted_changes=True, is_merged=True)},
        dirty={"d"},
        pr_statuses={"d": PrStatus.MERGED},
    )

    assert harness.pipeline.filter(REPO, [wt("d")], mode) == []
