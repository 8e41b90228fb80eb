"""Tests for branch module."""

import pytest

from git_support_utils.branch import (
    all_branches,
    commit_branch,
    filter_branches,
    head_branch,
    resolve_branch,
    sanitize_branch,
)
from git_support_utils.errors import FailedShellCommand, UnknownBranch
from git_support_utils.refs import parse_ref_name

COMMIT = "c" * 40
OTHER = "d" * 40


def ref(name, points_to=OTHER):
    return parse_ref_name(name, points_to)


class TestSanitizeBranch:
    """Tests for sanitize_branch function."""

    def test_strips_local_prefix(self):
        assert sanitize_branch("refs/heads/feature/login") == "feature/login"

    def test_strips_origin_prefix(self):
        assert sanitize_branch("refs/remotes/origin/develop") == "develop"

    def test_keeps_other_remote_name(self):
        assert sanitize_branch("refs/remotes/upstream/develop") == "upstream/develop"

    def test_shortens_pull_request_head(self):
        assert sanitize_branch("refs/pull/42/head") == "pull/42"

    def test_keeps_plain_names(self):
        assert sanitize_branch("main") == "main"

    def test_strips_only_one_prefix(self):
        assert sanitize_branch("refs/heads/heads/x") == "heads/x"

    def test_none_raises(self):
        with pytest.raises(UnknownBranch):
            sanitize_branch(None)

    def test_empty_raises(self):
        with pytest.raises(UnknownBranch):
            sanitize_branch("")

    def test_nested_refs_prefix_raises(self):
        with pytest.raises(UnknownBranch):
            sanitize_branch("refs/refs/heads/main")


class TestResolveBranch:
    """Tests for resolve_branch function."""

    def test_single_branch(self):
        refs = [ref("refs/heads/main", COMMIT)]
        assert resolve_branch(refs, COMMIT, "main") == "main"

    def test_tip_beats_ancestor_membership(self):
        refs = [ref("refs/heads/feature", COMMIT), ref("refs/heads/main")]
        assert resolve_branch(refs, COMMIT, "trunk") == "feature"

    def test_abbreviated_hash_matches_tip(self):
        refs = [ref("refs/heads/aaa-later"), ref("refs/heads/feature", COMMIT)]
        assert resolve_branch(refs, COMMIT[:10], "trunk") == "feature"

    def test_head_branch_wins(self):
        refs = [ref("refs/heads/feature", COMMIT), ref("refs/heads/main")]
        assert resolve_branch(refs, COMMIT, "main") == "main"

    def test_origin_head_pointer_wins(self):
        refs = [ref("refs/remotes/origin/feature", COMMIT), ref("refs/remotes/origin/HEAD")]
        assert resolve_branch(refs, COMMIT, "develop") == "develop"

    def test_tip_beats_prioritized_name(self):
        refs = [ref("refs/heads/master"), ref("refs/heads/feature", COMMIT)]
        assert resolve_branch(refs, COMMIT, "trunk") == "feature"

    def test_prioritized_names_in_order(self):
        refs = [
            ref("refs/heads/feature-x"),
            ref("refs/heads/release-1"),
            ref("refs/heads/develop"),
        ]
        assert resolve_branch(refs, COMMIT, "trunk") == "develop"

    def test_prioritized_among_tips(self):
        refs = [
            ref("refs/heads/feature", COMMIT),
            ref("refs/heads/release/2.0", COMMIT),
            ref("refs/heads/master"),
        ]
        assert resolve_branch(refs, COMMIT, "trunk") == "release/2.0"

    def test_custom_priority(self):
        refs = [ref("refs/heads/develop"), ref("refs/heads/stable")]
        assert resolve_branch(refs, COMMIT, "trunk", prioritized=["stable"]) == "stable"

    def test_first_candidate_without_priority_match(self):
        refs = [ref("refs/heads/zeta"), ref("refs/heads/alpha")]
        assert resolve_branch(refs, COMMIT, "trunk") == "zeta"

    def test_remote_branches_are_sanitized(self):
        refs = [ref("refs/remotes/origin/feature", COMMIT)]
        assert resolve_branch(refs, COMMIT, "main") == "feature"

    def test_pull_requests_ignored_when_branches_exist(self):
        refs = [ref("refs/pull/42/head", COMMIT), ref("refs/heads/feature")]
        assert resolve_branch(refs, COMMIT, "main") == "feature"

    def test_pull_request_fallback_picks_newest_head(self):
        refs = [ref("refs/pull/42/head"), ref("refs/pull/7/merge"), ref("refs/pull/8/head")]
        assert resolve_branch(refs, COMMIT, "main") == "pull/42"

    def test_pull_request_fallback_skips_merge_refs(self):
        refs = [ref("refs/pull/42/head"), ref("refs/pull/99/merge")]
        assert resolve_branch(refs, COMMIT, "main") == "pull/42"

    def test_only_merge_refs_raises(self):
        with pytest.raises(UnknownBranch):
            resolve_branch([ref("refs/pull/7/merge")], COMMIT, "main")

    def test_no_candidates_raises(self):
        with pytest.raises(UnknownBranch):
            resolve_branch([], COMMIT, "main")

    @pytest.mark.parametrize(
        "name",
        [
            "refs/heads/main",
            "refs/heads/refs-cleanup",
            "refs/remotes/origin/feature",
            "refs/remotes/fork/fix",
            "refs/pull/3/head",
        ],
    )
    def test_never_returns_refs_prefix(self, name):
        assert not resolve_branch([ref(name, COMMIT)], COMMIT, "trunk").startswith("refs/")


class TestCommitBranch:
    """Tests for commit_branch function."""

    def test_branch_only_commit(self, branch_repo):
        assert commit_branch(branch_repo.path, branch_repo.tip) == "different-branch"

    def test_abbreviated_hash(self, branch_repo, git, make_commit):
        git(branch_repo.path, "checkout", "-b", "aaa-later", "different-branch")
        make_commit(branch_repo.path, "later commit", "2024-01-03T10:00:00+00:00")
        git(branch_repo.path, "checkout", "main")
        assert commit_branch(branch_repo.path, branch_repo.tip[:10]) == "different-branch"

    def test_head_owns_shared_commit(self, branch_repo):
        assert commit_branch(branch_repo.path, branch_repo.base) == "main"

    def test_shared_commit_when_branch_is_checked_out(self, branch_repo, git):
        git(branch_repo.path, "checkout", "different-branch")
        assert commit_branch(branch_repo.path, branch_repo.base) == "different-branch"

    def test_default_priority(self, branch_repo, git):
        git(branch_repo.path, "branch", "hotfix", branch_repo.tip)
        git(branch_repo.path, "branch", "release-x", branch_repo.tip)
        assert commit_branch(branch_repo.path, branch_repo.tip) == "release-x"

    def test_configured_priority(self, branch_repo, git):
        git(branch_repo.path, "branch", "hotfix", branch_repo.tip)
        git(branch_repo.path, "branch", "release-x", branch_repo.tip)
        git(branch_repo.path, "config", "support.branches.priority", "hotfix")
        assert commit_branch(branch_repo.path, branch_repo.tip) == "hotfix"

    def test_detached_head(self, branch_repo, git):
        git(branch_repo.path, "checkout", "--detach", branch_repo.base)
        # The first ref stands in for the head branch
        assert commit_branch(branch_repo.path, branch_repo.base) == "different-branch"

    def test_pull_request_commit(self, pull_request_repo):
        assert commit_branch(pull_request_repo.path, pull_request_repo.pr5[0]) == "pull/5"

    def test_mirror(self, branch_repo, mirror_of):
        mirror = mirror_of(branch_repo.path)
        assert commit_branch(mirror, branch_repo.tip) == "different-branch"
        assert commit_branch(mirror, branch_repo.base) == "main"

    def test_not_a_repo_raises(self, not_a_repo):
        with pytest.raises(FailedShellCommand):
            commit_branch(not_a_repo, COMMIT)

    def test_missing_path_raises(self, missing_path):
        with pytest.raises(FailedShellCommand):
            commit_branch(missing_path, COMMIT)


class TestHeadBranch:
    """Tests for head_branch function."""

    def test_checked_out_branch(self, branch_repo):
        assert head_branch(branch_repo.path) == "main"

    def test_detached_uses_first_ref(self, branch_repo, git):
        git(branch_repo.path, "checkout", "--detach", branch_repo.tip)
        assert head_branch(branch_repo.path) == "different-branch"


class TestAllBranches:
    """Tests for all_branches function."""

    def test_lists_branches(self, branch_repo):
        assert all_branches(branch_repo.path) == ["different-branch", "main"]

    def test_skips_detached_entry(self, branch_repo, git):
        git(branch_repo.path, "checkout", "--detach", branch_repo.base)
        assert all_branches(branch_repo.path) == ["different-branch", "main"]

    def test_includes_remote_branches(self, branch_repo, tmp_path, git):
        clone = tmp_path / "clone"
        git(tmp_path, "clone", str(branch_repo.path), str(clone))
        branches = all_branches(clone)
        assert "main" in branches
        assert "remotes/origin/different-branch" in branches
        assert "remotes/origin/HEAD" in branches
        assert not any("->" in branch for branch in branches)

    def test_weird_branch_name(self, branch_repo, git):
        git(branch_repo.path, "branch", "#w@eird-branch")
        assert "#w@eird-branch" in all_branches(branch_repo.path)

    def test_exclude_patterns(self, branch_repo):
        assert all_branches(branch_repo.path, exclude=["different-*"]) == ["main"]

    def test_configured_exclude_patterns(self, branch_repo, git):
        git(branch_repo.path, "config", "support.branches.exclude", "different-*")
        assert all_branches(branch_repo.path) == ["main"]

    def test_missing_path_raises(self, missing_path):
        with pytest.raises(FailedShellCommand):
            all_branches(missing_path)


class TestFilterBranches:
    """Tests for filter_branches function."""

    def test_no_patterns(self):
        assert filter_branches(["a", "b"], []) == ["a", "b"]

    def test_wildcards(self):
        branches = ["main", "archive/old", "team/wip", "team/feature"]
        assert filter_branches(branches, ["archive/*", "*/wip"]) == ["main", "team/feature"]

    def test_negation(self):
        branches = ["archive/old", "archive/keep"]
        assert filter_branches(branches, ["archive/*", "!archive/keep"]) == ["archive/keep"]
