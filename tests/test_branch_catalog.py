"""
Tests for the branch catalog helpers.
"""

from unittest.mock import MagicMock

import pytest

from lockstep_sync.branch_catalog import (
    find_ticket_branch,
    list_branches,
    matching_branches,
    strip_remote_prefix,
    unique_branch_names,
)
from lockstep_sync.models import GitRepositoryError


def test_dedupes_and_strips_remote_prefix():
    names = unique_branch_names(["origin/develop", "develop", "origin/feature/1"])

    assert set(names) == {"develop", "feature/1"}
    assert len(names) == 2


def test_is_idempotent():
    once = unique_branch_names(["origin/develop", "develop", "origin/feature/1"])

    assert unique_branch_names(once) == once


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("remotes/origin/feature/1234/x", "feature/1234/x"),
        ("origin/feature/1234/x", "feature/1234/x"),
        ("feature/origin/x", "feature/origin/x"),
        ("upstream/develop", "upstream/develop"),
    ],
)
def test_strip_remote_prefix(raw, expected):
    assert strip_remote_prefix(raw) == expected


def test_strip_honours_configured_remotes():
    assert strip_remote_prefix("upstream/develop", ["origin", "upstream"]) == "develop"


def test_symbolic_head_is_dropped():
    assert unique_branch_names(["origin/HEAD", "develop"]) == ["develop"]


def test_first_seen_order_is_kept():
    names = unique_branch_names(["develop", "origin/feature/1234/b", "feature/1234/a"])

    assert names == ["develop", "feature/1234/b", "feature/1234/a"]
    assert find_ticket_branch(names, "1234") == "feature/1234/b"


def test_find_ticket_branch_without_match():
    assert find_ticket_branch(["develop", "feature/1111/x"], "1234") is None


def test_matching_branches():
    branches = ["develop", "feature/1234/a", "bugfix/1234-b", "feature/4321"]

    assert matching_branches(branches, "1234") == ["feature/1234/a", "bugfix/1234-b"]
    assert matching_branches(branches, "") == []


def test_list_branches_uses_repository_remotes():
    gm = MagicMock()
    gm.remote_names.return_value = ["upstream"]
    gm.list_branches.return_value = ["develop", "upstream/develop", "upstream/feature/1234/x"]

    assert list_branches(gm) == ["develop", "feature/1234/x"]


def test_list_branches_propagates_vcs_errors():
    gm = MagicMock()
    gm.remote_names.return_value = ["origin"]
    gm.list_branches.side_effect = GitRepositoryError("Failed to list branches")

    with pytest.raises(GitRepositoryError):
        list_branches(gm)


def test_list_branches_falls_back_to_given_remote():
    gm = MagicMock()
    gm.remote_names.return_value = []
    gm.list_branches.return_value = ["develop", "upstream/feature/1234/x"]

    assert list_branches(gm, "upstream") == ["develop", "feature/1234/x"]
    assert list_branches(gm) == ["develop", "upstream/feature/1234/x"]
