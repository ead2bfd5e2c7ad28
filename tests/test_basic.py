"""
Basic tests for the branch synchronization tool.
"""

import pytest
from lockstep_sync import __version__
from lockstep_sync import (
    SyncOrchestrator, RepositorySynchronizer, MergeStateResolver, GitManager,
    SyncConfig, CreationPlan, MergeCheckStrategy, RepositoryHandle, SyncDecision,
    SyncError, SyncIntent
)


def test_version_format():
    assert isinstance(__version__, str)
    assert __version__ != ""

def test_version_matches_semver():
    import re
    semver_pattern = r"^\d+\.\d+\.\d+$"
    assert re.match(semver_pattern, __version__)

def test_import():
    """Test that the package can be imported."""
    import lockstep_sync
    assert lockstep_sync is not None


def test_package_structure():
    """Test package structure and __all__ exports."""
    import lockstep_sync

    expected_exports = [
        "SyncOrchestrator",
        "RepositorySynchronizer",
        "MergeStateResolver",
        "GitManager",
        "SyncConfig",
        "CreationPlan",
        "MergeCheckStrategy",
        "RepositoryHandle",
        "SyncDecision",
        "SyncError",
        "SyncIntent",
    ]

    for export in expected_exports:
        assert export in lockstep_sync.__all__
        assert hasattr(lockstep_sync, export)


def test_default_config():
    config = SyncConfig()

    assert config.mainline_branch == "develop"
    assert config.submodules == ("public", "TSHMI_Core")
    assert config.merge_strategy is MergeCheckStrategy.ANCESTRY
    assert config.skip_merged_check is False


@pytest.mark.parametrize("value", ["ancestry", "log-scan"])
def test_merge_strategy_values(value):
    assert MergeCheckStrategy(value).value == value
