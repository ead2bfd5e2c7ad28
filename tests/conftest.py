"""
Shared test doubles for GitManager.
"""

from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

import pytest

from lockstep_sync.branch_catalog import unique_branch_names
from lockstep_sync.models import GitRepositoryError, NoUpstreamTrackingError


class FakeGitManager:
    """In-memory stand-in for GitManager that records every call.

    `branches` are raw names as git would list them (e.g. 'origin/feature/x').
    A branch listed in `merged` has its tip contained in 'develop'.
    """

    def __init__(
        self,
        branches: Iterable[str] = ("develop",),
        merged: Iterable[str] = (),
        untracked: Iterable[str] = (),
        failing_pulls: Iterable[str] = (),
        head: str = "develop",
        repo_path: Optional[Path] = None,
        remotes: Iterable[str] = ("origin",),
    ) -> None:
        self.branches = list(branches)
        self.remotes = list(remotes)
        self.merged = set(merged)
        self.untracked = set(untracked)
        self.failing_pulls = set(failing_pulls)
        self.head = head
        self.repo_path = repo_path or Path("/fake")
        self.created: List[str] = []
        self.calls: List[Tuple[str, ...]] = []

    def _known(self) -> List[str]:
        # git checkout also accepts the short name of a remote-tracking branch
        remotes = self.remotes or ["origin", "upstream"]
        return unique_branch_names(self.branches, remotes) + self.created

    def remote_names(self) -> List[str]:
        return list(self.remotes)

    def get_current_branch(self) -> str:
        return self.head

    def checkout_branch(self, branch_name: str) -> None:
        self.calls.append(("checkout", branch_name))
        if branch_name not in self._known():
            raise GitRepositoryError(f"Failed to checkout branch {branch_name}")
        self.head = branch_name

    def create_local_branch(self, branch_name: str) -> None:
        self.calls.append(("create", branch_name))
        if branch_name in self._known():
            raise GitRepositoryError(f"a branch named '{branch_name}' already exists")
        self.created.append(branch_name)
        self.head = branch_name

    def pull(self, remote_name: Optional[str] = None, branch_name: Optional[str] = None) -> None:
        self.calls.append(("pull", self.head))
        if self.head in self.failing_pulls:
            raise GitRepositoryError("Failed to pull: network unreachable")
        if self.head in self.untracked:
            raise NoUpstreamTrackingError("There is no tracking information for the current branch")

    def list_branches(self) -> List[str]:
        self.calls.append(("list_branches",))
        return list(self.branches)

    def get_commit_for_ref(self, ref: str) -> str:
        self.calls.append(("rev_parse", ref))
        if ref not in self._known():
            raise GitRepositoryError(f"Failed to resolve {ref}")
        return f"sha-{ref}"

    def branches_containing_commit(self, commit_sha: str):
        self.calls.append(("contains", commit_sha))
        branch = commit_sha[len("sha-"):]
        local = [branch]
        remote = [f"origin/{branch}"]
        if branch in self.merged:
            local.append("develop")
            remote.append("origin/develop")
        return local, remote

    def raw_log(self, branch: str, max_entries: int = 100, fmt: str = "%d%s", first_parent: bool = True):
        self.calls.append(("log", branch))
        return [f"Merge branch '{b}' into {branch}" for b in sorted(self.merged)]

    @property
    def checkouts(self) -> List[str]:
        return [c[1] for c in self.calls if c[0] == "checkout"]


@pytest.fixture()
def fake_git():
    """Factory for FakeGitManager instances."""
    return FakeGitManager


@pytest.fixture()
def repo_layout(tmp_path: Path) -> Dict[str, Path]:
    root = tmp_path / "vdp"
    public = root / "public"
    core = root / "TSHMI_Core"
    for p in (root, public, core):
        p.mkdir(parents=True)
    return {"root": root, "public": public, "TSHMI_Core": core}


@pytest.fixture(autouse=True)
def isolated_log(tmp_path: Path, monkeypatch):
    """Keep CLI log files out of the user's home directory."""
    monkeypatch.setenv("LOCKSTEP_SYNC_LOG", str(tmp_path / "logs" / "lockstep-sync.log"))
