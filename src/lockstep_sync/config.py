"""
Run configuration: which repositories take part and how they are synchronized.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from .branch_catalog import DEFAULT_REMOTE
from .merge_resolver import DEFAULT_LOG_SCAN_DEPTH
from .models import MergeCheckStrategy, RepositoryHandle, SyncError


DEFAULT_SUBMODULES = ("public", "TSHMI_Core")
DEFAULT_MAINLINE = "develop"


@dataclass
class SyncConfig:
    """Plain configuration passed through the orchestrator and synchronizer."""

    root_path: Path = field(default_factory=Path.cwd)
    submodules: Sequence[str] = DEFAULT_SUBMODULES
    mainline_branch: str = DEFAULT_MAINLINE
    remote_name: str = DEFAULT_REMOTE
    skip_merged_check: bool = False
    merge_strategy: MergeCheckStrategy = MergeCheckStrategy.ANCESTRY
    log_scan_depth: int = DEFAULT_LOG_SCAN_DEPTH

    def __post_init__(self) -> None:
        self.root_path = Path(self.root_path).resolve()
        self.submodules = tuple(self.submodules)

    @property
    def root(self) -> RepositoryHandle:
        return RepositoryHandle(path=self.root_path, label=self.root_path.name)

    def submodule_handle(self, submodule: str) -> RepositoryHandle:
        """Build the handle for a configured submodule (relative path or label)."""
        if submodule not in self.submodules:
            raise SyncError(
                f"Unknown submodule '{submodule}'. Configured: {', '.join(self.submodules)}"
            )
        path = self.root_path / submodule
        if not path.is_dir():
            raise SyncError(f"Submodule directory does not exist: {path}")
        return RepositoryHandle(path=path, label=submodule, is_submodule=True)

    def repositories(self, submodules: Optional[Sequence[str]] = None) -> List[RepositoryHandle]:
        """Root first, then the given (or all configured) submodules in configured order."""
        wanted = self.submodules if submodules is None else [
            s for s in self.submodules if s in set(submodules)
        ]
        unknown = set(submodules or ()) - set(self.submodules)
        if unknown:
            raise SyncError(
                f"Unknown submodule(s): {', '.join(sorted(unknown))}. "
                f"Configured: {', '.join(self.submodules)}"
            )
        return [self.root] + [self.submodule_handle(s) for s in wanted]
