"""
Lockstep Sync - keep a root repository and its submodules on the same feature branch.

Given a ticket number, every configured repository is switched to the ticket's feature
branch when it exists and is not yet merged, or left on the mainline otherwise. New
feature branches can be created across the root and a chosen set of submodules.
"""

__version__ = "0.1.0"

from .orchestrator import SyncOrchestrator
from .synchronizer import RepositorySynchronizer
from .merge_resolver import MergeStateResolver
from .git_manager import GitManager
from .config import SyncConfig
from .models import (
    CreationPlan,
    MergeCheckStrategy,
    RepositoryHandle,
    SyncDecision,
    SyncError,
    SyncIntent,
)

__all__ = [
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
