"""
Data models for the branch synchronization tool.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional


BRANCH_CATEGORIES = (
    "feature",
    "bugfix",
    "improvement",
    "library",
    "prerelease",
    "release",
    "hotfix",
)

TICKET_PATTERN = re.compile(r"^\d{4}$")
BRANCH_NAME_PATTERN = re.compile(
    r"^(" + "|".join(BRANCH_CATEGORIES) + r")/[/a-zA-Z0-9._-]+$"
)


@dataclass(frozen=True)
class RepositoryHandle:
    """A working directory bound to one repository (root or submodule)."""

    path: Path
    label: str
    is_submodule: bool = False

    def __post_init__(self) -> None:
        """Ensure path is absolute."""
        object.__setattr__(self, "path", Path(self.path).resolve())

    @property
    def relative_path(self) -> str:
        """Get relative path from current working directory."""
        try:
            return str(self.path.relative_to(Path.cwd()))
        except ValueError:
            return str(self.path)


class SyncDecision(Enum):
    """Outcome of synchronizing one repository for a ticket."""

    STAY_ON_MAINLINE = "stay_on_mainline"
    SWITCH_TO_FEATURE = "switch_to_feature"
    SWITCH_TO_FEATURE_NO_TRACKING = "switch_to_feature_no_tracking"

    @property
    def on_feature(self) -> bool:
        return self is not SyncDecision.STAY_ON_MAINLINE


class MergeCheckStrategy(Enum):
    """How the merge-state resolver decides whether a branch is merged."""

    ANCESTRY = "ancestry"
    LOG_SCAN = "log-scan"


class Job(Enum):
    """Top-level actions offered to the user."""

    CREATE_FEATURE = "Create FB"
    UPDATE_FEATURE = "Update FB"


@dataclass
class SyncIntent:
    """Validated answers collected by the interaction layer."""

    job: Job
    submodules: List[str] = field(default_factory=list)
    jira_ticket: Optional[str] = None
    branch_name: Optional[str] = None
    submit_new_branch: bool = False


@dataclass
class CreationPlan:
    """Repositories that will each receive a new branch with the same name."""

    branch_name: str
    repositories: List[RepositoryHandle] = field(default_factory=list)

    @property
    def labels(self) -> List[str]:
        return [repo.label for repo in self.repositories]


class SyncError(Exception):
    """Base exception for synchronization operations."""

    pass


class GitRepositoryError(SyncError):
    """Exception raised for Git repository related errors."""

    pass


class NoUpstreamTrackingError(GitRepositoryError):
    """Raised when a pull fails because the branch has no tracking information."""

    pass


class PreconditionError(SyncError):
    """Raised when a required argument is missing."""

    pass


class ValidationError(SyncError):
    """Raised when user input does not match the expected grammar."""

    pass


class RepositorySyncError(SyncError):
    """A fatal error tied to one repository in a multi-repository run."""

    def __init__(self, repo: RepositoryHandle, message: str) -> None:
        super().__init__(f"[{repo.label}] {message}")
        self.repo = repo


def validate_ticket(ticket: str) -> str:
    """Return the ticket if it is exactly four decimal digits."""
    value = (ticket or "").strip()
    if not TICKET_PATTERN.match(value):
        raise ValidationError("Wrong Jira ticket, must exact 4 numbers")
    return value


def validate_branch_name(branch_name: str) -> str:
    """Return the branch name if it matches `{category}/{rest}`."""
    value = (branch_name or "").strip()
    if not BRANCH_NAME_PATTERN.match(value):
        raise ValidationError(
            "Enter valid branch name (e.g., feature/TSHMI-1111/your-awesome-feature)"
        )
    return value


def validate_submodule_selection(submodules: Iterable[str]) -> List[str]:
    selected = [s for s in submodules if s]
    if not selected:
        raise ValidationError("You must choose at least one submodule.")
    return selected
