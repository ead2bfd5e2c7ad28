"""
Branch catalog: deduplicated branch names for one repository.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence

from .git_manager import GitManager


logger = logging.getLogger(__name__)

DEFAULT_REMOTE = "origin"
DEFAULT_REMOTES = (DEFAULT_REMOTE,)


def strip_remote_prefix(name: str, remote_names: Sequence[str] = DEFAULT_REMOTES) -> str:
    """Strip a leading 'remotes/<remote>/' or '<remote>/' from a branch name."""
    for remote in remote_names:
        for prefix in (f"remotes/{remote}/", f"{remote}/"):
            if name.startswith(prefix):
                return name[len(prefix):]
    return name


def unique_branch_names(names: Iterable[str], remote_names: Sequence[str] = DEFAULT_REMOTES) -> List[str]:
    """Strip remote prefixes and drop duplicates, keeping first-seen order."""
    seen = set()
    result: List[str] = []
    for raw in names:
        name = strip_remote_prefix(raw.strip(), remote_names)
        if not name or name == "HEAD" or name in seen:
            continue
        seen.add(name)
        result.append(name)
    return result


def list_branches(git_manager: GitManager, fallback_remote: str = DEFAULT_REMOTE) -> List[str]:
    """Compute the branch catalog of the repository behind git_manager.

    Remote prefixes are stripped for every remote the repository reports, or for
    `fallback_remote` when it reports none. VCS failures propagate unchanged.
    """
    remotes = git_manager.remote_names() or [fallback_remote]
    catalog = unique_branch_names(git_manager.list_branches(), remotes)
    logger.debug(f"Branch catalog for {git_manager.repo_path}: {catalog}")
    return catalog


def find_ticket_branch(branches: Iterable[str], ticket: str) -> Optional[str]:
    """Return the first branch containing the ticket identifier, if any."""
    for name in branches:
        if ticket in name:
            return name
    return None


def matching_branches(branches: Iterable[str], ticket: str) -> List[str]:
    return [name for name in branches if ticket and ticket in name]
