"""
Merge-state detection for feature branches.
"""

from __future__ import annotations

import logging
from typing import Optional

from .branch_catalog import DEFAULT_REMOTE, unique_branch_names
from .git_manager import GitManager
from .models import MergeCheckStrategy, PreconditionError


logger = logging.getLogger(__name__)

DEFAULT_LOG_SCAN_DEPTH = 100
LOG_SCAN_FORMAT = "%d%s"


class MergeStateResolver:
    """Decides whether a branch has already been integrated into the mainline.

    The ancestry strategy resolves the candidate's tip commit and checks whether the
    mainline is among the branches containing it. The log-scan strategy looks for the
    ticket text in the last `log_scan_depth` first-parent entries of the mainline; it
    misses merges older than that window or merges whose message lacks the ticket.

    Neither strategy changes the checkout. Unresolvable references raise
    GitRepositoryError rather than being reported as merged or unmerged.
    """

    def __init__(
        self,
        git_manager: GitManager,
        strategy: MergeCheckStrategy = MergeCheckStrategy.ANCESTRY,
        log_scan_depth: int = DEFAULT_LOG_SCAN_DEPTH,
        remote_name: str = DEFAULT_REMOTE,
    ) -> None:
        self.gm = git_manager
        self.strategy = strategy
        self.log_scan_depth = log_scan_depth
        self.remote_name = remote_name

    def is_merged(self, candidate_branch: str, mainline_branch: str, ticket: Optional[str] = None) -> bool:
        if not candidate_branch:
            raise PreconditionError("No branch was provided.")
        if not mainline_branch:
            raise PreconditionError("No mainline branch was provided.")

        logger.info(f"Check if {candidate_branch} was merged in {mainline_branch}")
        if self.strategy is MergeCheckStrategy.LOG_SCAN:
            return self._is_merged_by_log(ticket or candidate_branch, mainline_branch)
        return self._is_merged_by_ancestry(candidate_branch, mainline_branch)

    def _is_merged_by_ancestry(self, candidate_branch: str, mainline_branch: str) -> bool:
        tip = self.gm.get_commit_for_ref(candidate_branch)
        local, remote = self.gm.branches_containing_commit(tip)
        containing = unique_branch_names(local + remote, self.gm.remote_names() or [self.remote_name])
        merged = mainline_branch in containing
        logger.debug(
            f"{candidate_branch} tip {tip[:8]} is contained in {containing}; merged={merged}"
        )
        return merged

    def _is_merged_by_log(self, needle: str, mainline_branch: str) -> bool:
        entries = self.gm.raw_log(
            mainline_branch, max_entries=self.log_scan_depth, fmt=LOG_SCAN_FORMAT, first_parent=True
        )
        merged = any(needle in entry for entry in entries)
        logger.debug(
            f"Scanned {len(entries)} {mainline_branch} entries for '{needle}'; merged={merged}"
        )
        return merged
