"""
Per-repository branch synchronization.
"""

from __future__ import annotations

import logging

from .branch_catalog import DEFAULT_REMOTE, find_ticket_branch, list_branches
from .config import DEFAULT_MAINLINE
from .git_manager import GitManager
from .merge_resolver import DEFAULT_LOG_SCAN_DEPTH, MergeStateResolver
from .models import MergeCheckStrategy, NoUpstreamTrackingError, RepositoryHandle, SyncDecision


logger = logging.getLogger(__name__)


class RepositorySynchronizer:
    """Brings one repository to the right branch for a ticket.

    The repository ends on the mainline when no branch matches the ticket or the
    matching branch is already merged, and on the matching branch otherwise. There is
    no rollback: whatever state a failing call reached is left in place.
    """

    def __init__(
        self,
        merge_strategy: MergeCheckStrategy = MergeCheckStrategy.ANCESTRY,
        log_scan_depth: int = DEFAULT_LOG_SCAN_DEPTH,
        remote_name: str = DEFAULT_REMOTE,
    ) -> None:
        self.merge_strategy = merge_strategy
        self.log_scan_depth = log_scan_depth
        self.remote_name = remote_name

    def sync(
        self,
        repo: RepositoryHandle,
        ticket: str,
        mainline_branch: str = DEFAULT_MAINLINE,
        skip_merged_check: bool = False,
    ) -> SyncDecision:
        gm = GitManager(repo.path)
        tag = f"[{repo.label}]"

        logger.info(f"{tag} Checkout to {mainline_branch}")
        gm.checkout_branch(mainline_branch)
        logger.info(f"{tag} Pull {mainline_branch}")
        pull_if_tracked(gm, tag)

        target = find_ticket_branch(list_branches(gm, self.remote_name), ticket)
        if not target:
            logger.info(f"{tag} FB wasn't found, stay on {mainline_branch}")
            return SyncDecision.STAY_ON_MAINLINE

        on_target = False
        if not skip_merged_check:
            # Ancestry needs a local ref for the candidate, so check it out first.
            logger.info(f"{tag} Checkout to {target}")
            gm.checkout_branch(target)
            on_target = True
            resolver = MergeStateResolver(
                gm, self.merge_strategy, self.log_scan_depth, self.remote_name
            )
            if resolver.is_merged(target, mainline_branch, ticket=ticket):
                logger.info(
                    f"{tag} Seems like {target} is merged to {mainline_branch}, stay on {mainline_branch}"
                )
                if self.merge_strategy is MergeCheckStrategy.ANCESTRY:
                    logger.info(
                        f"{tag} A branch without commits of its own also counts as merged; "
                        f"use --skipMerged to switch to {target} anyway"
                    )
                gm.checkout_branch(mainline_branch)
                return SyncDecision.STAY_ON_MAINLINE
            logger.info(f"{tag} {target} wasn't merged to {mainline_branch} yet.")

        if not on_target:
            logger.info(f"{tag} Checkout to {target}")
            gm.checkout_branch(target)

        logger.info(f"{tag} Pull {target}")
        if not pull_if_tracked(gm, tag):
            return SyncDecision.SWITCH_TO_FEATURE_NO_TRACKING
        return SyncDecision.SWITCH_TO_FEATURE


def pull_if_tracked(gm: GitManager, tag: str) -> bool:
    """Pull the current branch; False when it has no upstream to pull from."""
    try:
        gm.pull()
    except NoUpstreamTrackingError:
        logger.warning(f"{tag} There is no tracking information for the current branch")
        return False
    return True
