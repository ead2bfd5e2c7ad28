"""
Multi-repository orchestration for the update and create workflows.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from .branch_catalog import list_branches, matching_branches
from .config import SyncConfig
from .git_manager import GitManager
from .models import (
    CreationPlan,
    Job,
    RepositoryHandle,
    RepositorySyncError,
    SyncDecision,
    SyncError,
    SyncIntent,
    validate_branch_name,
    validate_ticket,
)
from .synchronizer import RepositorySynchronizer, pull_if_tracked


logger = logging.getLogger(__name__)


class SyncOrchestrator:
    """Sequences repository operations across the root and its configured submodules."""

    def __init__(self, config: Optional[SyncConfig] = None) -> None:
        """Initialize the orchestrator."""
        self.config = config or SyncConfig()
        self.synchronizer = RepositorySynchronizer(
            self.config.merge_strategy, self.config.log_scan_depth, self.config.remote_name
        )
        logger.info(
            f"Initialized sync orchestrator for {self.config.root.label} "
            f"(submodules: {', '.join(self.config.submodules) or 'none'})"
        )

    def run(self, intent: SyncIntent) -> Optional[List[SyncDecision]]:
        """Dispatch a collected intent to the matching workflow."""
        if intent.job is Job.UPDATE_FEATURE:
            return self.run_update(intent.jira_ticket)
        if intent.job is Job.CREATE_FEATURE:
            targets = self.config.repositories(intent.submodules)[1:]
            self.run_create(intent.branch_name, targets, intent.submit_new_branch)
            return None
        raise SyncError(f"Unknown job: {intent.job}")

    def run_update(
        self, ticket: str, repositories: Optional[Sequence[RepositoryHandle]] = None
    ) -> List[SyncDecision]:
        """Synchronize every repository to the ticket's branch state, root first.

        Fail-fast: the first fatal error stops the run and repositories already
        processed keep whatever branch they reached.
        """
        ticket = validate_ticket(ticket)
        repos = list(repositories) if repositories is not None else self.config.repositories()
        logger.info(f"Updating {len(repos)} repositories for ticket {ticket}")

        decisions: List[SyncDecision] = []
        for repo in repos:
            logger.info(f"Syncing {repo.label}")
            try:
                decision = self.synchronizer.sync(
                    repo,
                    ticket,
                    mainline_branch=self.config.mainline_branch,
                    skip_merged_check=self.config.skip_merged_check,
                )
            except RepositorySyncError:
                raise
            except SyncError as e:
                logger.error(f"Sync failed for {repo.label}: {e}")
                raise RepositorySyncError(repo, str(e)) from e
            logger.info(f"[{repo.label}] {decision.value}")
            decisions.append(decision)
        return decisions

    def build_creation_plan(
        self, branch_name: str, target_repositories: Sequence[RepositoryHandle]
    ) -> CreationPlan:
        """Root first, then the targets in configured submodule order."""
        root = self.config.root
        order = {name: i for i, name in enumerate(self.config.submodules)}
        others = sorted(
            (r for r in target_repositories if r.path != root.path),
            key=lambda r: order.get(r.label, len(order)),
        )
        return CreationPlan(branch_name=branch_name, repositories=[root, *others])

    def run_create(
        self,
        branch_name: str,
        target_repositories: Sequence[RepositoryHandle],
        confirmed: bool,
    ) -> None:
        """Create `branch_name` from the mainline in the root and each target.

        Nothing is touched when `confirmed` is False. Branches created before a
        failing repository are not removed.
        """
        if not confirmed:
            logger.info("Aborting: new branch was not confirmed")
            return

        branch_name = validate_branch_name(branch_name)
        plan = self.build_creation_plan(branch_name, target_repositories)
        mainline = self.config.mainline_branch
        logger.info(f"Creating {branch_name} in {', '.join(plan.labels)}")

        for repo in plan.repositories:
            tag = f"[{repo.label}]"
            try:
                gm = GitManager(repo.path)
                logger.info(f"{tag} Checkout to {mainline}")
                gm.checkout_branch(mainline)
                logger.info(f"{tag} Pull {mainline}")
                pull_if_tracked(gm, tag)
                logger.info(f"{tag} Creating branch {branch_name}")
                gm.create_local_branch(branch_name)
            except SyncError as e:
                logger.error(f"Branch creation failed for {repo.label}: {e}")
                raise RepositorySyncError(repo, str(e)) from e

    def ticket_matches(self, ticket: str) -> List[str]:
        """Root branches containing the ticket (read-only; used for prompt hints)."""
        branches = list_branches(GitManager(self.config.root_path), self.config.remote_name)
        return matching_branches(branches, ticket)

    def get_repository_status(self) -> Dict[str, Dict[str, str]]:
        """Get status information for all configured repositories."""
        status: Dict[str, Dict[str, str]] = {}
        handles = [self.config.root] + [
            RepositoryHandle(path=self.config.root_path / s, label=s, is_submodule=True)
            for s in self.config.submodules
        ]
        for repo in handles:
            try:
                status[repo.label] = {
                    "path": repo.relative_path,
                    "current_branch": GitManager(repo.path).get_current_branch(),
                    "is_submodule": str(repo.is_submodule),
                }
            except SyncError as e:
                status[repo.label] = {"path": repo.relative_path, "error": str(e)}
        return status
