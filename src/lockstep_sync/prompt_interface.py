"""
UI-agnostic prompt interface for collecting the user's intent.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Sequence

from .models import (
    Job,
    SyncIntent,
    validate_branch_name,
    validate_submodule_selection,
    validate_ticket,
)


class UserPrompt(ABC):
    """Abstract interface for prompting users for decisions."""

    @abstractmethod
    def choose_job(self) -> Job:
        """Ask whether to create a new feature branch or update to an existing one."""
        pass

    @abstractmethod
    def choose_submodules(self, submodules: Sequence[str]) -> List[str]:
        """
        Ask which submodules should receive the new branch.

        Args:
            submodules: Configured submodule paths, in configured order

        Returns:
            The selected subset (must not be empty)
        """
        pass

    @abstractmethod
    def ask_ticket(self, ticket_hint: Optional[Callable[[str], List[str]]] = None) -> str:
        """
        Ask for the 4-digit ticket number.

        Args:
            ticket_hint: Optional callback returning root branches matching a ticket,
                shown to the user as feedback

        Returns:
            A ticket accepted by validate_ticket
        """
        pass

    @abstractmethod
    def ask_branch_name(self) -> str:
        """Ask for a new branch name accepted by validate_branch_name."""
        pass

    @abstractmethod
    def confirm_new_branch(self, branch_name: str, root_label: str, submodules: Sequence[str]) -> bool:
        """Ask for final confirmation before creating branches."""
        pass


def collect_intent(
    prompt: UserPrompt,
    submodules: Sequence[str],
    root_label: str,
    ticket_hint: Optional[Callable[[str], List[str]]] = None,
) -> SyncIntent:
    """Ask only the questions relevant to the chosen job and validate the answers.

    Raises ValidationError when the prompt returns an answer outside the grammar;
    interactive prompts are expected to re-ask instead of returning one.
    """
    job = prompt.choose_job()
    if job is Job.UPDATE_FEATURE:
        ticket = validate_ticket(prompt.ask_ticket(ticket_hint))
        return SyncIntent(job=job, jira_ticket=ticket)

    selected = validate_submodule_selection(prompt.choose_submodules(submodules))
    branch_name = validate_branch_name(prompt.ask_branch_name())
    confirmed = prompt.confirm_new_branch(branch_name, root_label, selected)
    return SyncIntent(
        job=job,
        submodules=selected,
        branch_name=branch_name,
        submit_new_branch=bool(confirmed),
    )
