"""
CLI-specific implementation of the prompt interface.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence
import click
from rich.console import Console
from rich.panel import Panel

from .models import (
    BRANCH_CATEGORIES,
    Job,
    SyncError,
    ValidationError,
    validate_branch_name,
    validate_submodule_selection,
    validate_ticket,
)
from .prompt_interface import UserPrompt


logger = logging.getLogger(__name__)


def _checked(validator: Callable[[str], object]) -> Callable[[str], object]:
    """Wrap a validator so click re-prompts with its message on failure."""

    def value_proc(value: str) -> object:
        try:
            return validator(value)
        except ValidationError as e:
            raise click.BadParameter(str(e))

    return value_proc


class CliPrompt(UserPrompt):
    """CLI implementation of the prompt interface using click and rich."""

    def __init__(self, console: Console = None):
        self.console = console or Console()

    def choose_job(self) -> Job:
        """Ask what the user wants to do."""
        jobs = list(Job)
        self.console.print("\n[bold]What do you want to do?[/bold]")
        for i, job in enumerate(jobs, 1):
            self.console.print(f"  {i}. {job.value}")

        choice = click.prompt(
            "Answer",
            type=click.Choice([str(i) for i in range(1, len(jobs) + 1)]),
            show_choices=False,
        )
        return jobs[int(choice) - 1]

    def choose_submodules(self, submodules: Sequence[str]) -> List[str]:
        """Ask which submodules take part in the new feature."""
        self.console.print("\n[bold]Select submodules which should be included in this feature[/bold]")
        for i, name in enumerate(submodules, 1):
            self.console.print(f"  {i}. {name}")

        def parse(value: str) -> List[str]:
            picked: List[str] = []
            for token in value.replace(",", " ").split():
                if token.isdigit() and 1 <= int(token) <= len(submodules):
                    name = submodules[int(token) - 1]
                elif token in submodules:
                    name = token
                else:
                    raise ValidationError(f"Unknown submodule: {token}")
                if name not in picked:
                    picked.append(name)
            return validate_submodule_selection(picked)

        return click.prompt(
            "Submodules (numbers or paths, comma separated)",
            default="",
            show_default=False,
            value_proc=_checked(parse),
        )

    def ask_ticket(self, ticket_hint: Optional[Callable[[str], List[str]]] = None) -> str:
        """Ask for the Jira ticket and show which root branches it matches."""
        ticket = click.prompt(
            "Enter Jira ticket number(4 digits)?", value_proc=_checked(validate_ticket)
        )
        if ticket_hint is not None:
            try:
                matches = ticket_hint(ticket)
            except SyncError as e:
                logger.debug(f"Could not compute branch hint for {ticket}: {e}")
            else:
                tip = f"Matches {len(matches)} branches" if len(matches) > 2 else ", ".join(matches)
                self.console.print(f"{ticket} => ({tip or 'no matching branch'})", style="dim")
        return ticket

    def ask_branch_name(self) -> str:
        """Ask for a new branch name following the category grammar."""
        return click.prompt(
            f"Enter valid branch name ({'|'.join(BRANCH_CATEGORIES)})",
            value_proc=_checked(validate_branch_name),
        )

    def confirm_new_branch(self, branch_name: str, root_label: str, submodules: Sequence[str]) -> bool:
        """Confirm branch creation across the root and selected submodules."""
        panel = Panel(
            f"Branch: [green]{branch_name}[/green]\n"
            f"Root: [cyan]{root_label}[/cyan]\n"
            f"Submodules: [yellow]{', '.join(submodules)}[/yellow]",
            title="New Feature Branch",
            border_style="magenta",
        )
        self.console.print(panel)
        return click.confirm(
            f"I will create branch {branch_name} for {root_label} and for submodules: "
            f"{' and '.join(submodules)}. All is correct?",
            default=False,
        )
