"""
Command-line interface for the branch synchronization tool.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
import os
import sys
from pathlib import Path
from typing import List, Optional, Tuple
from datetime import datetime

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .cli_prompt import CliPrompt
from .config import DEFAULT_MAINLINE, DEFAULT_SUBMODULES, SyncConfig
from .models import Job, MergeCheckStrategy, RepositoryHandle, SyncDecision, SyncError, validate_branch_name
from .orchestrator import SyncOrchestrator
from .prompt_interface import collect_intent
from . import __version__ as PACKAGE_VERSION


console = Console()
logger = logging.getLogger(__name__)

DECISION_LABELS = {
    SyncDecision.STAY_ON_MAINLINE: "🟦 Stay on mainline",
    SyncDecision.SWITCH_TO_FEATURE: "✅ Switched to FB",
    SyncDecision.SWITCH_TO_FEATURE_NO_TRACKING: "⚠️ Switched to FB (no tracking)",
}


def _print_version(ctx, param, value):
    """Eager option callback to print version and exit."""
    if not value or ctx.resilient_parsing:
        return
    click.echo(f"lockstep-sync {PACKAGE_VERSION}")
    ctx.exit()


def _default_log_path() -> Path:
    """Determine default log file path (~/.lockstep-sync/lockstep-sync.log)."""
    env_path = os.environ.get("LOCKSTEP_SYNC_LOG")
    if env_path:
        p = Path(env_path).expanduser()
        p.parent.mkdir(parents=True, exist_ok=True)
        return p
    base = Path.home() / ".lockstep-sync"
    base.mkdir(parents=True, exist_ok=True)
    return base / "lockstep-sync.log"


def setup_logging(verbose: bool = False, console_level: Optional[str] = None, log_file: Optional[Path] = None) -> Path:
    """Setup logging with a per-run file plus a rotating aggregate file.

    - Per-run log file: <stem>-YYYYMMDD_HHMMSS.log
    - Aggregate log: <stem>.log (rotated)
    - Console logging disabled by default; enable via --verbose or --log-level
    Returns the aggregate log path.
    """
    aggregate_path = Path(log_file) if log_file else _default_log_path()
    base_dir = aggregate_path.parent
    base_stem = aggregate_path.stem or "lockstep-sync"
    base_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    per_run_path = base_dir / f"{base_stem}-{timestamp}.log"

    root = logging.getLogger()
    # Clear existing handlers to avoid duplication in tests / repeated invocations
    root.handlers.clear()
    root.setLevel(logging.DEBUG)

    file_fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    run_file_handler = logging.FileHandler(str(per_run_path), encoding="utf-8")
    run_file_handler.setLevel(logging.DEBUG)
    run_file_handler.setFormatter(file_fmt)
    root.addHandler(run_file_handler)

    aggregate_handler = RotatingFileHandler(
        str(aggregate_path), maxBytes=1_000_000, backupCount=3, encoding="utf-8"
    )
    aggregate_handler.setLevel(logging.DEBUG)
    aggregate_handler.setFormatter(file_fmt)
    root.addHandler(aggregate_handler)

    if verbose or console_level:
        level_map = {
            "debug": logging.DEBUG,
            "info": logging.INFO,
            "warning": logging.WARNING,
            "error": logging.ERROR,
        }
        console_handler = RichHandler(console=console, rich_tracebacks=True)
        console_handler.setLevel(level_map.get((console_level or "info").lower(), logging.INFO))
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(console_handler)

    return aggregate_path


def _maybe_print_log_notice(verbose: bool, console_level: Optional[str], log_path: Path) -> None:
    """Inform user about logging destination and how to enable console logs."""
    if verbose or console_level:
        return
    console.print(f"[dim]Logs are written to {log_path}. Use -v or --log-level to see progress on the console.[/dim]")


@click.group(invoke_without_command=True)
@click.option(
    "--version",
    "-V",
    is_flag=True,
    callback=_print_version,
    expose_value=False,
    is_eager=True,
    help="Show version and exit.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose console logging (INFO)")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Console log level. By default, console logging is disabled.",
)
@click.option(
    "--repo-path",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Path to the root repository (defaults to current directory)",
)
@click.option(
    "--mainline",
    default=DEFAULT_MAINLINE,
    show_default=True,
    help="Mainline branch that feature branches integrate into",
)
@click.option(
    "--submodule",
    "submodules",
    multiple=True,
    help=f"Submodule path relative to the root. Repeatable. Default: {', '.join(DEFAULT_SUBMODULES)}",
)
@click.option(
    "--merge-strategy",
    type=click.Choice([s.value for s in MergeCheckStrategy]),
    default=MergeCheckStrategy.ANCESTRY.value,
    show_default=True,
    help="How to detect that a feature branch is already merged",
)
@click.option(
    "--skipMerged",
    "--skip-merged",
    "skip_merged",
    is_flag=True,
    help="Do not check whether the ticket's branch is already merged",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    log_level: Optional[str],
    repo_path: Optional[Path],
    mainline: str,
    submodules: Tuple[str, ...],
    merge_strategy: str,
    skip_merged: bool,
) -> None:
    """Lockstep Sync - keep a root repository and its submodules on the same feature branch.

    Run without a command for the interactive flow.
    """
    log_path = setup_logging(verbose, console_level=log_level)

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["console_level"] = log_level
    ctx.obj["log_path"] = log_path
    ctx.obj["config"] = SyncConfig(
        root_path=repo_path.resolve() if isinstance(repo_path, Path) else Path.cwd(),
        submodules=submodules or DEFAULT_SUBMODULES,
        mainline_branch=mainline,
        skip_merged_check=skip_merged,
        merge_strategy=MergeCheckStrategy(merge_strategy),
    )
    logger.debug(f"CLI init: cwd={Path.cwd()} config={ctx.obj['config']}")

    if ctx.invoked_subcommand is None:
        _run_guarded(ctx, _interactive)


def _run_guarded(ctx: click.Context, action) -> None:
    """Run a command body with the tool's error reporting and exit codes."""
    try:
        _maybe_print_log_notice(ctx.obj.get("verbose"), ctx.obj.get("console_level"), ctx.obj.get("log_path"))
        action(ctx)
    except SyncError as e:
        console.print(f"\n❌ **Sync Error:** {escape(str(e))}", style="bold red")
        logger.debug("Aborted due to SyncError", exc_info=True)
        sys.exit(1)
    except (click.Abort, KeyboardInterrupt):
        console.print("\n\n🚫 **Operation cancelled by user**", style="bold yellow")
        logger.debug("Operation cancelled by user", exc_info=True)
        sys.exit(130)
    except Exception as e:
        console.print(f"\n💥 **Unexpected Error:** {escape(str(e))}", style="bold red")
        if ctx.obj.get("verbose"):
            console.print_exception()
        logger.debug("Unexpected error", exc_info=True)
        sys.exit(1)


def _interactive(ctx: click.Context) -> None:
    config: SyncConfig = ctx.obj["config"]
    orchestrator = SyncOrchestrator(config)
    prompt = CliPrompt(console)

    intent = collect_intent(
        prompt, config.submodules, config.root.label, ticket_hint=orchestrator.ticket_matches
    )
    logger.info(f"Collected intent: {intent}")

    if intent.job is Job.CREATE_FEATURE and not intent.submit_new_branch:
        console.print("Aborting", style="bold red")
        return

    decisions = orchestrator.run(intent)
    if intent.job is Job.UPDATE_FEATURE:
        _display_sync_results(orchestrator, config.repositories(), decisions or [])
    else:
        console.print(f"\n🎉 **Created {intent.branch_name}**", style="bold green")


@cli.command()
@click.argument("ticket")
@click.option(
    "--skipMerged",
    "--skip-merged",
    "skip_merged",
    is_flag=True,
    help="Do not check whether the ticket's branch is already merged",
)
@click.pass_context
def update(ctx: click.Context, ticket: str, skip_merged: bool) -> None:
    """
    Switch the root and every submodule to the branch for TICKET.

    Example: lockstep-sync update 1234
    """

    def action(ctx: click.Context) -> None:
        config: SyncConfig = ctx.obj["config"]
        if skip_merged:
            config.skip_merged_check = True
        orchestrator = SyncOrchestrator(config)
        repos = config.repositories()
        decisions = orchestrator.run_update(ticket, repos)
        _display_sync_results(orchestrator, repos, decisions)

    _run_guarded(ctx, action)


@cli.command()
@click.argument("branch_name")
@click.option(
    "--submodule",
    "targets",
    multiple=True,
    required=True,
    help="Submodule that gets the new branch as well. Repeatable.",
)
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def create(ctx: click.Context, branch_name: str, targets: Tuple[str, ...], yes: bool) -> None:
    """
    Create BRANCH_NAME from the mainline in the root and the given submodules.

    Example: lockstep-sync create feature/TSHMI-1111/login --submodule public
    """

    def action(ctx: click.Context) -> None:
        config: SyncConfig = ctx.obj["config"]
        name = validate_branch_name(branch_name)
        selected: List[str] = list(dict.fromkeys(targets))
        handles = config.repositories(selected)[1:]
        confirmed = yes or CliPrompt(console).confirm_new_branch(name, config.root.label, selected)
        if not confirmed:
            console.print("Aborting", style="bold red")
            return
        SyncOrchestrator(config).run_create(name, handles, confirmed)
        console.print(f"\n🎉 **Created {name}**", style="bold green")

    _run_guarded(ctx, action)


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show the current branch of every configured repository."""

    def action(ctx: click.Context) -> None:
        orchestrator = SyncOrchestrator(ctx.obj["config"])
        console.print("\n📊 **Repository Status**")

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Repository", style="cyan")
        table.add_column("Path", style="dim")
        table.add_column("Current Branch", style="green")
        table.add_column("Type", style="blue")

        for label, info in orchestrator.get_repository_status().items():
            repo_type = "📦 Submodule" if info.get("is_submodule") == "True" else "📁 Root"
            if "error" in info:
                table.add_row(label, info.get("path", "Unknown"), f"❌ {escape(info['error'])}", "Unknown")
            else:
                table.add_row(label, info["path"], info["current_branch"], repo_type)

        console.print(table)

    _run_guarded(ctx, action)


@cli.command()
def version() -> None:
    """Print the current lockstep-sync version."""
    console.print(f"lockstep-sync {PACKAGE_VERSION}")


def _display_sync_results(
    orchestrator: SyncOrchestrator, repos: List[RepositoryHandle], decisions: List[SyncDecision]
) -> None:
    """Display the outcome of an update run."""
    status_info = orchestrator.get_repository_status()

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Repository", style="cyan")
    table.add_column("Decision", style="yellow")
    table.add_column("Current Branch", style="green")

    for repo, decision in zip(repos, decisions):
        info = status_info.get(repo.label, {})
        table.add_row(
            repo.label,
            DECISION_LABELS[decision],
            info.get("current_branch", "?"),
            style=None if decision.on_feature else "dim",
        )

    console.print("\n🔀 **Sync Results**")
    console.print(table)


def main() -> None:
    """Main entry point for the CLI."""
    try:
        cli()
    except KeyboardInterrupt:
        console.print("\n\n🚫 **Operation cancelled by user**", style="bold yellow")
        logger.debug("Top-level cancellation (KeyboardInterrupt)", exc_info=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
