"""CLI interface for devsweep."""

from __future__ import annotations

import functools
import json
import logging
import sys
import time
from typing import Any, Callable, NoReturn

import click

from devsweep.config import (
    PROJECT_TYPE_CHOICES,
    SORT_CHOICES,
    FilterOptions,
    ScanOptions,
    Settings,
    default_config_path,
    resolve_dir,
    resolve_execution_options,
    resolve_filter_options,
    resolve_project_type,
    resolve_scan_options,
)
from devsweep.core.cleaner import Cleaner
from devsweep.core.filtering import build_mtime, filter_projects, sort_projects
from devsweep.core.scanner import Scanner, ScanPhase
from devsweep.errors import DevSweepError
from devsweep.models.clean_result import Cleaned, CleanOutcome
from devsweep.models.project import Project, ProjectType
from devsweep.report import clean_report, scan_report, summarize
from devsweep.utils import bytes_to_human, format_elapsed, format_relative_time


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _fail(message: str) -> NoReturn:
    click.echo(f"{click.style('Error:', fg='red', bold=True)} {message}", err=True)
    sys.exit(1)


def _selection_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by every command that scans and filters."""

    @click.argument("directory", required=False, type=click.Path(file_okay=False))
    @click.option("--type", "project_type", type=click.Choice(PROJECT_TYPE_CHOICES, case_sensitive=False),
                  default=None, help="Only consider one ecosystem")
    @click.option("--keep-size", "-s", default=None,
                  help="Ignore build dirs smaller than this (e.g. 100MB, 1.5GiB)")
    @click.option("--keep-days", "-d", type=click.IntRange(min=0), default=None,
                  help="Ignore projects built within the last N days")
    @click.option("--sort", "sort_key", type=click.Choice(SORT_CHOICES), default=None, help="Sort order")
    @click.option("--reverse", is_flag=True, help="Reverse the sort order")
    @click.option("--threads", "-t", type=click.IntRange(min=0), default=None,
                  help="Worker threads (0 = one per CPU)")
    @click.option("--skip", multiple=True, help="Skip directories whose path contains this text")
    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        return func(*args, **kwargs)

    return wrapper


@click.group()
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug)")
@click.pass_context
def main(ctx: click.Context, verbose: int) -> None:
    """devsweep: find and clean development build directories."""
    _setup_logging(verbose)
    ctx.obj = {"verbose": verbose}


def _scan_and_filter(
    ctx: click.Context,
    params: dict[str, Any],
    as_json: bool,
) -> tuple[Settings, ScanOptions, list[Project], list[str]]:
    """Resolve options, scan, filter and sort.  Exits on fatal errors."""
    try:
        settings = Settings()
        root = resolve_dir(params["directory"], settings)
        kinds = resolve_project_type(params["project_type"], settings)
        scan_opts = resolve_scan_options(
            settings,
            threads=params["threads"],
            verbose=True if ctx.obj["verbose"] else None,
            skip=list(params["skip"]),
        )
        filter_opts: FilterOptions = resolve_filter_options(
            settings,
            keep_size=params["keep_size"],
            keep_days=params["keep_days"],
            sort=params["sort_key"],
            reverse=params["reverse"] or None,
        )

        def on_progress(phase: ScanPhase, message: str) -> None:
            if not as_json and phase is not ScanPhase.DONE:
                click.echo(f"{click.style('🔍', bold=True)} {message}...")

        started = time.monotonic()
        result = Scanner(scan_opts, kinds).scan(root, on_progress=on_progress)
        elapsed = time.monotonic() - started

        projects = filter_projects(result.projects, filter_opts.keep_size, filter_opts.keep_days)
        projects = sort_projects(projects, filter_opts.sort, filter_opts.reverse)
    except DevSweepError as e:
        _fail(str(e))

    if not as_json:
        click.echo(
            f"\nFound {len(result.projects)} projects in {format_elapsed(elapsed)}"
            + (f", {len(projects)} match the criteria" if len(projects) != len(result.projects) else "")
        )
        if scan_opts.verbose and result.diagnostics:
            click.echo(click.style("\nScan warnings:", fg="yellow"))
            for message in result.diagnostics:
                click.echo(f"  {click.style(message, fg='red')}", err=True)

    return settings, scan_opts, projects, result.diagnostics


def _print_projects(projects: list[Project]) -> None:
    for project in projects:
        mtime = build_mtime(project)
        age = f", built {format_relative_time(mtime)}" if mtime is not None else ""
        click.echo(
            f"  {project.kind.icon} {project.display_name:30s} — "
            f"{click.style(bytes_to_human(project.size), fg='green', bold=True)}"
            f"{click.style(age, fg='bright_black')}"
        )
        click.echo(f"     {click.style(str(project.build_arts.path), fg='bright_black')}")


def _print_summary(projects: list[Project]) -> None:
    summary = summarize(projects)
    click.echo()
    for kind in ProjectType:
        entry = summary["per_type"].get(kind.value)
        if entry:
            noun = "project" if entry["count"] == 1 else "projects"
            click.echo(f"  {kind.icon} {entry['count']} {kind.label} {noun} ({bytes_to_human(entry['size_bytes'])})")
    click.echo(
        f"  💾 Total reclaimable space: "
        f"{click.style(bytes_to_human(summary['total_bytes']), fg='green', bold=True)}\n"
    )


# ── scan ─────────────────────────────────────────────────────────────────

@main.command()
@_selection_options
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def scan(ctx: click.Context, as_json: bool, **params: Any) -> None:
    """Scan for cleanable build directories (preview only, never deletes)."""
    _settings, _scan_opts, projects, diagnostics = _scan_and_filter(ctx, params, as_json)

    if as_json:
        click.echo(json.dumps(scan_report(projects, diagnostics), indent=2))
        return

    if not projects:
        click.echo(click.style("✨ No development directories found!", fg="green"))
        return

    click.echo()
    _print_projects(projects)
    _print_summary(projects)


# ── clean ────────────────────────────────────────────────────────────────

@main.command()
@_selection_options
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.option("--dry-run", is_flag=True, help="Show what would be cleaned without doing it")
@click.option("--interactive", "-i", is_flag=True, help="Pick the projects to clean")
@click.option("--keep-executables", is_flag=True,
              help="Copy compiled executables to <project>/bin before cleaning")
@click.option("--permanent", is_flag=True, help="Delete permanently instead of moving to the trash")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def clean(
    ctx: click.Context,
    yes: bool,
    dry_run: bool,
    interactive: bool,
    keep_executables: bool,
    permanent: bool,
    as_json: bool,
    **params: Any,
) -> None:
    """Scan and clean build directories."""
    settings, scan_opts, projects, _diagnostics = _scan_and_filter(ctx, params, as_json)
    try:
        exec_opts = resolve_execution_options(
            settings,
            dry_run=dry_run or None,
            interactive=interactive or None,
            keep_executables=keep_executables or None,
            use_trash=False if permanent else None,
        )
    except DevSweepError as e:
        _fail(str(e))

    if not projects:
        if as_json:
            click.echo(json.dumps({"status": "nothing_to_clean", "projects": []}))
        else:
            click.echo(click.style("✨ No directories match the specified criteria!", fg="green"))
        return

    if not as_json:
        _print_summary(projects)

    if exec_opts.dry_run:
        if as_json:
            click.echo(json.dumps({"status": "dry_run", **scan_report(projects)}, indent=2))
        else:
            click.echo(
                f"🧪 Dry run complete! Would free up "
                f"{click.style(bytes_to_human(sum(p.size for p in projects)), fg='green', bold=True)}"
            )
        return

    # Confirm
    if not as_json:
        if exec_opts.interactive:
            projects = _interactive_select(projects)
        elif not yes:
            choice = click.prompt("Clean all? [y/N/select]", default="n", show_default=False)
            match choice.lower():
                case "y" | "yes":
                    pass
                case "select" | "s":
                    projects = _interactive_select(projects)
                case _:
                    click.echo("Aborted.")
                    return
        if not projects:
            click.echo("Nothing selected.")
            return

    # Clean
    if not as_json:
        verb = "Moving to trash" if exec_opts.use_trash else "Deleting"
        click.echo(f"\n{click.style('🧹', bold=True)} {verb}...\n")

    def on_progress(outcome: CleanOutcome) -> None:
        if as_json:
            return
        name = outcome.project.display_name
        if isinstance(outcome, Cleaned):
            click.echo(
                f"  {click.style('✓', fg='green')} {name:35s} — "
                f"freed {click.style(bytes_to_human(outcome.bytes_freed), fg='green', bold=True)}"
            )
        else:
            click.echo(f"  {click.style('✗', fg='red')} {name:35s} — failed")

    result = Cleaner(exec_opts, threads=scan_opts.threads).clean(projects, on_progress=on_progress)

    if as_json:
        click.echo(json.dumps({"status": "cleaned", **clean_report(result)}, indent=2))
        return

    if result.failed:
        click.echo(click.style("\n⚠️  Some errors occurred during cleanup:", fg="yellow"))
        for path, reason in result.failed:
            click.echo(f"  {click.style(f'Failed to clean {path}: {reason}', fg='red')}", err=True)

    click.echo(f"\n{click.style('📊 Cleanup Summary:', bold=True)}")
    click.echo(f"  ✅ Successfully cleaned: {click.style(str(result.succeeded_count), fg='green')} projects")
    if result.failed:
        click.echo(f"  ❌ Failed to clean: {click.style(str(result.failed_count), fg='red')} projects")
    click.echo(
        f"  💾 Total space freed: "
        f"{click.style(bytes_to_human(result.total_bytes_freed), fg='green', bold=True)}"
    )
    if result.difference:
        click.echo(f"  📋 Difference from estimate: {click.style(bytes_to_human(result.difference), fg='yellow')}")
    if result.preserved:
        click.echo(f"  📌 Preserved {len(result.preserved)} executables:")
        for item in result.preserved:
            click.echo(f"     {item.destination}")
    click.echo()


def _interactive_select(projects: list[Project]) -> list[Project]:
    """Let the user pick which projects to clean."""
    click.echo("\nSelect projects to clean (enter numbers, comma-separated; empty for all):\n")
    for i, project in enumerate(projects, 1):
        click.echo(f"  [{i}] {str(project):60s} — {bytes_to_human(project.size)}")
    click.echo()
    raw = click.prompt("Selection", default="", show_default=False)
    if not raw.strip():
        return projects
    selected: list[Project] = []
    for part in raw.split(","):
        part = part.strip()
        if part.isdigit():
            idx = int(part) - 1
            if 0 <= idx < len(projects) and projects[idx] not in selected:
                selected.append(projects[idx])
    return selected


# ── config ───────────────────────────────────────────────────────────────

@main.command("config-path")
def config_path() -> None:
    """Show where the configuration file is read from."""
    path = default_config_path()
    status = "exists" if path.exists() else "not found"
    click.echo(f"{path} ({status})")
