"""CLI entry point for monobump."""

from __future__ import annotations

import json
import sys
from collections.abc import Iterator
from contextlib import contextmanager, redirect_stdout
from pathlib import Path

import click

from .changelog import format_aggregate
from .errors import MonobumpError
from .log import configure_logging
from .models import ReleasePlan
from .pipeline import load_workspace, plan_release, run_release


@contextmanager
def _fatal_errors() -> Iterator[None]:
    """Report monobump errors as CLI errors (exit code 1)."""
    try:
        yield
    except MonobumpError as e:
        raise click.ClickException(str(e)) from e


def plan_summary(plan: ReleasePlan) -> dict[str, dict]:
    """JSON-ready summary of a plan: level, versions and mutations per package."""
    return {
        bump.name: {
            "level": bump.bump_level.name.lower(),
            "current_version": bump.package.version,
            "next_version": bump.next_version,
            "mutations": [m.model_dump(mode="json") for m in bump.mutations],
        }
        for bump in plan.values()
    }


@click.group()
@click.version_option(package_name="monobump")
@click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Workspace root (directory holding the root pyproject.toml).",
)
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging.")
@click.option("-q", "--quiet", is_flag=True, help="Only log warnings and errors.")
@click.option("--json-log", is_flag=True, help="Log JSON lines instead of console output.")
@click.pass_context
def cli(ctx: click.Context, root: Path, verbose: bool, quiet: bool, json_log: bool) -> None:
    """Dependency-consistent semver releases for uv workspaces."""
    configure_logging(verbose=verbose, quiet=quiet, json_log=json_log)
    ctx.obj = root.resolve()


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Print the plan as JSON.")
@click.pass_obj
def plan(root: Path, as_json: bool) -> None:
    """Show which packages would be released, and at which versions."""
    with _fatal_errors():
        if not as_json:
            _, packages, _ = load_workspace(root)
            plan_release(packages)
            return
        # Progress output goes to stderr so stdout is only the JSON document
        with redirect_stdout(sys.stderr):
            _, packages, _ = load_workspace(root)
            release_plan = plan_release(packages)
    click.echo(json.dumps(plan_summary(release_plan), indent=2))


@cli.command()
@click.pass_obj
def changelog(root: Path) -> None:
    """Print the aggregate release notes for the pending release."""
    with _fatal_errors(), redirect_stdout(sys.stderr):
        config, packages, _ = load_workspace(root)
        release_plan = plan_release(packages)
    if not release_plan:
        raise click.ClickException("Nothing to release.")
    click.echo(format_aggregate(release_plan, title=config.pr_title))


@cli.command()
@click.option("--dry-run", is_flag=True, help="Show what would change without writing.")
@click.option("--no-pr", is_flag=True, help="Write the files but do not open a pull request.")
@click.pass_obj
def release(root: Path, dry_run: bool, no_pr: bool) -> None:
    """Bump versions, write changelogs and open the release pull request."""
    with _fatal_errors():
        run_release(root, dry_run=dry_run, pull_request=not no_pr)
