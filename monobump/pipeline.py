"""Release pipeline: discover → plan → render → write → pull request.

This module orchestrates the monobump release process:
1. Load the configuration and the last release marker
2. Discover all packages in the workspace with their commits since then
3. Order packages by their internal dependencies and fold them into a
   release plan
4. Render every file the release changes (pyproject.toml files, package
   changelogs, the release manifest) in memory
5. Write the files and open or update the release pull request

The run is all-or-nothing: every file is rendered before the first one is
written, so a fatal error (dependency cycle, missing version, invalid
configuration) leaves the workspace untouched.
"""

from __future__ import annotations

from pathlib import Path

from .bump import propagate
from .changelog import format_aggregate, format_file_changelog, prepend_changelog
from .config import MonobumpConfig, load_config
from .deps import render_pyproject
from .graph import topo_sort
from .manifest import ReleaseManifest, dump_manifest, load_manifest
from .models import Package, ReleasePlan
from .shell import gh, git, step
from .workspace import discover_packages


def load_workspace(
    root: Path,
) -> tuple[MonobumpConfig, dict[str, Package], ReleaseManifest | None]:
    """Load configuration, the release marker and all workspace packages."""
    config = load_config(root)

    step("Finding last release")
    manifest = load_manifest(root / config.manifest)
    last_release = manifest.last_release if manifest else None
    if last_release:
        print(f"  {last_release}")
    else:
        policy = config.first_release.value if config.first_release else "unset"
        print(f"  <none: first release, policy: {policy}>")

    packages = discover_packages(root, config, last_release)
    return config, packages, manifest


def plan_release(packages: dict[str, Package]) -> ReleasePlan:
    """Order packages by dependency and decide every bump.

    Raises:
        CycleError: If the workspace dependency graph has a cycle.
        MissingVersionError: If a package to bump has no usable version.
    """
    step("Planning release")

    order = topo_sort(packages)
    plan = propagate(order, packages)

    for bump in plan.values():
        print(
            f"  {bump.name}: {bump.package.version} → {bump.next_version}"
            f" ({bump.bump_level.name.lower()})"
        )
    unreleased = [name for name in order if name not in plan]
    if unreleased:
        print("  Unchanged: " + ", ".join(unreleased))
    return plan


def render_changes(
    root: Path, plan: ReleasePlan, config: MonobumpConfig, head: str
) -> dict[str, str]:
    """Render the new content of every file the release touches.

    Nothing is written; the current files are only read.

    Args:
        root: Workspace root.
        plan: The release plan.
        config: Workspace configuration.
        head: Commit recorded as the new release marker.

    Returns:
        Map of path relative to ``root`` → new file content, in plan order
        with the release manifest last.
    """
    changes: dict[str, str] = {}
    for bump in plan.values():
        pkg_dir = Path(bump.package.path)

        pyproject = (pkg_dir / "pyproject.toml").as_posix()
        changes[pyproject] = render_pyproject(
            (root / pyproject).read_text(), bump.mutations
        )

        changelog = (pkg_dir / config.changelog_file).as_posix()
        existing = (root / changelog).read_text() if (root / changelog).exists() else None
        changes[changelog] = prepend_changelog(existing, format_file_changelog(bump))

    changes[config.manifest] = dump_manifest(head)
    return changes


def write_changes(root: Path, changes: dict[str, str]) -> None:
    """Write rendered files to disk."""
    step(f"Writing {len(changes)} files")
    for path, content in changes.items():
        (root / path).write_text(content)
        print(f"  {path}")


def open_pull_request(
    root: Path, config: MonobumpConfig, plan: ReleasePlan, changes: dict[str, str]
) -> str:
    """Commit the release on its branch and open or update the pull request.

    The release branch is reset to the current commit on every run, so the
    pull request always reflects a single release commit.

    Returns:
        The pull request URL.
    """
    step("Opening release pull request")

    body = format_aggregate(plan, title=config.pr_title)
    summary = "\n".join(
        f"  {b.name}: {b.package.version} → {b.next_version}" for b in plan.values()
    )

    git("checkout", "-B", config.branch, cwd=root)
    git("add", "--", *changes, cwd=root)
    git("commit", "-m", config.commit_message, "-m", summary, cwd=root)
    git("push", "--force", "origin", config.branch, cwd=root)

    number = gh(
        "pr", "list",
        "--head", config.branch,
        "--state", "open",
        "--json", "number",
        "--jq", ".[0].number",
        cwd=root,
    )
    if number:
        gh("pr", "edit", number, "--title", config.pr_title, "--body", body, cwd=root)
        url = gh("pr", "view", number, "--json", "url", "--jq", ".url", cwd=root)
        print(f"  Updated {url}")
        return url

    args = ["pr", "create", "--head", config.branch, "--title", config.pr_title, "--body", body]
    if config.base:
        args += ["--base", config.base]
    url = gh(*args, cwd=root)
    print(f"  Opened {url}")
    return url


def run_release(
    root: Path | None = None, *, dry_run: bool = False, pull_request: bool = True
) -> ReleasePlan:
    """Execute the full release pipeline.

    Args:
        root: Workspace root; the current directory if None.
        dry_run: Print the plan and the changelog without writing anything.
        pull_request: Commit the changes and open the release pull request.

    Returns:
        The release plan.
    """
    root = (root or Path.cwd()).resolve()

    config, packages, _ = load_workspace(root)
    plan = plan_release(packages)

    if not plan:
        print("\nNothing to release.")
        return plan

    head = git("rev-parse", "HEAD", cwd=root)
    changes = render_changes(root, plan, config, head)

    if dry_run:
        step("Dry run: files that would change")
        for path in changes:
            print(f"  {path}")
        print()
        print(format_aggregate(plan, title=config.pr_title))
        return plan

    write_changes(root, changes)
    if pull_request:
        open_pull_request(root, config, plan, changes)

    print(f"\n{'=' * 60}\nDone!\n{'=' * 60}")
    return plan
