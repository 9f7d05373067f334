"""Workspace discovery.

Reads [tool.uv.workspace].members from the root pyproject.toml to find
package directories, extracts name, version and internal deps from each
package's pyproject.toml, and collects the commits touching each package
since the last release.
"""

from __future__ import annotations

import glob
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import tomlkit

from .commits import parse_commit
from .config import FirstRelease, MonobumpConfig
from .deps import dep_canonical_name
from .errors import ConfigError
from .models import Package, RawCommit
from .shell import git, step
from .toml import (
    get_all_dependency_strings,
    get_project_name,
    get_project_version,
    get_workspace_member_globs,
    load_pyproject,
)

# Field and record separators for `git log --format`
_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"
LOG_FORMAT = f"%H{_FIELD_SEP}%s{_FIELD_SEP}%B{_RECORD_SEP}"

MAX_WORKERS = 8


def find_member_dirs(root: Path) -> list[Path]:
    """Expand the workspace member globs, in discovery order.

    Raises:
        ConfigError: If no member directory holds a pyproject.toml.
    """
    root_doc = load_pyproject(root / "pyproject.toml")
    member_dirs: list[Path] = []
    for pattern in get_workspace_member_globs(root_doc):
        for match in sorted(glob.glob(str(root / pattern))):
            p = Path(match)
            if (p / "pyproject.toml").exists() and p not in member_dirs:
                member_dirs.append(p)

    if not member_dirs:
        raise ConfigError("No packages found matching workspace members")
    return member_dirs


def parse_log(output: str) -> list[RawCommit]:
    """Split ``git log --format=LOG_FORMAT`` output into raw commit records."""
    commits: list[RawCommit] = []
    for record in output.split(_RECORD_SEP):
        record = record.lstrip("\n")
        if not record:
            continue
        # git() strips trailing whitespace, which includes a trailing
        # separator when the last message is empty
        sha, subject, body = (record.split(_FIELD_SEP, 2) + ["", ""])[:3]
        commits.append(RawCommit(hash=sha, subject=subject, body=body.strip()))
    return commits


def commits_since(
    root: Path,
    path: str,
    last_release: str | None,
    first_release: FirstRelease | None,
) -> list[RawCommit]:
    """Return the commits touching ``path`` since ``last_release``.

    Without a release marker the first-release policy decides between the
    full history and no commits at all.

    Raises:
        ConfigError: If there is no marker and no first-release policy.
    """
    if last_release is None:
        if first_release is None:
            raise ConfigError(
                "No release manifest found and no first-release policy set.\n"
                "Add one to the root pyproject.toml:\n\n"
                "  [tool.monobump]\n"
                '  first-release = "full-history"  # or "no-commits"'
            )
        if first_release is FirstRelease.NO_COMMITS:
            return []
        revision = "HEAD"
    else:
        revision = f"{last_release}..HEAD"

    output = git(
        "log", "--topo-order", f"--format={LOG_FORMAT}", revision, "--", path, cwd=root
    )
    return parse_log(output)


def discover_packages(
    root: Path, config: MonobumpConfig, last_release: str | None
) -> dict[str, Package]:
    """Scan the workspace and load every package with its commits.

    Commit histories are fetched concurrently; the result keeps the
    discovery order.

    Returns:
        Map of canonical package name → Package, in discovery order.
    """
    step("Discovering workspace packages")

    member_dirs = find_member_dirs(root)

    # First pass: collect basic info from each package
    docs: dict[str, tuple[Path, tomlkit.TOMLDocument]] = {}
    for d in member_dirs:
        doc = load_pyproject(d / "pyproject.toml")
        name = get_project_name(doc, d.name)
        if name in docs:
            raise ConfigError(f"Duplicate workspace package name: {name}")
        docs[name] = (d, doc)

    # Second pass: identify which deps are internal (within workspace)
    workspace_deps: dict[str, list[str]] = {}
    for name, (_, doc) in docs.items():
        internal: list[str] = []
        for dep_str in get_all_dependency_strings(doc):
            dep_name = dep_canonical_name(dep_str)
            if dep_name in docs and dep_name != name and dep_name not in internal:
                internal.append(dep_name)
        workspace_deps[name] = internal

    paths = {name: d.relative_to(root).as_posix() for name, (d, _) in docs.items()}

    with ThreadPoolExecutor(max_workers=min(MAX_WORKERS, len(docs))) as pool:
        histories = pool.map(
            lambda name: commits_since(root, paths[name], last_release, config.first_release),
            list(docs),
        )
        raw_commits = dict(zip(docs, histories))

    packages: dict[str, Package] = {}
    for name, (_, doc) in docs.items():
        packages[name] = Package(
            name=name,
            path=paths[name],
            version=get_project_version(doc),
            workspace_deps=tuple(workspace_deps[name]),
            commits=tuple(parse_commit(c) for c in raw_commits[name]),
        )
        info = packages[name]
        deps = f" → [{', '.join(info.workspace_deps)}]" if info.workspace_deps else ""
        print(
            f"  {name} {info.version or '<no version>'} ({info.path})"
            f" {len(info.commits)} commits{deps}"
        )

    return packages
