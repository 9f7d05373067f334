"""Changelog formatting.

Commits are grouped into three buckets: breaking changes, features and
bug fixes. Every other commit (chores, merges, unparsable messages) is
left out of the changelog entirely.

Two renderings exist: an aggregate document with one collapsible section
per released package, used as the pull request description, and a
per-package fragment that is prepended to the package's CHANGELOG.md.
"""

from __future__ import annotations

from collections.abc import Sequence

from .models import Commit, PackageBump, ReleasePlan

BREAKING_TITLE = "⚠ Breaking changes"
FEATURES_TITLE = "Features"
FIXES_TITLE = "Bug fixes"


def partition_commits(
    commits: Sequence[Commit],
) -> tuple[list[Commit], list[Commit], list[Commit]]:
    """Split commits into (breaking, features, fixes), keeping their order."""
    breaking: list[Commit] = []
    features: list[Commit] = []
    fixes: list[Commit] = []
    for commit in commits:
        if commit.is_breaking:
            breaking.append(commit)
        elif commit.type == "feat":
            features.append(commit)
        elif commit.type == "fix":
            fixes.append(commit)
    return breaking, features, fixes


def format_commit(commit: Commit) -> str:
    return f"- {commit.subject} ({commit.short_sha})"


def format_commit_changelog(commits: Sequence[Commit], *, heading_level: int = 4) -> str:
    """Render the non-empty buckets, each a heading followed by one bullet per commit."""
    marker = "#" * heading_level
    buckets = zip((BREAKING_TITLE, FEATURES_TITLE, FIXES_TITLE), partition_commits(commits))
    sections = [
        "\n".join([f"{marker} {title}", *map(format_commit, bucket)])
        for title, bucket in buckets
        if bucket
    ]
    return "\n\n".join(sections)


def format_package_section(name: str, next_version: str, commits: Sequence[Commit]) -> str:
    """Render one collapsible pull request section for a released package."""
    quoted = "\n".join(
        f"> {line}".rstrip() for line in format_commit_changelog(commits).splitlines()
    )
    return (
        "<details>\n"
        f"<summary><h3><code>{name}</code> v{next_version}</h3></summary>\n"
        "\n"
        f"{quoted}\n"
        "\n"
        "</details>\n"
    )


def format_aggregate(plan: ReleasePlan, *, title: str = "release") -> str:
    """Render the whole plan as a pull request description."""
    sections = [
        format_package_section(bump.name, bump.next_version, bump.package.commits)
        for bump in plan.values()
    ]
    return "\n".join([f"# {title}\n", *sections])


def format_file_changelog(bump: PackageBump) -> str:
    """Render the fragment to prepend to a package's own changelog file.

    Headings sit one level deeper than the version heading.
    """
    body = format_commit_changelog(bump.package.commits, heading_level=3)
    if not body:
        return f"## v{bump.next_version}\n"
    return f"## v{bump.next_version}\n\n{body}\n"


def prepend_changelog(existing: str | None, fragment: str) -> str:
    """Insert ``fragment`` at the top of a changelog, below its ``# `` title if any."""
    if not existing:
        return fragment
    title, _, rest = existing.partition("\n")
    if not title.startswith("# "):
        title, rest = "", existing
    blocks = [title, fragment.rstrip("\n"), rest.strip("\n")]
    return "\n\n".join(b for b in blocks if b) + "\n"
