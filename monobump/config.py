"""Workspace configuration.

Settings live in the root pyproject.toml::

    [tool.monobump]
    first-release = "full-history"   # or "no-commits"
    manifest = ".monobump-manifest.json"
    changelog-file = "CHANGELOG.md"
    branch = "monobump-release"
    pr-title = "release"
    commit-message = "chore: release main"
    base = "main"
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError

from .errors import ConfigError
from .toml import get_tool_table, load_pyproject


class FirstRelease(str, Enum):
    """Which commits count as unreleased when no release marker exists yet."""

    FULL_HISTORY = "full-history"
    NO_COMMITS = "no-commits"


class MonobumpConfig(BaseModel):
    """Validated ``[tool.monobump]`` settings.

    Attributes:
        first_release: Policy for the first run. Required as long as the
              release manifest does not exist.
        manifest: Path of the release marker file, relative to the root.
        changelog_file: Changelog file name inside each package directory.
        branch: Branch the release pull request is pushed to.
        pr_title: Title of the release pull request and of its description.
        commit_message: Message of the release commit.
        base: Base branch of the pull request; the repository default if unset.
    """

    model_config = ConfigDict(
        alias_generator=lambda field: field.replace("_", "-"),
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )

    first_release: FirstRelease | None = None
    manifest: str = ".monobump-manifest.json"
    changelog_file: str = "CHANGELOG.md"
    branch: str = "monobump-release"
    pr_title: str = "release"
    commit_message: str = "chore: release main"
    base: str | None = None


def load_config(root: Path) -> MonobumpConfig:
    """Load ``[tool.monobump]`` from ``root/pyproject.toml``.

    Raises:
        ConfigError: If the table holds unknown keys or invalid values.
    """
    doc = load_pyproject(root / "pyproject.toml")
    try:
        return MonobumpConfig.model_validate(get_tool_table(doc))
    except ValidationError as e:
        raise ConfigError(f"Invalid [tool.monobump] configuration:\n{e}") from e
