"""Data models for monobump.

These Pydantic models represent the core data structures that flow from
workspace loading, through bump propagation, to changelog and manifest
output. All of them are frozen: once loaded, nothing mutates them.
"""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

BREAKING_CHANGE = "BREAKING CHANGE"


class BumpLevel(IntEnum):
    """Magnitude of a semver increment, ordered NONE < PATCH < MINOR < MAJOR.

    Being an IntEnum, the builtin ``max`` is the reduction, with NONE as
    its identity: ``max(levels, default=BumpLevel.NONE)``.
    """

    NONE = 0
    PATCH = 1
    MINOR = 2
    MAJOR = 3

    @property
    def release_type(self) -> str | None:
        """The semver part name to increment, or None for NONE."""
        if self is BumpLevel.NONE:
            return None
        return self.name.lower()


class CommitKind(str, Enum):
    """How a commit message was understood by the classifier."""

    CONVENTIONAL = "conventional"
    MERGE = "merge"
    UNPARSABLE = "unparsable"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class Note(_Frozen):
    """A footer note of a conventional commit (e.g. ``BREAKING CHANGE: ...``)."""

    title: str
    text: str


class RawCommit(_Frozen):
    """One commit record as handed over by version control.

    Attributes:
        hash: Full commit SHA.
        subject: First line of the commit message.
        body: Full commit message, subject included.
    """

    hash: str
    subject: str
    body: str = ""


class Commit(_Frozen):
    """A classified commit.

    Attributes:
        sha: Full commit SHA.
        subject: First line of the commit message.
        body: Full commit message.
        kind: Whether the message parsed as a conventional commit, is a
              merge commit, or could not be parsed.
        type: Conventional commit type (``feat``, ``fix``, ...), ``merge``
              for merge commits, None when unparsable.
        scope: Optional conventional commit scope.
        is_breaking: True when a ``BREAKING CHANGE`` note is present.
        notes: Footer notes in message order.
    """

    sha: str
    subject: str
    body: str = ""
    kind: CommitKind = CommitKind.UNPARSABLE
    type: str | None = None
    scope: str | None = None
    is_breaking: bool = False
    notes: tuple[Note, ...] = ()

    @property
    def bump_level(self) -> BumpLevel:
        """Severity of this commit: breaking > feat > fix > anything else."""
        if any(note.title == BREAKING_CHANGE for note in self.notes):
            return BumpLevel.MAJOR
        if self.type == "feat":
            return BumpLevel.MINOR
        if self.type == "fix":
            return BumpLevel.PATCH
        return BumpLevel.NONE

    @property
    def short_sha(self) -> str:
        return self.sha[:7]


class Package(_Frozen):
    """A single member of the workspace.

    Attributes:
        name: Canonical package name, unique within the workspace.
        path: Path of the package directory relative to the workspace root.
        version: Current version from pyproject.toml, None if not declared.
        workspace_deps: Names of the package's dependencies that are other
              workspace members, in declaration order.
        commits: Commits touching the package since the last release.
    """

    name: str
    path: str
    version: str | None = None
    workspace_deps: tuple[str, ...] = ()
    commits: tuple[Commit, ...] = ()


class SetOwnVersion(_Frozen):
    """Set ``[project].version`` of the bumped package."""

    kind: Literal["set-own-version"] = "set-own-version"
    version: str


class RewriteDependencyRange(_Frozen):
    """Point the version range of an in-workspace dependency at its new version."""

    kind: Literal["rewrite-dependency-range"] = "rewrite-dependency-range"
    dependency: str
    version: str


Mutation = Annotated[
    SetOwnVersion | RewriteDependencyRange, Field(discriminator="kind")
]


class PackageBump(_Frozen):
    """The release decision for one package that is bumped in this run."""

    package: Package
    bump_level: BumpLevel
    next_version: str
    mutations: tuple[Mutation, ...] = ()

    @property
    def name(self) -> str:
        return self.package.name


class ReleasePlan(_Frozen):
    """Ordered mapping of package name to PackageBump.

    Insertion order is the dependency-respecting processing order.
    Packages that are not released never appear as keys.
    """

    bumps: dict[str, PackageBump] = Field(default_factory=dict)

    def __contains__(self, name: object) -> bool:
        return name in self.bumps

    def __getitem__(self, name: str) -> PackageBump:
        return self.bumps[name]

    def __len__(self) -> int:
        return len(self.bumps)

    def get(self, name: str) -> PackageBump | None:
        return self.bumps.get(name)

    def names(self) -> list[str]:
        return list(self.bumps)

    def values(self) -> list[PackageBump]:
        return list(self.bumps.values())
