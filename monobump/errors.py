"""Exceptions raised by monobump.

Only CycleError, MissingVersionError and ConfigError abort a run.
ClassificationFailure and RangeParseFailure are raised by the parsers and
recovered where they are called, so one malformed commit message or
dependency range never blocks a release.
"""

from __future__ import annotations


class MonobumpError(Exception):
    """Base class for all monobump errors.

    Attributes:
        package: Name of the package the error is about, if any.
    """

    def __init__(self, message: str, *, package: str | None = None) -> None:
        super().__init__(message)
        self.package = package


class CycleError(MonobumpError):
    """The workspace dependency graph is not acyclic."""

    def __init__(self, cycle: list[str]) -> None:
        self.cycle = cycle
        path = " → ".join(cycle)
        super().__init__(f"Dependency cycle detected: {path}", package=cycle[0])


class MissingVersionError(MonobumpError):
    """A package selected for a bump has no usable current version."""

    def __init__(self, package: str, version: str | None = None) -> None:
        self.version = version
        if version is None:
            message = f"{package}: cannot bump a package without [project].version"
        else:
            message = f"{package}: cannot bump unparseable version {version!r}"
        super().__init__(message, package=package)


class ConfigError(MonobumpError):
    """Invalid or missing workspace configuration."""


class ClassificationFailure(MonobumpError):
    """A commit message is not a conventional commit."""


class RangeParseFailure(MonobumpError):
    """A dependency range has no extractable minimum version."""
