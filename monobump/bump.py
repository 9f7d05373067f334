"""Bump propagation.

Folds the topologically ordered packages into a :class:`ReleasePlan`.
Each package's level is the highest level among its own commits, raised
to at least PATCH when any of its workspace dependencies is already in
the plan. Propagation never escalates beyond PATCH: a dependency's MAJOR
bump shows up in the dependency's own version, not in its dependents'.

The fold only produces values. Mutations are tagged operations that
:mod:`monobump.deps` interprets later against the manifest files.
"""

from __future__ import annotations

from collections.abc import Mapping

from .errors import MissingVersionError
from .log import get_logger
from .models import (
    BumpLevel,
    Mutation,
    Package,
    PackageBump,
    ReleasePlan,
    RewriteDependencyRange,
    SetOwnVersion,
)
from .versions import next_version

log = get_logger(__name__)


def own_level(pkg: Package) -> BumpLevel:
    """Highest bump level asked for by the package's own commits."""
    return max((c.bump_level for c in pkg.commits), default=BumpLevel.NONE)


def determine_package_bump(
    previous: Mapping[str, PackageBump], pkg: Package
) -> PackageBump | None:
    """Decide the release of one package given the bumps decided so far.

    Args:
        previous: Bumps of all packages processed before ``pkg``.
        pkg: The package to decide.

    Returns:
        The PackageBump, or None if the package is not released.

    Raises:
        MissingVersionError: If the package must be bumped but has no
            parseable version.
    """
    bumped_deps = [dep for dep in pkg.workspace_deps if dep in previous]
    propagated = BumpLevel.PATCH if bumped_deps else BumpLevel.NONE
    level = max(own_level(pkg), propagated)

    if level == BumpLevel.NONE:
        return None

    # TODO: decide whether a MINOR bump of a 0.x dependency should count as breaking
    if pkg.version is None:
        raise MissingVersionError(pkg.name)
    try:
        version = next_version(pkg.version, level)
    except ValueError as e:
        raise MissingVersionError(pkg.name, pkg.version) from e

    mutations: list[Mutation] = [SetOwnVersion(version=version)]
    mutations.extend(
        RewriteDependencyRange(dependency=dep, version=previous[dep].next_version)
        for dep in bumped_deps
    )
    log.debug(
        "package bump",
        package=pkg.name,
        level=level.name,
        version=version,
        propagated_from=bumped_deps,
    )
    return PackageBump(
        package=pkg,
        bump_level=level,
        next_version=version,
        mutations=tuple(mutations),
    )


def propagate(order: list[str], packages: Mapping[str, Package]) -> ReleasePlan:
    """Build the release plan by folding over packages in dependency order.

    Args:
        order: Package names, dependencies before dependents.
        packages: Map of package name → Package.

    Returns:
        The ReleasePlan, keyed in processing order. Packages that are not
        released are absent.

    Raises:
        MissingVersionError: If any package to bump lacks a usable
            version. No partial plan is returned.
    """
    bumps: dict[str, PackageBump] = {}
    for name in order:
        bump = determine_package_bump(bumps, packages[name])
        if bump is not None:
            bumps[name] = bump
    return ReleasePlan(bumps=bumps)
