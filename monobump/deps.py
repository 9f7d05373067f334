"""Dependency handling utilities.

Provides functions for parsing PEP 508 dependency strings and for applying
a package's release mutations to its pyproject.toml: setting the new
version and moving internal dependency ranges to the new versions of the
dependencies released alongside it.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Any, cast

import tomlkit
from packaging.requirements import Requirement
from packaging.utils import canonicalize_name

from .models import Mutation, RewriteDependencyRange, SetOwnVersion
from .ranges import rewrite_range
from .toml import dump_pyproject

# name, optional extras | version specifier | environment marker
REQUIREMENT_PATTERN = re.compile(
    r"^(?P<head>\s*[A-Za-z0-9][A-Za-z0-9._-]*\s*(?:\[[^\]]*\])?)"
    r"(?P<specifier>[^;]*?)"
    r"(?P<tail>\s*(?:;.*)?)$",
    re.DOTALL,
)

_OPERATOR_CHARS = ("<", ">", "=", "!", "~", "(")


def dep_canonical_name(dep_str: str) -> str:
    """Extract the canonical package name from a PEP 508 dependency string.

    Handles version specifiers, extras, and normalizes the name per PEP 503
    (lowercase, hyphens instead of underscores).

    Examples:
        "requests>=2.0" → "requests"
        "My_Package[extra]~=1.0" → "my-package"
    """
    return canonicalize_name(Requirement(dep_str).name)


def rewrite_requirement(dep_str: str, version: str) -> str:
    """Move the version specifier of a PEP 508 dependency to ``version``.

    Only the specifier is touched; name, extras and environment markers
    are kept verbatim. Requirements without a specifier, or pointing at a
    URL, are returned unchanged. A specifier with no usable minimum
    version becomes an exact pin.

    Examples:
        rewrite_requirement("core>=1.0.0", "1.1.0") → "core>=1.1.0"
        rewrite_requirement("core[fast]~=1.0; python_version>'3.9'", "1.1.0")
            → "core[fast]~=1.1.0; python_version>'3.9'"
    """
    req = Requirement(dep_str)
    if req.url or not req.specifier:
        return dep_str

    match = REQUIREMENT_PATTERN.match(dep_str)
    if match is None:
        return dep_str

    specifier = rewrite_range(match.group("specifier"), version)
    if not specifier.lstrip().startswith(_OPERATOR_CHARS):
        specifier = f"=={version}"
    return match.group("head") + specifier + match.group("tail")


def apply_mutations(doc: tomlkit.TOMLDocument, mutations: Iterable[Mutation]) -> None:
    """Apply release mutations to a parsed pyproject.toml, in order.

    Dependency ranges are rewritten in all locations:
    - [project].dependencies
    - [project].optional-dependencies.*
    - [dependency-groups].*

    Args:
        doc: Parsed pyproject.toml document (modified in place).
        mutations: Mutations from the package's PackageBump.
    """
    # Cast needed because tomlkit types are complex unions
    project = cast(dict[str, Any], doc["project"])

    for mutation in mutations:
        if isinstance(mutation, SetOwnVersion):
            project["version"] = mutation.version
        elif isinstance(mutation, RewriteDependencyRange):
            for deps in _dependency_lists(doc):
                _rewrite_dep_list(deps, mutation.dependency, mutation.version)


def render_pyproject(content: str, mutations: Iterable[Mutation]) -> str:
    """Return ``content`` with ``mutations`` applied, formatting preserved."""
    doc = tomlkit.parse(content)
    apply_mutations(doc, mutations)
    return dump_pyproject(doc)


def _dependency_lists(doc: tomlkit.TOMLDocument) -> list[list]:
    project = doc.get("project", {})
    lists: list[list] = []

    deps = project.get("dependencies")
    if isinstance(deps, list):
        lists.append(deps)

    opt_deps = project.get("optional-dependencies")
    if isinstance(opt_deps, dict):
        lists.extend(g for g in opt_deps.values() if isinstance(g, list))

    dep_groups = doc.get("dependency-groups")
    if isinstance(dep_groups, dict):
        lists.extend(g for g in dep_groups.values() if isinstance(g, list))

    return lists


def _rewrite_dep_list(deps: list, name: str, version: str) -> None:
    """Rewrite every entry of ``deps`` naming ``name``, modifying in place."""
    for i, dep_str in enumerate(deps):
        # Skip include-group tables in dependency groups
        if not isinstance(dep_str, str):
            continue
        if dep_canonical_name(str(dep_str)) == name:
            deps[i] = rewrite_requirement(str(dep_str), version)
