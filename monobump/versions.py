"""Version parsing and bumping utilities.

Handles conversion between version strings and semver objects, with
special handling for incomplete version strings (e.g., "1.0" → "1.0.0").
"""

from __future__ import annotations

import semver

from .models import BumpLevel


def parse_version(version_str: str) -> semver.Version:
    """Parse a version string into a semver.Version object.

    Full semver strings, prerelease and build metadata included, are
    parsed as-is. Incomplete versions are padded with zeros:
    - "1" → "1.0.0"
    - "1.2" → "1.2.0"

    Raises:
        ValueError: If the string is not a version.
    """
    version_str = version_str.strip().removeprefix("v")
    try:
        return semver.Version.parse(version_str)
    except ValueError:
        parts = version_str.split(".")
        # Pad with zeros to ensure we have at least 3 parts
        while len(parts) < 3:
            parts.append("0")
        return semver.Version.parse(".".join(parts[:3]))


def next_version(version_str: str, level: BumpLevel) -> str:
    """Increment a version by the given bump level and return it as a string.

    Follows npm-style increments: a prerelease of the target version is
    released rather than skipped (``1.3.0-rc.1`` + MINOR → ``1.3.0``).

    Examples:
        ("1.2.3", PATCH) → "1.2.4"
        ("1.2.3", MINOR) → "1.3.0"
        ("1.2.3", MAJOR) → "2.0.0"
        ("1.0", PATCH) → "1.0.1"

    Raises:
        ValueError: If ``level`` is NONE or the version does not parse.
    """
    part = level.release_type
    if part is None:
        raise ValueError("cannot increment a version by BumpLevel.NONE")
    return str(parse_version(version_str).next_version(part))

