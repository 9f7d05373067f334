"""Version range rewriting.

When a workspace dependency is bumped, every dependent's declared range
for it must move to the new version. The range is rewritten by
substituting its minimum version in place, so operators, whitespace and
compound syntax survive verbatim::

    "^1.2.3"          → "^1.3.0"
    ">=1.2.3,<2"      → ">=1.3.0,<2"
    "~=1.2"           → "~=1.3.0"
    ">=1.0.0a1"       → ">=1.3.0"
"""

from __future__ import annotations

import re

from packaging.version import InvalidVersion, Version

from .errors import RangeParseFailure
from .log import get_logger

log = get_logger(__name__)

# One comparator: optional operator, then a version. npm (^, ~) and
# PEP 440 (~=, ==, ===) operators are both understood, as are PEP 440
# pre/post/dev suffixes and semver pre-release and build tags.
# A comparator never starts inside another token.
COMPARATOR_PATTERN = re.compile(
    r"(?<![\w.])"
    r"(?P<op>===|==|~=|>=|<=|!=|\^|~|>|<|=)?\s*v?"
    r"(?P<version>\d+(?:\.\d+)*"
    r"(?:[-_.]?(?:alpha|beta|preview|pre|rc|a|b|c)[-_.]?\d*)?"
    r"(?:[-_.]?(?:post|rev|r)[-_.]?\d*)?"
    r"(?:[-_.]?dev[-_.]?\d*)?"
    r"(?:-[0-9A-Za-z.-]+)?"
    r"(?:\+[0-9A-Za-z.-]+)?)"
    r"(?![\w.*])"
)

# Comparators that bound a range from below (a bare version counts too).
LOWER_BOUND_OPS = frozenset({None, "^", "~", "~=", ">=", "=", "==", "==="})


def _version_key(match: re.Match[str]) -> Version:
    try:
        return Version(match.group("version"))
    except InvalidVersion as e:
        raise RangeParseFailure(f"cannot compare version {match.group('version')!r}") from e


def min_version_span(range_str: str) -> tuple[int, int]:
    """Locate the minimum version satisfied by ``range_str``.

    Returns:
        The ``(start, end)`` span of the version text inside ``range_str``.

    Raises:
        RangeParseFailure: If no lower-bounding comparator is present
            (``"*"``, ``"<2.0"``, ``"latest"``, ...) or a candidate is not
            a valid version.
    """
    candidates = [
        m for m in COMPARATOR_PATTERN.finditer(range_str) if m.group("op") in LOWER_BOUND_OPS
    ]
    if not candidates:
        raise RangeParseFailure(f"no minimum version in range {range_str!r}")
    lowest = min(candidates, key=_version_key)
    return lowest.span("version")


def rewrite_range(old_range: str, new_version: str) -> str:
    """Point ``old_range`` at ``new_version``, keeping everything else verbatim.

    If the range has no extractable minimum version, falls back to
    ``new_version`` itself.

    Examples:
        rewrite_range("^1.2.3", "1.3.0") → "^1.3.0"
        rewrite_range("~1.2.3", "1.3.0") → "~1.3.0"
        rewrite_range(">=1.0 <2.0", "1.4.2") → ">=1.4.2 <2.0"
        rewrite_range("*", "1.3.0") → "1.3.0"
    """
    try:
        start, end = min_version_span(old_range)
    except RangeParseFailure as e:
        log.warning("replacing unparseable range", range=old_range, version=new_version, reason=str(e))
        return new_version
    return old_range[:start] + new_version + old_range[end:]
