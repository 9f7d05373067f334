"""Commit classification.

Turns raw commit records into classified :class:`~monobump.models.Commit`
values using the Conventional Commits format::

    type(scope)!: description

    optional body paragraphs

    Footer-Token: value
    BREAKING CHANGE: what broke

A ``!`` before the colon is recorded as a ``BREAKING CHANGE`` note whose
text is the description, so breaking changes are detected the same way
whichever syntax was used.

Messages that are not conventional commits never fail a run: merge
commits are classified as ``merge`` and anything else as unparsable, both
with no bump.
"""

from __future__ import annotations

import re

from .errors import ClassificationFailure
from .log import get_logger
from .models import BREAKING_CHANGE, BumpLevel, Commit, CommitKind, Note, RawCommit

log = get_logger(__name__)

MERGE_PREFIX = "Merge "

HEADER_PATTERN = re.compile(
    r"^(?P<type>[A-Za-z][\w-]*)"  # type (e.g. feat, fix, chore)
    r"(?:\((?P<scope>[^()\r\n]*)\))?"  # optional scope in parens
    r"(?P<breaking>!)?"  # optional breaking change marker
    r": (?P<description>\S.*)$"
)

# Git trailer style footer: "Token: value" or "Token #value".
FOOTER_PATTERN = re.compile(
    r"^(?P<token>BREAKING[ -]CHANGE|[A-Za-z][\w-]*)(?:: | #)(?P<value>.*)$"
)
_BREAKING_TOKENS = frozenset({"BREAKING CHANGE", "BREAKING-CHANGE"})


def parse_conventional(message: str) -> tuple[str, str | None, bool, tuple[Note, ...]]:
    """Parse a full commit message as a conventional commit.

    Returns:
        Tuple of (type, scope, breaking marker present, footer notes).

    Raises:
        ClassificationFailure: If the header is not ``type(scope)!: text``.
    """
    lines = message.strip().splitlines()
    if not lines:
        raise ClassificationFailure("empty commit message")

    header = HEADER_PATTERN.match(lines[0].strip())
    if header is None:
        raise ClassificationFailure(f"not a conventional commit header: {lines[0]!r}")

    notes: list[Note] = []
    title: str | None = None
    text: list[str] = []

    def flush() -> None:
        if title is not None:
            notes.append(Note(title=title, text="\n".join(text).strip()))

    # Footers start at the first trailer-looking line that opens a paragraph.
    in_footer = False
    for i, line in enumerate(lines[1:], start=1):
        match = FOOTER_PATTERN.match(line)
        if not in_footer:
            if match is None or lines[i - 1].strip():
                continue
            in_footer = True
        if match is not None:
            flush()
            token = match.group("token")
            title = BREAKING_CHANGE if token in _BREAKING_TOKENS else token
            text = [match.group("value")]
        else:
            text.append(line)
    flush()

    breaking = header.group("breaking") is not None
    if breaking and not any(n.title == BREAKING_CHANGE for n in notes):
        notes.insert(0, Note(title=BREAKING_CHANGE, text=header.group("description")))

    return header.group("type"), header.group("scope"), breaking, tuple(notes)


def parse_commit(raw: RawCommit) -> Commit:
    """Classify one raw commit record.

    Unparsable messages are logged and degrade to a no-bump commit; a
    subject starting with ``"Merge "`` marks a merge commit.
    """
    message = raw.body or raw.subject
    try:
        type_, scope, _, notes = parse_conventional(message)
    except ClassificationFailure as e:
        if raw.subject.startswith(MERGE_PREFIX):
            return Commit(
                sha=raw.hash,
                subject=raw.subject,
                body=raw.body,
                kind=CommitKind.MERGE,
                type="merge",
            )
        log.debug("unparsable commit", sha=raw.hash[:7], reason=str(e))
        return Commit(sha=raw.hash, subject=raw.subject, body=raw.body)

    return Commit(
        sha=raw.hash,
        subject=raw.subject,
        body=raw.body,
        kind=CommitKind.CONVENTIONAL,
        type=type_,
        scope=scope,
        is_breaking=any(n.title == BREAKING_CHANGE for n in notes),
        notes=notes,
    )


def classify(raw: RawCommit) -> BumpLevel:
    """Return the bump level a single raw commit asks for."""
    return parse_commit(raw).bump_level
