"""Tests for monobump.commits."""

from __future__ import annotations

import pytest

from monobump.commits import classify, parse_commit, parse_conventional
from monobump.errors import ClassificationFailure
from monobump.models import BumpLevel, CommitKind, Note, RawCommit

SHA = "0123456789abcdef0123456789abcdef01234567"


def raw(message: str) -> RawCommit:
    return RawCommit(hash=SHA, subject=message.splitlines()[0], body=message)


class TestParseConventional:
    def test_simple_feat(self) -> None:
        assert parse_conventional("feat: add thing") == ("feat", None, False, ())

    def test_with_scope(self) -> None:
        type_, scope, _, _ = parse_conventional("fix(api): handle null response")
        assert type_ == "fix"
        assert scope == "api"

    def test_breaking_marker_adds_note(self) -> None:
        _, _, breaking, notes = parse_conventional("feat(api)!: drop v1")
        assert breaking
        assert notes == (Note(title="BREAKING CHANGE", text="drop v1"),)

    def test_footers(self) -> None:
        message = (
            "fix: stop leaking handles\n"
            "\n"
            "Handles were never closed.\n"
            "\n"
            "Reviewed-by: Sam\n"
            "Refs #123\n"
        )
        _, _, _, notes = parse_conventional(message)
        assert notes == (
            Note(title="Reviewed-by", text="Sam"),
            Note(title="Refs", text="123"),
        )

    def test_breaking_change_footer_with_continuation(self) -> None:
        message = (
            "refactor: rename config keys\n"
            "\n"
            "BREAKING CHANGE: `path` is now `root`\n"
            "and `out` is now `dest`.\n"
        )
        _, _, breaking, notes = parse_conventional(message)
        assert not breaking
        assert notes == (
            Note(title="BREAKING CHANGE", text="`path` is now `root`\nand `out` is now `dest`."),
        )

    def test_hyphenated_breaking_change_normalized(self) -> None:
        _, _, _, notes = parse_conventional("feat: x\n\nBREAKING-CHANGE: y")
        assert notes == (Note(title="BREAKING CHANGE", text="y"),)

    def test_marker_and_footer_give_one_note(self) -> None:
        _, _, _, notes = parse_conventional("feat!: x\n\nBREAKING CHANGE: y")
        assert notes == (Note(title="BREAKING CHANGE", text="y"),)

    def test_body_line_directly_after_header_is_not_a_footer(self) -> None:
        _, _, _, notes = parse_conventional("feat: x\nNote: not a footer")
        assert notes == ()

    @pytest.mark.parametrize(
        "message",
        ["", "add a thing", "feat add thing", "feat:no space", "(scope): missing type"],
    )
    def test_rejects_non_conventional(self, message: str) -> None:
        with pytest.raises(ClassificationFailure):
            parse_conventional(message)


class TestParseCommit:
    def test_conventional(self) -> None:
        commit = parse_commit(raw("feat(ui): dark mode"))
        assert commit.kind is CommitKind.CONVENTIONAL
        assert commit.type == "feat"
        assert commit.scope == "ui"
        assert commit.sha == SHA
        assert commit.subject == "feat(ui): dark mode"
        assert not commit.is_breaking

    def test_merge_commit(self) -> None:
        commit = parse_commit(raw("Merge pull request #4 from org/branch\n\nfeat: x"))
        assert commit.kind is CommitKind.MERGE
        assert commit.type == "merge"
        assert commit.bump_level is BumpLevel.NONE

    def test_unparsable(self) -> None:
        commit = parse_commit(raw("Update README"))
        assert commit.kind is CommitKind.UNPARSABLE
        assert commit.type is None
        assert commit.notes == ()

    def test_falls_back_to_subject_when_body_empty(self) -> None:
        commit = parse_commit(RawCommit(hash=SHA, subject="fix: typo"))
        assert commit.type == "fix"

    def test_breaking_flag(self) -> None:
        assert parse_commit(raw("fix!: change default")).is_breaking


class TestClassify:
    def test_feat_is_minor(self) -> None:
        assert classify(raw("feat: add thing")) is BumpLevel.MINOR

    def test_fix_is_patch(self) -> None:
        assert classify(raw("fix: broken thing")) is BumpLevel.PATCH

    @pytest.mark.parametrize("type_", ["feat", "fix", "chore", "docs"])
    def test_breaking_note_is_major_regardless_of_type(self, type_: str) -> None:
        message = f"{type_}: change\n\nBREAKING CHANGE: everything moved"
        assert classify(raw(message)) is BumpLevel.MAJOR

    def test_breaking_marker_is_major(self) -> None:
        assert classify(raw("chore!: drop python 3.9")) is BumpLevel.MAJOR

    @pytest.mark.parametrize("type_", ["chore", "docs", "refactor", "ci", "Feat"])
    def test_other_types_are_none(self, type_: str) -> None:
        assert classify(raw(f"{type_}: something")) is BumpLevel.NONE

    def test_unparsable_is_none(self) -> None:
        assert classify(raw("did some stuff")) is BumpLevel.NONE

    def test_merge_is_none(self) -> None:
        assert classify(raw("Merge branch 'main' into feature")) is BumpLevel.NONE

    def test_pure(self) -> None:
        commit = raw("feat: add thing\n\nBREAKING CHANGE: x")
        assert classify(commit) == classify(commit) == BumpLevel.MAJOR
