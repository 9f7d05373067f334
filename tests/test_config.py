"""Tests for monobump.config and monobump.manifest."""

from __future__ import annotations

from pathlib import Path

import pytest

from monobump.config import FirstRelease, MonobumpConfig, load_config
from monobump.errors import ConfigError
from monobump.manifest import ReleaseManifest, dump_manifest, load_manifest


def write_root(tmp_path: Path, tool: str) -> Path:
    (tmp_path / "pyproject.toml").write_text(
        '[tool.uv.workspace]\nmembers = ["packages/*"]\n\n[tool.monobump]\n' + tool
    )
    return tmp_path


class TestLoadConfig:
    def test_defaults(self, tmp_path: Path) -> None:
        config = load_config(write_root(tmp_path, ""))
        assert config == MonobumpConfig()
        assert config.first_release is None
        assert config.manifest == ".monobump-manifest.json"
        assert config.changelog_file == "CHANGELOG.md"
        assert config.branch == "monobump-release"

    def test_kebab_case_keys(self, tmp_path: Path) -> None:
        root = write_root(
            tmp_path,
            'first-release = "full-history"\n'
            'changelog-file = "CHANGES.md"\n'
            'pr-title = "Release"\n'
            'base = "main"\n',
        )
        config = load_config(root)
        assert config.first_release is FirstRelease.FULL_HISTORY
        assert config.changelog_file == "CHANGES.md"
        assert config.pr_title == "Release"
        assert config.base == "main"

    def test_unknown_key_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="tool.monobump"):
            load_config(write_root(tmp_path, 'frist-release = "no-commits"\n'))

    def test_invalid_policy_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError):
            load_config(write_root(tmp_path, 'first-release = "everything"\n'))


class TestManifest:
    def test_missing_file_is_first_release(self, tmp_path: Path) -> None:
        assert load_manifest(tmp_path / ".monobump-manifest.json") is None

    def test_round_trip(self, tmp_path: Path) -> None:
        path = tmp_path / ".monobump-manifest.json"
        path.write_text(dump_manifest("abc123"))
        assert load_manifest(path) == ReleaseManifest(last_release="abc123")

    def test_dump_format(self) -> None:
        assert dump_manifest("abc123") == '{\n  "last-release": "abc123"\n}\n'

    @pytest.mark.parametrize("content", ["{}", "not json", '{"last-release": ""}'])
    def test_malformed(self, tmp_path: Path, content: str) -> None:
        path = tmp_path / ".monobump-manifest.json"
        path.write_text(content)
        with pytest.raises(ConfigError, match="invalid release manifest"):
            load_manifest(path)
