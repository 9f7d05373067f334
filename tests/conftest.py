"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from monobump.commits import parse_commit
from monobump.models import Commit, Package, RawCommit


def make_commit(message: str, sha: str = "0123456789abcdef0123456789abcdef01234567") -> Commit:
    """Classify a commit built from a full message."""
    subject = message.splitlines()[0]
    return parse_commit(RawCommit(hash=sha, subject=subject, body=message))


def make_package(
    name: str,
    version: str | None = "1.0.0",
    deps: tuple[str, ...] = (),
    messages: tuple[str, ...] = (),
) -> Package:
    """Build a package whose commits are classified from ``messages``."""
    return Package(
        name=name,
        path=f"packages/{name}",
        version=version,
        workspace_deps=deps,
        commits=tuple(
            make_commit(m, sha=f"{i:07d}" + "f" * 33) for i, m in enumerate(messages)
        ),
    )


@pytest.fixture
def tmp_pyproject(tmp_path: Path) -> Path:
    """Create a temporary pyproject.toml file."""
    content = """\
[project]
name = "test-package"
version = "1.0.0"
dependencies = [
    "requests>=2.0",
    "internal-dep>=1.0.0",
]

[project.optional-dependencies]
dev = ["pytest>=8.0", "another-internal~=0.5"]

[dependency-groups]
test = ["pytest>=8.0", "group-internal>=0.1,<1", {include-group = "lint"}]
lint = ["ruff"]
"""
    pyproject = tmp_path / "pyproject.toml"
    pyproject.write_text(content)
    return pyproject


@pytest.fixture
def workspace(tmp_path: Path) -> Callable[..., Path]:
    """Return a factory that lays out a uv workspace under tmp_path.

    The factory takes a map of package name → (version, dependencies) and
    optional extra ``[tool.monobump]`` lines.
    """

    def build(
        members: dict[str, tuple[str | None, list[str]]], tool: str = ""
    ) -> Path:
        (tmp_path / "pyproject.toml").write_text(
            '[tool.uv.workspace]\nmembers = ["packages/*"]\n'
            + (f"\n[tool.monobump]\n{tool}\n" if tool else "")
        )
        for name, (version, deps) in members.items():
            pkg_dir = tmp_path / "packages" / name
            pkg_dir.mkdir(parents=True)
            version_line = f'version = "{version}"\n' if version else ""
            dep_list = ", ".join(f'"{d}"' for d in deps)
            (pkg_dir / "pyproject.toml").write_text(
                f'[project]\nname = "{name}"\n{version_line}dependencies = [{dep_list}]\n'
            )
        return tmp_path

    return build
