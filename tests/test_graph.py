"""Tests for monobump.graph."""

from __future__ import annotations

import pytest
from conftest import make_package

from monobump.errors import CycleError
from monobump.graph import dependency_edges, topo_sort
from monobump.models import Package


def workspace(*specs: tuple[str, tuple[str, ...]]) -> dict[str, Package]:
    return {name: make_package(name, deps=deps) for name, deps in specs}


class TestDependencyEdges:
    def test_edges_point_from_dependency_to_dependent(self) -> None:
        packages = workspace(("core", ()), ("ui", ("core",)))
        assert dependency_edges(packages) == [("core", "ui")]

    def test_unknown_deps_ignored(self) -> None:
        packages = workspace(("ui", ("external",)))
        assert dependency_edges(packages) == []


class TestTopoSort:
    def test_no_deps_keeps_discovery_order(self) -> None:
        packages = workspace(("c", ()), ("a", ()), ("b", ()))
        assert topo_sort(packages) == ["c", "a", "b"]

    def test_linear_deps(self) -> None:
        packages = workspace(("a", ("b",)), ("b", ("c",)), ("c", ()))
        assert topo_sort(packages) == ["c", "b", "a"]

    def test_diamond_deps(self) -> None:
        packages = workspace(
            ("top", ("left", "right")),
            ("left", ("bottom",)),
            ("right", ("bottom",)),
            ("bottom", ()),
        )
        result = topo_sort(packages)
        assert result.index("bottom") < result.index("left")
        assert result.index("bottom") < result.index("right")
        assert result.index("left") < result.index("top")
        assert result.index("right") < result.index("top")

    def test_stable_where_graph_allows(self) -> None:
        """Independent packages keep discovery order around forced edges."""
        packages = workspace(("x", ()), ("app", ("lib",)), ("y", ()), ("lib", ()))
        assert topo_sort(packages) == ["x", "y", "lib", "app"]

    def test_dependent_released_as_soon_as_ready(self) -> None:
        packages = workspace(("lib", ()), ("app", ("lib",)), ("z", ()))
        assert topo_sort(packages) == ["lib", "app", "z"]

    def test_single_package(self) -> None:
        assert topo_sort(workspace(("only", ()))) == ["only"]

    def test_empty_packages(self) -> None:
        assert topo_sort({}) == []

    def test_external_deps_ignored(self) -> None:
        packages = workspace(("a", ("external",)), ("b", ("a",)))
        assert topo_sort(packages) == ["a", "b"]

    def test_cycle_raises(self) -> None:
        packages = workspace(("a", ("b",)), ("b", ("a",)))
        with pytest.raises(CycleError, match="cycle") as exc_info:
            topo_sort(packages)
        assert exc_info.value.cycle == ["a", "b", "a"]

    def test_three_way_cycle_raises(self) -> None:
        packages = workspace(("a", ("b",)), ("b", ("c",)), ("c", ("a",)))
        with pytest.raises(CycleError) as exc_info:
            topo_sort(packages)
        assert exc_info.value.cycle == ["a", "b", "c", "a"]

    def test_cycle_reported_without_bystanders(self) -> None:
        """A package depending on a cycle is not part of the reported cycle."""
        packages = workspace(
            ("ok", ()), ("app", ("x",)), ("x", ("y",)), ("y", ("x",))
        )
        with pytest.raises(CycleError) as exc_info:
            topo_sort(packages)
        assert exc_info.value.cycle == ["x", "y", "x"]
        assert exc_info.value.package == "x"
