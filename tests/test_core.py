"""Tests for seeder definitions and dependency resolution."""

from __future__ import annotations

import pytest

from helpers import spec
from sprout.core import (
    CircularDependencyError,
    DependencyError,
    MissingDependencyError,
    SeederSpec,
    as_specs,
    define_seeder,
    resolve_dependency_order,
    seeder,
)


def assert_precedence(order, specs):
    index = {name: i for i, name in enumerate(order)}
    for s in specs:
        for dep in s.depends_on:
            assert index[dep] < index[s.name], f"{dep} must run before {s.name}"


class TestDefineSeeder:
    def test_reduces_dependencies_to_names(self):
        org = spec("org")

        @seeder(name="team")
        async def team(ctx, deps):
            return None

        user = define_seeder("user", lambda ctx, deps: None, depends_on=[org, team, "extra"])
        assert user.depends_on == ("org", "team", "extra")

    def test_deduplicates_dependencies(self):
        s = define_seeder("x", lambda ctx, deps: None, depends_on=["a", "b", "a"])
        assert s.depends_on == ("a", "b")

    def test_rejects_unknown_dependency_reference(self):
        with pytest.raises(TypeError):
            define_seeder("x", lambda ctx, deps: None, depends_on=[42])

    def test_spec_is_immutable(self):
        s = spec("a")
        with pytest.raises(AttributeError):
            s.name = "b"

    def test_decorator_attaches_spec(self):
        @seeder(depends_on=["base"])
        async def users(ctx, deps):
            """Create users.

            Longer explanation.
            """

        assert isinstance(users._seeder_spec, SeederSpec)
        assert users._seeder_spec.name == "users"
        assert users._seeder_spec.depends_on == ("base",)
        assert users._seeder_spec.description == "Create users."

    def test_as_specs_accepts_decorated_functions(self):
        @seeder()
        def plain(ctx, deps):
            return 1

        s = spec("other")
        assert [x.name for x in as_specs([plain, s])] == ["plain", "other"]
        with pytest.raises(TypeError):
            as_specs([lambda ctx, deps: None])


class TestResolveDependencyOrder:
    def test_empty_registry(self):
        assert resolve_dependency_order([]) == []

    def test_single_seeder(self):
        assert resolve_dependency_order([spec("only")]) == ["only"]

    def test_dependencies_come_first(self):
        specs = [spec("d", "b", "c"), spec("c", "a"), spec("b", "a"), spec("a")]
        order = resolve_dependency_order(specs)
        assert sorted(order) == ["a", "b", "c", "d"]
        assert_precedence(order, specs)

    def test_ties_follow_registry_order(self):
        specs = [spec("zeta"), spec("alpha"), spec("mid", "zeta"), spec("beta")]
        assert resolve_dependency_order(specs) == ["zeta", "alpha", "beta", "mid"]

    def test_larger_graph_respects_precedence(self):
        specs = [
            spec("reports", "orders", "users"),
            spec("orders", "products", "users"),
            spec("products", "categories"),
            spec("users", "orgs"),
            spec("categories"),
            spec("orgs"),
            spec("audit"),
        ]
        order = resolve_dependency_order(specs)
        assert len(order) == len(specs)
        assert_precedence(order, specs)

    def test_missing_dependency(self):
        with pytest.raises(MissingDependencyError) as exc:
            resolve_dependency_order([spec("a"), spec("b", "ghost")])
        assert exc.value.seeder == "b"
        assert exc.value.missing == "ghost"
        assert 'Seeder "b" depends on "ghost" which does not exist' in str(exc.value)

    def test_missing_dependency_independent_of_order(self):
        for specs in ([spec("b", "ghost"), spec("a")], [spec("a"), spec("b", "ghost")]):
            with pytest.raises(MissingDependencyError) as exc:
                resolve_dependency_order(specs)
            assert (exc.value.seeder, exc.value.missing) == ("b", "ghost")

    def test_missing_checked_before_cycles(self):
        with pytest.raises(MissingDependencyError):
            resolve_dependency_order([spec("a", "b"), spec("b", "a"), spec("c", "nope")])

    def test_two_node_cycle(self):
        with pytest.raises(CircularDependencyError) as exc:
            resolve_dependency_order([spec("a", "b"), spec("b", "a")])
        assert set(exc.value.cycle) == {"a", "b"}
        assert "Circular dependency detected" in str(exc.value)

    def test_self_dependency(self):
        with pytest.raises(CircularDependencyError) as exc:
            resolve_dependency_order([spec("a", "a")])
        assert exc.value.cycle == ("a",)
        assert str(exc.value).endswith("a -> a")

    def test_indirect_cycle(self):
        with pytest.raises(CircularDependencyError) as exc:
            resolve_dependency_order([spec("a", "c"), spec("b", "a"), spec("c", "b")])
        assert exc.value.cycle == ("a", "c", "b")
        assert str(exc.value).endswith("a -> c -> b -> a")

    def test_cycle_excludes_unrelated_seeders(self):
        specs = [
            spec("root"),
            spec("leaf", "root"),
            spec("tail", "x"),
            spec("x", "y"),
            spec("y", "x"),
        ]
        with pytest.raises(CircularDependencyError) as exc:
            resolve_dependency_order(specs)
        assert set(exc.value.cycle) == {"x", "y"}

    def test_errors_are_value_errors(self):
        assert issubclass(MissingDependencyError, DependencyError)
        assert issubclass(CircularDependencyError, ValueError)

    def test_resolution_is_idempotent(self):
        specs = [spec("c", "a", "b"), spec("b", "a"), spec("a")]
        first = resolve_dependency_order(specs)
        assert resolve_dependency_order(specs) == first
        assert [s.depends_on for s in specs] == [("a", "b"), ("a",), ()]

        cyclic = [spec("a", "b"), spec("b", "a")]
        errors = []
        for _ in range(2):
            with pytest.raises(CircularDependencyError) as exc:
                resolve_dependency_order(cyclic)
            errors.append(exc.value.cycle)
        assert errors[0] == errors[1]
