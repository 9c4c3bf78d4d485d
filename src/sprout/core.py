from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, Sequence, Union


# A seeder body receives the shared run context and its dependency outputs
RunFn = Callable[[Any, Any], Union[Awaitable[Any], Any]]

# Dependencies may be referenced by name, by spec, or by a decorated function
DependencyRef = Union[str, "SeederSpec", Callable[..., Any]]


class DependencyError(ValueError):
    """Raised when no valid execution order exists for a set of seeders."""


class MissingDependencyError(DependencyError):
    def __init__(self, seeder: str, missing: str):
        super().__init__(f'Seeder "{seeder}" depends on "{missing}" which does not exist')
        self.seeder = seeder
        self.missing = missing


class CircularDependencyError(DependencyError):
    def __init__(self, cycle: Sequence[str]):
        self.cycle = tuple(cycle)
        path = " -> ".join(self.cycle + self.cycle[:1])
        super().__init__(f"Circular dependency detected in seeders: {path}")


@dataclass(frozen=True)
class SeederSpec:
    name: str
    run: RunFn
    depends_on: tuple[str, ...] = ()
    description: str | None = None


def _dependency_name(ref: DependencyRef) -> str:
    if isinstance(ref, str):
        return ref
    if isinstance(ref, SeederSpec):
        return ref.name
    spec = getattr(ref, "_seeder_spec", None)
    if isinstance(spec, SeederSpec):
        return spec.name
    raise TypeError(f"Cannot use {ref!r} as a seeder dependency")


def define_seeder(
    name: str,
    run: RunFn,
    depends_on: Iterable[DependencyRef] = (),
    description: str | None = None,
) -> SeederSpec:
    """Build a seeder spec.

    Dependencies are reduced to names; repeated names keep their first
    position only.
    """
    names = tuple(dict.fromkeys(_dependency_name(d) for d in depends_on))
    return SeederSpec(name=name, run=run, depends_on=names, description=description)


def seeder(
    name: str | None = None,
    depends_on: Iterable[DependencyRef] = (),
    description: str | None = None,
):
    """Decorator to declare a seeder on a function.

    The wrapped function is called as ``fn(ctx, deps)`` and may be async.
    Decorated functions can be listed in another seeder's ``depends_on``.
    """

    def deco(fn: RunFn):
        spec = define_seeder(
            name=name or fn.__name__,
            run=fn,
            depends_on=depends_on,
            description=description if description is not None else _first_line(fn.__doc__),
        )
        setattr(fn, "_seeder_spec", spec)
        return fn

    return deco


def _first_line(doc: str | None) -> str | None:
    lines = (doc or "").strip().splitlines()
    return lines[0] if lines else None


def as_specs(seeders: Iterable[SeederSpec | Callable[..., Any]]) -> list[SeederSpec]:
    """Normalize a registry of specs and/or decorated functions into specs."""
    out: list[SeederSpec] = []
    for s in seeders:
        if isinstance(s, SeederSpec):
            out.append(s)
            continue
        spec = getattr(s, "_seeder_spec", None)
        if not isinstance(spec, SeederSpec):
            raise TypeError(f"Not a seeder: {s!r}")
        out.append(spec)
    return out


def resolve_dependency_order(seeders: Sequence[SeederSpec]) -> list[str]:
    """Return seeder names ordered so every seeder follows its dependencies.

    Uses Kahn's algorithm with a FIFO ready queue seeded in registry order,
    so simultaneously ready seeders keep their registration order.

    Raises:
        MissingDependencyError: a seeder names a dependency that is not registered.
        CircularDependencyError: the dependency graph contains a cycle.
    """
    by_name = {s.name: s for s in seeders}

    for s in seeders:
        for dep in s.depends_on:
            if dep not in by_name:
                raise MissingDependencyError(s.name, dep)

    in_degree: dict[str, int] = {}
    dependents: dict[str, list[str]] = {s.name: [] for s in seeders}
    for s in seeders:
        in_degree[s.name] = len(s.depends_on)
        for dep in s.depends_on:
            dependents[dep].append(s.name)

    ready = deque(name for name, degree in in_degree.items() if degree == 0)
    ordered: list[str] = []
    while ready:
        current = ready.popleft()
        ordered.append(current)
        for dependent in dependents[current]:
            in_degree[dependent] -= 1
            if in_degree[dependent] == 0:
                ready.append(dependent)

    if len(ordered) != len(in_degree):
        done = set(ordered)
        remaining = [s for s in seeders if s.name not in done]
        raise CircularDependencyError(_find_cycle(remaining, by_name))
    return ordered


def _find_cycle(remaining: Sequence[SeederSpec], by_name: dict[str, SeederSpec]) -> list[str]:
    """Locate one cycle among unresolved seeders by depth-first search.

    Falls back to every unresolved name when no cycle is found.
    """
    visited: set[str] = set()
    path: list[str] = []

    def dfs(name: str) -> int | None:
        if name in path:
            return path.index(name)
        if name in visited:
            return None
        visited.add(name)
        path.append(name)
        for dep in by_name[name].depends_on:
            start = dfs(dep)
            if start is not None:
                return start
        path.pop()
        return None

    for s in remaining:
        path.clear()
        start = dfs(s.name)
        if start is not None:
            return path[start:]
    return [s.name for s in remaining]
