"""Execution engine: runs seeders in dependency order and records a ledger.

Seeders run one at a time on the current event loop. A seeder's exception is
captured on its result and never raised past :func:`run_seeders_core`; a
missing or circular dependency aborts the run before any seeder starts and is
reported through ``RunLedger.error``.
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable, Iterator, Sequence, Union

from .core import DependencyError, SeederSpec, as_specs, resolve_dependency_order
from .logging import get_logger
from .results import RunLedger, SeederResult
from .state import RUN_STATE, RunState
from .utils import maybe_await


Hook = Callable[[], Union[Awaitable[None], None]]

log = get_logger("sprout.runner")


class UndeclaredDependencyError(KeyError):
    def __init__(self, seeder: str, name: str):
        super().__init__(name)
        self.seeder = seeder
        self.name = name

    def __str__(self) -> str:
        return f'Seeder "{self.seeder}" read "{self.name}" which is not in its depends_on'


class DependencyOutputs(Mapping):
    """Read-only view of the outputs a seeder declared it depends on."""

    def __init__(self, seeder: str, declared: Sequence[str], outputs: Mapping[str, Any]):
        self._seeder = seeder
        self._values = {name: outputs[name] for name in declared}

    def __getitem__(self, name: str) -> Any:
        try:
            return self._values[name]
        except KeyError:
            raise UndeclaredDependencyError(self._seeder, name) from None

    def get(self, name: str, default: Any = None) -> Any:
        """Return a declared output; ``default`` is ignored and undeclared names raise."""
        return self[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"DependencyOutputs({self._values!r})"


class RunObserver:
    """Progress callbacks; the default implementation ignores everything."""

    def on_run_start(self, total: int) -> None:
        pass

    def on_unit_start(self, name: str, index: int, total: int, description: str | None) -> None:
        pass

    def on_unit_end(self, name: str, duration_ms: float, success: bool) -> None:
        pass

    def on_unit_skipped(
        self,
        name: str,
        index: int,
        total: int,
        description: str | None,
        failed_dependencies: list[str],
    ) -> None:
        pass

    def on_resolution_error(self, error: DependencyError) -> None:
        pass

    def on_run_end(self, ledger: RunLedger) -> None:
        pass


def _no_context() -> None:
    return None


@dataclass
class RunConfig:
    context: Callable[[], Any] = _no_context
    set_seeder_name: Callable[[str], None] | None = None
    on_before_all: Hook | None = None
    on_after_all: Hook | None = None
    state: RunState = field(default_factory=lambda: RUN_STATE)


async def run_seeders_core(
    seeders: Iterable[SeederSpec],
    config: RunConfig | None = None,
    *,
    continue_on_failure: bool = False,
    observer: RunObserver | None = None,
) -> RunLedger:
    """Resolve and execute ``seeders``, returning the run ledger.

    Args:
        seeders: seeder specs (or ``@seeder`` functions) in registry order.
        config: context factory, lifecycle hooks and the run-state flag.
        continue_on_failure: keep running independent seeders after a
            failure; seeders depending on a failed or skipped seeder are
            skipped. When false the run stops at the first failure and the
            remaining seeders stay pending.
        observer: progress callbacks.
    """
    specs = as_specs(seeders)
    config = config or RunConfig()
    observer = observer or RunObserver()

    config.state.activate()
    try:
        if config.on_before_all:
            await maybe_await(config.on_before_all())
        return await _execute(specs, config, continue_on_failure, observer)
    finally:
        config.state.deactivate()
        if config.on_after_all:
            await maybe_await(config.on_after_all())


async def _execute(
    specs: list[SeederSpec],
    config: RunConfig,
    continue_on_failure: bool,
    observer: RunObserver,
) -> RunLedger:
    try:
        order = resolve_dependency_order(specs)
    except DependencyError as e:
        log.error("Failed to resolve seeder dependencies: %s", e)
        _notify(observer.on_resolution_error, e)
        return RunLedger(error=e)

    log.info("Execution order: %s", " → ".join(order))
    by_name = {s.name: s for s in specs}
    ledger = RunLedger(results=[SeederResult(name=n) for n in order], order=order)
    outputs: dict[str, Any] = {}
    failed: set[str] = set()
    total = len(order)

    ctx = await maybe_await(config.context())
    _notify(observer.on_run_start, total)

    for index, result in enumerate(ledger.results):
        spec = by_name[result.name]

        if continue_on_failure:
            failed_deps = [d for d in spec.depends_on if d in failed]
            if failed_deps:
                result.skip()
                failed.add(spec.name)
                log.info("Skip %s (depends on failed: %s)", spec.name, ", ".join(failed_deps))
                _notify(
                    observer.on_unit_skipped, spec.name, index, total, spec.description, failed_deps
                )
                continue

        _notify(observer.on_unit_start, spec.name, index, total, spec.description)
        if config.set_seeder_name:
            config.set_seeder_name(spec.name)
        result.start()
        log.info("Run: %s", spec.name)

        deps = DependencyOutputs(spec.name, spec.depends_on, outputs)
        started = time.perf_counter()
        try:
            output = await maybe_await(spec.run(ctx, deps))
        except Exception as e:  # noqa: BLE001
            result.fail(e, _elapsed_ms(started))
            failed.add(spec.name)
            log.info("Seeder failed: %s", spec.name, exc_info=True)
            _notify(observer.on_unit_end, spec.name, result.duration_ms, False)
            if not continue_on_failure:
                break
            continue

        outputs[spec.name] = output
        result.complete(output, _elapsed_ms(started))
        _notify(observer.on_unit_end, spec.name, result.duration_ms, True)

    _notify(observer.on_run_end, ledger)
    return ledger


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000


def _notify(callback: Callable[..., Any], *args: Any) -> None:
    try:
        callback(*args)
    except Exception:  # noqa: BLE001
        log.exception("Observer callback %s failed", getattr(callback, "__name__", callback))
