"""Seeder instances bind a context factory, cache and hooks to the engine.

Example:
    ```python
    from sprout import create_seeder_instance

    instance = create_seeder_instance(
        context=lambda base: AppContext(base=base, db=connect()),
        cache=JsonFileCache(".sprout/cache.json"),
    )

    org = instance.define("org", create_org)
    users = instance.define("users", create_users, depends_on=[org])

    ledger = asyncio.run(instance.run([org, users]))
    ```

Every seeder receives the object returned by ``context`` (by default the
:class:`BaseContext` itself) and a mapping of its dependencies' outputs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Sequence

from faker import Faker

from .cache import SeederCache
from .core import DependencyRef, RunFn, SeederSpec, as_specs, define_seeder
from .formatting import ConsoleObserver, print_start_banner
from .results import RunLedger
from .runner import Hook, RunConfig, RunObserver, run_seeders_core
from .state import RUN_STATE, RunState
from .step import StepRunner
from .utils import maybe_await


@dataclass
class BaseContext:
    """Helpers every seeder can rely on."""

    faker: Faker
    step: StepRunner
    params: dict = field(default_factory=dict)


ContextFactory = Callable[[BaseContext], Any]


def _base_only(base: BaseContext) -> BaseContext:
    return base


class SeederInstance:
    def __init__(
        self,
        context: ContextFactory | None = None,
        cache: SeederCache | None = None,
        on_before_all: Hook | None = None,
        on_after_all: Hook | None = None,
        faker: Faker | None = None,
        params: dict | None = None,
        state: RunState | None = None,
    ):
        self.context = context or _base_only
        self.cache = cache
        self.on_before_all = on_before_all
        self.on_after_all = on_after_all
        self.faker = faker or Faker()
        self.params = params or {}
        self.state = state or RUN_STATE

    def define(
        self,
        name: str,
        run: RunFn,
        depends_on: Iterable[DependencyRef] = (),
        description: str | None = None,
    ) -> SeederSpec:
        return define_seeder(name=name, run=run, depends_on=depends_on, description=description)

    async def run(
        self,
        seeders: Sequence[SeederSpec | Callable[..., Any]],
        *,
        continue_on_failure: bool = False,
        verbose: bool = True,
        print_results: bool = True,
        label: str | None = None,
        observer: RunObserver | None = None,
    ) -> RunLedger:
        """Run ``seeders`` in dependency order with a fresh context.

        The context factory is invoked once per run, after dependencies
        resolve and before the first seeder starts.
        """
        specs = as_specs(seeders)
        step = StepRunner(cache=self.cache, verbose=verbose)
        base = BaseContext(faker=self.faker, step=step, params=self.params)

        async def build_context() -> Any:
            return await maybe_await(self.context(base))

        config = RunConfig(
            context=build_context,
            set_seeder_name=step.set_seeder_name,
            on_before_all=self.on_before_all,
            on_after_all=self.on_after_all,
            state=self.state,
        )
        if observer is None and (verbose or print_results):
            observer = ConsoleObserver(verbose=verbose, print_results=print_results)
        if verbose:
            print_start_banner(label, total=len(specs))
        return await run_seeders_core(
            specs, config, continue_on_failure=continue_on_failure, observer=observer
        )

    def run_cli(
        self,
        seeders: Sequence[SeederSpec | Callable[..., Any]],
        name: str = "Seeders",
        args: Sequence[str] | None = None,
    ) -> None:
        """Run ``seeders`` as a command line program and exit.

        Supports ``--help``/``-h``, ``--dry-run`` and ``--continue-on-failure``;
        exits 0 when the run (or dry run) succeeds and 1 otherwise.
        """
        from .cli import build_seed_app

        app = build_seed_app(self, as_specs(seeders), name=name)
        app(args=list(args) if args is not None else None, prog_name=name.lower())

    def is_seeding_active(self) -> bool:
        return self.state.active


def create_seeder_instance(
    context: ContextFactory | None = None,
    cache: SeederCache | None = None,
    on_before_all: Hook | None = None,
    on_after_all: Hook | None = None,
    faker: Faker | None = None,
    params: dict | None = None,
) -> SeederInstance:
    return SeederInstance(
        context=context,
        cache=cache,
        on_before_all=on_before_all,
        on_after_all=on_after_all,
        faker=faker,
        params=params,
    )
