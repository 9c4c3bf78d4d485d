from __future__ import annotations

from typing import Awaitable, Callable, TypeVar, Union

import typer

from .cache import SeederCache
from .formatting import colorize, print_step
from .logging import get_logger
from .utils import cache_key, maybe_await


T = TypeVar("T")

_MISSING = object()

log = get_logger("sprout.step")


class StepRunner:
    """Runs named steps inside a seeder, optionally caching their results.

    Cache keys are scoped by the current seeder name, which the engine sets
    before each seeder runs.
    """

    def __init__(self, cache: SeederCache | None = None, seeder_name: str = "", verbose: bool = True):
        self.cache = cache
        self.seeder_name = seeder_name
        self.verbose = verbose

    def set_seeder_name(self, name: str) -> None:
        self.seeder_name = name

    async def __call__(
        self,
        description: str,
        fn: Callable[[], Union[Awaitable[T], T]],
        use_cache: bool = False,
    ) -> T:
        key = cache_key(self.seeder_name, description)
        cached = False
        try:
            if use_cache and self.cache is not None:
                result = await self.cache.get(key, _MISSING)
                if result is not _MISSING:
                    cached = True
                else:
                    result = await maybe_await(fn())
                    await self.cache.set(key, result)
            else:
                if use_cache:
                    log.info("Cache requested for step %r but no cache is configured", key)
                    if self.verbose:
                        typer.echo(colorize("    ⚠ Cache not configured, running without cache", "yellow"))
                result = await maybe_await(fn())
        except Exception as e:
            log.debug("Step failed: %s", key)
            if self.verbose:
                print_step(description, ok=False, error=e)
            raise

        log.debug("Step done: %s (cached=%s)", key, cached)
        if self.verbose:
            print_step(description, ok=True, cached=cached)
        return result

