from __future__ import annotations

import asyncio
import importlib
import pkgutil
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import typer
import yaml
from dotenv import load_dotenv
from faker import Faker

from .cache import JsonFileCache
from .core import DependencyError, SeederSpec, resolve_dependency_order
from .formatting import colorize, print_execution_order
from .instance import SeederInstance
from .logging import configure_logging, get_logger
from .utils import _get, cache_path, faker_locale, faker_seed, run_label, seeders_package


CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}

app = typer.Typer(
    add_completion=False,
    context_settings=CONTEXT_SETTINGS,
    help="Run seeders in dependency order",
)
log = get_logger("sprout.cli")


def load_config(path: str | Path) -> dict:
    p = Path(path)
    if not p.exists():
        log.info("No config at %s, using defaults", p)
        return {}
    with open(p, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def discover_seeders(package: str) -> List[SeederSpec]:
    """Import every module in ``package`` and collect ``@seeder`` functions.

    Seeders are returned module by module in definition order, which is the
    registry order used to break ties between independent seeders.
    """
    specs: Dict[str, SeederSpec] = {}
    try:
        pkg = importlib.import_module(package)
    except ModuleNotFoundError:
        log.warning("No seeders package found: %s", package)
        return []
    modules = [pkg]
    for m in pkgutil.iter_modules(getattr(pkg, "__path__", []), prefix=f"{package}."):
        try:
            modules.append(importlib.import_module(m.name))
        except Exception as e:  # noqa: BLE001
            log.warning("Failed to import %s: %s", m.name, e)
            continue
    for mod in modules:
        for obj in list(vars(mod).values()):
            spec = getattr(obj, "_seeder_spec", None)
            if not isinstance(spec, SeederSpec) or getattr(obj, "__module__", None) != mod.__name__:
                continue
            if spec.name not in specs:
                specs[spec.name] = spec
    return list(specs.values())


def instance_from_config(params: dict) -> SeederInstance:
    fake = Faker(faker_locale(params))
    seed = faker_seed(params)
    if seed is not None:
        fake.seed_instance(seed)
    path = cache_path(params)
    return SeederInstance(
        cache=JsonFileCache(path) if path else None,
        faker=fake,
        params=params,
    )


def dry_run(seeders: Sequence[SeederSpec]) -> int:
    """Print the execution order without running anything; return the exit code."""
    typer.echo(
        f"\n{colorize('🌱 Dry Run', 'cyan', bold=True)} "
        f"{colorize(f'({len(seeders)} seeders)', dim=True)}\n"
    )
    try:
        order = resolve_dependency_order(seeders)
    except DependencyError as e:
        typer.echo(colorize("Failed to resolve dependencies:", "red"), err=True)
        typer.echo(f"  {e}", err=True)
        return 1
    print_execution_order(order, {s.name: s.depends_on for s in seeders})
    return 0


def execute(
    instance: SeederInstance,
    seeders: Sequence[SeederSpec],
    label: str = "Seeders",
    continue_on_failure: bool = False,
    verbose: bool = True,
    print_results: bool = True,
) -> int:
    ledger = asyncio.run(
        instance.run(
            seeders,
            continue_on_failure=continue_on_failure,
            verbose=verbose,
            print_results=print_results,
            label=label,
        )
    )
    return 0 if ledger.success else 1


@app.command("list")
def list_seeders(
    config: str = typer.Option("configs/seed.yaml", help="Path to YAML config"),
    package: str = typer.Option("", help="Package to scan for @seeder functions"),
):
    """List discovered seeders in registry order."""
    params = load_config(config)
    specs = discover_seeders(package or seeders_package(params))
    if not specs:
        typer.echo("No seeders discovered. Decorate functions with @seeder() in the seeders package.")
        raise typer.Exit(code=0)
    typer.echo("Discovered seeders:")
    for spec in specs:
        deps = f" (depends on: {', '.join(spec.depends_on)})" if spec.depends_on else ""
        typer.echo(f"- {spec.name}{deps}")


@app.command()
def run(
    config: str = typer.Option("configs/seed.yaml", help="Path to YAML config"),
    package: str = typer.Option("", help="Package to scan for @seeder functions"),
    dry_run_: bool = typer.Option(
        False, "--dry-run", help="Show execution order without running seeders"
    ),
    continue_on_failure: Optional[bool] = typer.Option(
        None,
        "--continue-on-failure/--stop-on-failure",
        help="Skip dependents of failed seeders instead of stopping",
    ),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print the results table"),
):
    """Run all discovered seeders in dependency order."""
    params = load_config(config)
    configure_logging(_get(params, "logging", "level"), _get(params, "logging", "file"))

    specs = discover_seeders(package or seeders_package(params))
    label = run_label(params)
    if dry_run_:
        raise typer.Exit(code=dry_run(specs))

    if continue_on_failure is None:
        continue_on_failure = bool(_get(params, "seed", "continue_on_failure", default=False))
    verbose = not quiet and bool(_get(params, "seed", "verbose", default=True))
    code = execute(
        instance_from_config(params),
        specs,
        label=label,
        continue_on_failure=continue_on_failure,
        verbose=verbose,
        print_results=bool(_get(params, "seed", "print_results", default=True)),
    )
    raise typer.Exit(code=code)


def build_seed_app(instance: SeederInstance, seeders: Sequence[SeederSpec], name: str = "Seeders") -> typer.Typer:
    """Single-command CLI over an explicit list of seeders."""
    seed_app = typer.Typer(add_completion=False, context_settings=CONTEXT_SETTINGS)

    @seed_app.command(help=f"Runs all {len(seeders)} seeders in dependency order.")
    def seed(
        dry_run_: bool = typer.Option(
            False, "--dry-run", help="Show execution order without running seeders"
        ),
        continue_on_failure: bool = typer.Option(
            False, "--continue-on-failure", help="Skip dependents of failed seeders instead of stopping"
        ),
    ):
        if dry_run_:
            raise typer.Exit(code=dry_run(seeders))
        raise typer.Exit(
            code=execute(instance, seeders, label=name, continue_on_failure=continue_on_failure)
        )

    return seed_app


def main():  # pragma: no cover
    load_dotenv()
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
