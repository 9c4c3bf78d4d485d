"""Seeder orchestration: run interdependent seeders in dependency order.

Provides seeder definitions, dependency resolution, an async execution engine
with a continue-on-failure policy, cached steps, and a Typer CLI.
"""

from .core import (
    CircularDependencyError,
    DependencyError,
    MissingDependencyError,
    SeederSpec,
    define_seeder,
    resolve_dependency_order,
    seeder,
)
from .cache import JsonFileCache, MemoryCache, SeederCache
from .instance import BaseContext, SeederInstance, create_seeder_instance
from .results import RunLedger, SeederResult, SeederStatus
from .runner import DependencyOutputs, RunConfig, RunObserver, UndeclaredDependencyError, run_seeders_core
from .state import is_seeding_active
from .step import StepRunner

__all__ = [
    "BaseContext",
    "CircularDependencyError",
    "DependencyError",
    "DependencyOutputs",
    "JsonFileCache",
    "MemoryCache",
    "MissingDependencyError",
    "RunConfig",
    "RunLedger",
    "RunObserver",
    "SeederCache",
    "SeederInstance",
    "SeederResult",
    "SeederSpec",
    "SeederStatus",
    "StepRunner",
    "UndeclaredDependencyError",
    "create_seeder_instance",
    "define_seeder",
    "is_seeding_active",
    "resolve_dependency_order",
    "run_seeders_core",
    "seeder",
]
