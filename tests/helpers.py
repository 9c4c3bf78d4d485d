"""Seeder builders shared by the test modules."""

from __future__ import annotations

from sprout.core import define_seeder


def returning(value):
    async def run(ctx, deps):
        return value

    return run


def failing(message="boom"):
    async def run(ctx, deps):
        raise RuntimeError(message)

    return run


def spec(name, *depends_on, run=None):
    return define_seeder(name, run or returning(name), depends_on=depends_on)
