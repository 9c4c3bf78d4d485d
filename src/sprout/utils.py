"""Small helpers for cache keys and config lookups."""

from __future__ import annotations

import inspect
import re
from typing import Dict


def _get(d: Dict, *keys, default=None):
    cur = d
    for k in keys:
        if not isinstance(cur, dict):
            return default
        cur = cur.get(k)
        if cur is None:
            return default
    return cur


def slugify(s: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", (s or "").lower()).strip("-")


def cache_key(seeder_name: str, description: str) -> str:
    slug = slugify(description)
    return f"{seeder_name}:{slug}" if seeder_name else slug


def seeders_package(p: Dict) -> str:
    return _get(p, "seed", "package", default="seeders")


def run_label(p: Dict) -> str:
    return _get(p, "seed", "name", default="Seeders")


def faker_locale(p: Dict) -> str:
    return _get(p, "faker", "locale", default="en_US")


def faker_seed(p: Dict) -> int | None:
    value = _get(p, "faker", "seed")
    return int(value) if value is not None else None


def cache_path(p: Dict) -> str | None:
    if not _get(p, "cache", "enabled", default=True):
        return None
    return _get(p, "cache", "path", default=".sprout/cache.json")


async def maybe_await(value):
    """Await ``value`` if it is awaitable, otherwise return it unchanged."""
    if inspect.isawaitable(value):
        return await value
    return value
