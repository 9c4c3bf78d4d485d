"""Tests for the step runner."""

from __future__ import annotations

import asyncio

import pytest

from sprout.cache import MemoryCache
from sprout.step import StepRunner
from sprout.utils import cache_key, slugify


class RecordingCache(MemoryCache):
    def __init__(self):
        super().__init__()
        self.gets = []
        self.sets = []

    async def get(self, key, default=None):
        self.gets.append(key)
        return await super().get(key, default)

    async def set(self, key, value):
        self.sets.append((key, value))
        await super().set(key, value)


class TestKeys:
    def test_slugify(self):
        assert slugify("Create 10 Users!") == "create-10-users"
        assert slugify("  --Already--slugged--  ") == "already-slugged"
        assert slugify("") == ""

    def test_cache_key_scoping(self):
        assert cache_key("userSeeder", "Create item") == "userSeeder:create-item"
        assert cache_key("", "Create item") == "create-item"


class TestStepRunner:
    @pytest.mark.asyncio
    async def test_runs_sync_and_async_steps(self):
        step = StepRunner(verbose=False)
        assert await step("Sync", lambda: 42) == 42

        async def later():
            await asyncio.sleep(0)
            return "async result"

        assert await step("Async", later) == "async result"

    @pytest.mark.asyncio
    async def test_propagates_errors(self, capsys):
        step = StepRunner()

        def boom():
            raise ValueError("Step failed")

        with pytest.raises(ValueError, match="Step failed"):
            await step("Failing step", boom)
        out = capsys.readouterr().out
        assert "Failing step" in out
        assert "Step failed" in out

    @pytest.mark.asyncio
    async def test_uses_scoped_cache_key(self):
        cache = RecordingCache()
        step = StepRunner(cache=cache, verbose=False)
        step.set_seeder_name("mySeeder")
        await step("Create item", lambda: "result", use_cache=True)
        assert cache.sets == [("mySeeder:create-item", "result")]

    @pytest.mark.asyncio
    async def test_cache_hit_skips_function(self, capsys):
        cache = RecordingCache()
        step = StepRunner(cache=cache, seeder_name="testSeeder")
        calls = []

        def work():
            calls.append(1)
            return {"id": 7}

        first = await step("Expensive op", work, use_cache=True)
        second = await step("Expensive op", work, use_cache=True)

        assert first == second == {"id": 7}
        assert calls == [1]
        assert len(cache.gets) == 2
        assert len(cache.sets) == 1
        assert "(cached)" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_no_cache_without_flag(self):
        cache = RecordingCache()
        step = StepRunner(cache=cache, verbose=False)
        await step("Plain", lambda: 1)
        assert cache.gets == [] and cache.sets == []

    @pytest.mark.asyncio
    async def test_warns_when_cache_missing(self, capsys):
        step = StepRunner()
        assert await step("Wants cache", lambda: 5, use_cache=True) == 5
        assert "Cache not configured" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_failed_step_is_not_cached(self):
        cache = RecordingCache()
        step = StepRunner(cache=cache, verbose=False)

        def boom():
            raise RuntimeError("nope")

        with pytest.raises(RuntimeError):
            await step("Broken", boom, use_cache=True)
        assert cache.sets == []

    @pytest.mark.asyncio
    async def test_cached_none_is_a_hit(self):
        cache = RecordingCache()
        step = StepRunner(cache=cache, seeder_name="rows", verbose=False)
        calls = []

        def insert():
            calls.append(1)

        assert await step("Insert rows", insert, use_cache=True) is None
        assert await step("Insert rows", insert, use_cache=True) is None
        assert calls == [1]
        assert cache.sets == [("rows:insert-rows", None)]
