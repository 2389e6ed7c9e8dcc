"""Tests for shared/locks.py."""

import asyncio

import pytest

from shared.locks import KeyedLock


class TestKeyedLock:
    @pytest.mark.asyncio
    async def test_serializes_same_key(self):
        """Blocks holding the same key should not interleave."""
        locks = KeyedLock()
        order: list[str] = []

        async def worker(name: str):
            async with locks.hold("user-1"):
                order.append(f"{name}-start")
                await asyncio.sleep(0.01)
                order.append(f"{name}-end")

        await asyncio.gather(worker("a"), worker("b"))

        assert order in (
            ["a-start", "a-end", "b-start", "b-end"],
            ["b-start", "b-end", "a-start", "a-end"],
        )

    @pytest.mark.asyncio
    async def test_different_keys_run_concurrently(self):
        locks = KeyedLock()
        entered = asyncio.Event()

        async def first():
            async with locks.hold("user-1"):
                await asyncio.wait_for(entered.wait(), timeout=1)

        async def second():
            async with locks.hold("user-2"):
                entered.set()

        await asyncio.gather(first(), second())

    @pytest.mark.asyncio
    async def test_is_locked(self):
        locks = KeyedLock()
        assert locks.is_locked("user-1") is False
        async with locks.hold("user-1"):
            assert locks.is_locked("user-1") is True
        assert locks.is_locked("user-1") is False

    @pytest.mark.asyncio
    async def test_releases_on_exception(self):
        """The lock should be released and discarded when the block raises."""
        locks = KeyedLock()
        with pytest.raises(RuntimeError):
            async with locks.hold("user-1"):
                raise RuntimeError("boom")
        assert locks._locks == {}
        async with locks.hold("user-1"):
            pass
