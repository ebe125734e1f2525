"""Tests for in-flight request coalescing."""

from __future__ import annotations

import asyncio

import pytest

from design_drift.figma.dedup import InFlightRequests


@pytest.mark.asyncio
class TestInFlightRequests:
    """Tests for InFlightRequests.run."""

    async def test_single_call(self) -> None:
        in_flight = InFlightRequests()

        async def factory() -> str:
            return "result"

        assert await in_flight.run("k", factory) == "result"
        assert len(in_flight) == 0

    async def test_concurrent_identical_calls_share_one_execution(self) -> None:
        in_flight = InFlightRequests()
        gate = asyncio.Event()
        calls = 0

        async def factory() -> str:
            nonlocal calls
            calls += 1
            await gate.wait()
            return "shared"

        tasks = [asyncio.create_task(in_flight.run("k", factory)) for _ in range(5)]
        await asyncio.sleep(0)
        assert len(in_flight) == 1

        gate.set()
        results = await asyncio.gather(*tasks)

        assert calls == 1
        assert results == ["shared"] * 5
        assert len(in_flight) == 0

    async def test_different_keys_run_separately(self) -> None:
        in_flight = InFlightRequests()
        calls: list[str] = []

        def factory_for(key: str):
            async def factory() -> str:
                calls.append(key)
                await asyncio.sleep(0)
                return key

            return factory

        results = await asyncio.gather(
            in_flight.run("a", factory_for("a")),
            in_flight.run("b", factory_for("b")),
        )

        assert sorted(calls) == ["a", "b"]
        assert results == ["a", "b"]

    async def test_failure_shared_with_every_waiter(self) -> None:
        in_flight = InFlightRequests()
        gate = asyncio.Event()
        calls = 0

        async def factory() -> str:
            nonlocal calls
            calls += 1
            await gate.wait()
            raise RuntimeError("boom")

        tasks = [asyncio.create_task(in_flight.run("k", factory)) for _ in range(3)]
        await asyncio.sleep(0)
        gate.set()
        results = await asyncio.gather(*tasks, return_exceptions=True)

        assert calls == 1
        assert all(isinstance(r, RuntimeError) for r in results)
        assert len(in_flight) == 0

    async def test_entry_released_after_settling(self) -> None:
        """A call made after the first one settles starts a new execution."""
        in_flight = InFlightRequests()
        calls = 0

        async def factory() -> int:
            nonlocal calls
            calls += 1
            return calls

        assert await in_flight.run("k", factory) == 1
        assert await in_flight.run("k", factory) == 2

    async def test_entry_released_after_failure(self) -> None:
        in_flight = InFlightRequests()

        async def failing() -> str:
            raise ValueError("nope")

        async def succeeding() -> str:
            return "ok"

        with pytest.raises(ValueError):
            await in_flight.run("k", failing)

        assert await in_flight.run("k", succeeding) == "ok"

    async def test_cancelling_a_waiter_cancels_shared_call(self) -> None:
        in_flight = InFlightRequests()
        started = asyncio.Event()

        async def factory() -> str:
            started.set()
            await asyncio.sleep(3600)
            return "never"

        first = asyncio.create_task(in_flight.run("k", factory))
        second = asyncio.create_task(in_flight.run("k", factory))
        await started.wait()

        first.cancel()
        results = await asyncio.gather(first, second, return_exceptions=True)

        assert all(isinstance(r, asyncio.CancelledError) for r in results)
        assert len(in_flight) == 0
