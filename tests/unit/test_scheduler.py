"""
Unit tests for the Scheduler.

Tests cover:
1. Eager first cycle
2. Skip-if-running ticks (no overlapping cycles)
3. Failure isolation between cycles
"""

import asyncio
from decimal import Decimal

import pytest

from auction_operator.core.dispatcher import ActionDispatcher
from auction_operator.core.engine import ReconciliationEngine
from auction_operator.core.errors import DispatchError
from auction_operator.core.reader import StateReader
from auction_operator.core.scheduler import Scheduler

from tests.conftest import FakeAuctionContract


async def run_for(scheduler: Scheduler, seconds: float) -> None:
    task = asyncio.create_task(scheduler.run())
    await asyncio.sleep(seconds)
    scheduler.stop()
    await task


class TestScheduling:
    """Cadence and serialization."""

    def test_first_cycle_runs_immediately(self):
        calls = []

        async def cycle():
            calls.append(1)

        scheduler = Scheduler(cycle, period=10)
        asyncio.run(asyncio.wait_for(run_for(scheduler, 0.05), timeout=20))

        assert calls == [1]
        assert scheduler.stats.cycles_run == 1

    def test_runs_on_every_tick(self):
        calls = []

        async def cycle():
            calls.append(1)

        scheduler = Scheduler(cycle, period=0.02)
        asyncio.run(run_for(scheduler, 0.2))

        assert len(calls) >= 3
        assert scheduler.stats.ticks_skipped == 0

    def test_slow_cycle_never_overlaps(self):
        state = {"active": 0, "max_active": 0, "completed": 0}

        async def slow_cycle():
            state["active"] += 1
            state["max_active"] = max(state["max_active"], state["active"])
            try:
                await asyncio.sleep(0.15)
                state["completed"] += 1
            finally:
                state["active"] -= 1

        scheduler = Scheduler(slow_cycle, period=0.03)
        asyncio.run(run_for(scheduler, 0.5))

        assert state["max_active"] == 1
        assert state["completed"] >= 2
        assert scheduler.stats.ticks_skipped > 0

    def test_delayed_confirmations_keep_one_command_in_flight(self):
        contract = FakeAuctionContract(proof_submitted=True)
        contract.set_winner()
        contract.confirm_delay = 0.1
        engine = ReconciliationEngine(
            StateReader(contract), ActionDispatcher(contract),
            start_price=Decimal(100), end_price=Decimal(10),
        )
        scheduler = Scheduler(engine.reconcile, period=0.02)
        asyncio.run(run_for(scheduler, 0.5))

        assert contract.max_in_flight == 1
        assert scheduler.stats.ticks_skipped > 0


class TestFailureIsolation:
    """A failing cycle never stops the loop."""

    def test_operator_error_is_swallowed(self):
        outcomes = []

        async def cycle():
            if not outcomes:
                outcomes.append("fail")
                raise DispatchError("claimPayment() reverted", step="confirm", call="claimPayment")
            outcomes.append("ok")

        scheduler = Scheduler(cycle, period=0.02)
        asyncio.run(run_for(scheduler, 0.15))

        assert outcomes[0] == "fail"
        assert "ok" in outcomes
        assert scheduler.stats.cycles_failed == 1

    def test_unexpected_error_is_swallowed(self):
        calls = []

        async def cycle():
            calls.append(1)
            raise RuntimeError("boom")

        scheduler = Scheduler(cycle, period=0.02)
        asyncio.run(run_for(scheduler, 0.1))

        assert len(calls) >= 2
        assert scheduler.stats.cycles_failed == len(calls)

    def test_run_cycle_reports_outcome(self):
        async def ok():
            return None

        async def bad():
            raise DispatchError("rejected")

        assert asyncio.run(Scheduler(ok).run_cycle()) is True
        assert asyncio.run(Scheduler(bad).run_cycle()) is False


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
