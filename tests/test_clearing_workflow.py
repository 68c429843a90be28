"""Unit tests for the single and bulk clearing workflows."""

import asyncio
from datetime import datetime, timezone

import pytest

from ops_dashboard.clearing_executor import ClearingExecutor, SimulatedClearingExecutor
from ops_dashboard.clearing_workflow import BulkClearReport, bulk_clear, clear_one
from ops_dashboard.models.outcome import ClearingOutcome
from ops_dashboard.models.transaction import Transaction, TransactionStatus
from ops_dashboard.transaction_store import TransactionStore
from simulation.simulation_config import SimulationConfig


def make_txn(txn_id, amount=500.0, status=TransactionStatus.PENDING):
    return Transaction(txn_id, "Client", amount, status, datetime.now(timezone.utc))


class ScriptedExecutor(ClearingExecutor):
    """Executor returning predetermined outcomes and recording calls."""

    def __init__(self, failures=(), errors=(), delays=None):
        self.failures = set(failures)
        self.errors = set(errors)
        self.delays = delays or {}
        self.calls = []
        self.active = 0
        self.max_active = 0

    async def attempt_clear(self, transaction_id):
        self.calls.append(transaction_id)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(self.delays.get(transaction_id, 0))
            if transaction_id in self.errors:
                raise RuntimeError(f"executor crashed on {transaction_id}")
            return ClearingOutcome(transaction_id, transaction_id not in self.failures)
        finally:
            self.active -= 1


@pytest.fixture
def store():
    return TransactionStore(
        [
            make_txn("A", 5000),
            make_txn("B", 20000),
            make_txn("C", 100),
            make_txn("D", 300, TransactionStatus.CLEARED),
            make_txn("E", 400, TransactionStatus.FAILED),
        ]
    )


class TestClearOne:
    """Tests for single-item clearing."""

    def test_successful_clear(self, store):
        executor = ScriptedExecutor()
        in_flight = set()

        result = asyncio.run(clear_one("A", store, executor, False, in_flight))

        assert result is True
        assert store.get("A").status == TransactionStatus.CLEARED
        assert in_flight == set()

    def test_forced_failure_leaves_pending_and_unmarks(self, store):
        executor = ScriptedExecutor(failures={"C"})
        in_flight = set()

        result = asyncio.run(clear_one("C", store, executor, False, in_flight))

        assert result is False
        assert store.get("C").status == TransactionStatus.PENDING
        assert in_flight == set()

    def test_in_flight_marked_during_attempt(self, store):
        in_flight = set()
        seen = []

        class ObservingExecutor(ClearingExecutor):
            async def attempt_clear(self, transaction_id):
                seen.append(set(in_flight))
                return ClearingOutcome(transaction_id, True)

        asyncio.run(clear_one("A", store, ObservingExecutor(), False, in_flight))

        assert seen == [{"A"}]
        assert in_flight == set()

    def test_unknown_id_is_noop(self, store):
        executor = ScriptedExecutor()

        assert asyncio.run(clear_one("ghost", store, executor, True, set())) is False
        assert executor.calls == []

    def test_high_value_without_privilege_is_noop(self, store):
        executor = ScriptedExecutor()

        assert asyncio.run(clear_one("B", store, executor, False, set())) is False
        assert executor.calls == []
        assert store.get("B").status == TransactionStatus.PENDING

    def test_high_value_with_privilege(self, store):
        executor = ScriptedExecutor()

        assert asyncio.run(clear_one("B", store, executor, True, set())) is True
        assert store.get("B").status == TransactionStatus.CLEARED

    def test_already_in_flight_is_noop(self, store):
        executor = ScriptedExecutor()

        assert asyncio.run(clear_one("A", store, executor, False, {"A"})) is False
        assert executor.calls == []

    def test_in_flight_cleared_when_executor_raises(self, store):
        executor = ScriptedExecutor(errors={"A"})
        in_flight = set()

        with pytest.raises(RuntimeError):
            asyncio.run(clear_one("A", store, executor, False, in_flight))

        assert in_flight == set()
        assert store.get("A").status == TransactionStatus.PENDING


class TestBulkClear:
    """Tests for the bulk clearing workflow."""

    def test_empty_selection_is_noop(self, store):
        executor = ScriptedExecutor()
        before = store.snapshot()

        report = asyncio.run(bulk_clear(set(), store, executor, True))

        assert report == BulkClearReport()
        assert executor.calls == []
        assert store.snapshot() == before

    def test_high_value_dropped_without_privilege(self):
        store = TransactionStore([make_txn("A", 5000), make_txn("B", 20000)])
        executor = ScriptedExecutor()

        report = asyncio.run(bulk_clear({"A", "B"}, store, executor, False))

        assert executor.calls == ["A"]
        assert report.skipped == ["B"]
        assert store.get("A").status == TransactionStatus.CLEARED
        assert store.get("B").status == TransactionStatus.PENDING

    def test_all_successes_cleared(self):
        ids = [f"TXN-{i:03d}" for i in range(1, 6)]
        store = TransactionStore([make_txn(txn_id) for txn_id in ids])
        executor = ScriptedExecutor()

        report = asyncio.run(bulk_clear(ids, store, executor, False))

        assert sorted(report.cleared) == ids
        assert all(txn.status == TransactionStatus.CLEARED for txn in store.snapshot())

    def test_partial_failure_applies_only_successes(self, store):
        executor = ScriptedExecutor(failures={"C"})

        report = asyncio.run(bulk_clear(["A", "B", "C", "D", "E"], store, executor, True))

        assert report.cleared == ["A", "B"]
        assert report.failed == ["C"]
        assert report.skipped == ["D", "E"]
        assert store.get("C").status == TransactionStatus.PENDING
        assert store.get("D").status == TransactionStatus.CLEARED
        assert store.get("E").status == TransactionStatus.FAILED

    def test_erroring_attempt_does_not_block_others(self, store):
        executor = ScriptedExecutor(errors={"A"})

        report = asyncio.run(bulk_clear(["A", "C"], store, executor, False))

        assert report.failed == ["A"]
        assert report.cleared == ["C"]
        assert store.get("A").status == TransactionStatus.PENDING
        assert store.get("C").status == TransactionStatus.CLEARED

    def test_unknown_ids_skipped(self, store):
        executor = ScriptedExecutor()

        report = asyncio.run(bulk_clear(["ghost", "A"], store, executor, False))

        assert report.skipped == ["ghost"]
        assert executor.calls == ["A"]

    def test_results_applied_after_all_outcomes(self, store):
        executor = ScriptedExecutor(delays={"A": 0.01, "C": 0.05})
        observed = []

        async def run():
            task = asyncio.create_task(bulk_clear(["A", "C"], store, executor, False))
            await asyncio.sleep(0.03)
            observed.append(store.get("A").status)
            return await task

        asyncio.run(run())

        assert observed == [TransactionStatus.PENDING]
        assert store.get("A").status == TransactionStatus.CLEARED
        assert store.get("C").status == TransactionStatus.CLEARED

    def test_filter_uses_state_at_invocation(self, store):
        executor = ScriptedExecutor(delays={"A": 0.02, "C": 0.02})
        held = store.get("A")

        async def run():
            task = asyncio.create_task(bulk_clear(["A", "C"], store, executor, False))
            await asyncio.sleep(0.005)
            # Changes made while attempts are in flight do not undo the filter
            store.update_status("A", TransactionStatus.FAILED)
            store.insert_new(make_txn("LATE", 100))
            return await task

        report = asyncio.run(run())

        assert executor.calls == ["A", "C"]
        assert report.attempted == ["A", "C"]
        assert store.get("A").status == TransactionStatus.CLEARED
        assert store.get("C").status == TransactionStatus.CLEARED
        assert store.get("LATE").status == TransactionStatus.PENDING
        assert held.status == TransactionStatus.PENDING

    def test_excluded_ids_skipped_without_attempt(self, store):
        executor = ScriptedExecutor()

        report = asyncio.run(
            bulk_clear(["A", "C"], store, executor, False, exclude=frozenset({"A"}))
        )

        assert executor.calls == ["C"]
        assert report.skipped == ["A"]
        assert store.get("A").status == TransactionStatus.PENDING

    def test_attempts_run_concurrently(self):
        ids = [f"T{i}" for i in range(8)]
        store = TransactionStore([make_txn(txn_id) for txn_id in ids])
        executor = ScriptedExecutor(delays={txn_id: 0.01 for txn_id in ids})

        asyncio.run(bulk_clear(ids, store, executor, False))

        assert executor.max_active == 8

    def test_max_concurrency_bounds_fan_out(self):
        ids = [f"T{i}" for i in range(8)]
        store = TransactionStore([make_txn(txn_id) for txn_id in ids])
        executor = ScriptedExecutor(delays={txn_id: 0.01 for txn_id in ids})

        report = asyncio.run(bulk_clear(ids, store, executor, False, max_concurrency=3))

        assert executor.max_active == 3
        assert len(report.cleared) == 8

    def test_invalid_max_concurrency(self, store):
        with pytest.raises(ValueError):
            asyncio.run(bulk_clear(["A"], store, ScriptedExecutor(), False, max_concurrency=0))

    def test_duplicate_ids_attempted_once(self, store):
        executor = ScriptedExecutor()

        asyncio.run(bulk_clear(["A", "A"], store, executor, False))

        assert executor.calls == ["A"]

    def test_with_simulated_executor(self):
        ids = [f"T{i}" for i in range(20)]
        store = TransactionStore([make_txn(txn_id) for txn_id in ids])
        executor = SimulatedClearingExecutor(SimulationConfig(latency=0, success_rate=0.0))

        report = asyncio.run(bulk_clear(ids, store, executor, False))

        assert report.cleared == []
        assert sorted(report.failed) == sorted(ids)
        assert store.pending_ids() == set(ids)
