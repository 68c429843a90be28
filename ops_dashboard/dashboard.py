"""Operations dashboard state and clearing entry points."""

import logging
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Set

from simulation.simulation_config import SimulationConfig

from .clearing_executor import ClearingExecutor, SimulatedClearingExecutor
from .clearing_workflow import BulkClearReport, bulk_clear, clear_one
from .models.transaction import Transaction
from .permission_policy import is_clearable
from .selection_manager import SelectionManager
from .transaction_store import TransactionStore

logger = logging.getLogger(__name__)


class OpsDashboard:
    """
    Client-side state behind the operations dashboard:
    - Transaction store with the current list of transactions
    - Selection for bulk actions
    - Super admin privilege flag gating high-value clearing
    - In-flight markers for single and bulk clearing
    """

    def __init__(
        self,
        transactions: Optional[Iterable[Transaction]] = None,
        config: Optional[SimulationConfig] = None,
        executor: Optional[ClearingExecutor] = None,
        max_concurrency: Optional[int] = None,
        super_admin: bool = False,
    ):
        # Core state
        self.store = TransactionStore(transactions)
        self.selection = SelectionManager(self.store)

        # Clearing
        self.config = config or SimulationConfig()
        self.executor = executor or SimulatedClearingExecutor(self.config)
        self.max_concurrency = max_concurrency

        self._super_admin = super_admin
        self._in_flight: Set[str] = set()
        self._bulk_active = 0

    @property
    def super_admin(self) -> bool:
        return self._super_admin

    @super_admin.setter
    def super_admin(self, value: bool) -> None:
        self._super_admin = bool(value)
        logger.info("Super admin mode %s", "enabled" if self._super_admin else "disabled")

    def toggle_super_admin(self) -> bool:
        self.super_admin = not self._super_admin
        return self._super_admin

    @property
    def transactions(self) -> List[Transaction]:
        return self.store.snapshot()

    @property
    def selected_ids(self) -> FrozenSet[str]:
        return self.selection.selected_ids

    @property
    def in_flight_ids(self) -> FrozenSet[str]:
        return frozenset(self._in_flight)

    @property
    def bulk_in_progress(self) -> bool:
        return self._bulk_active > 0

    def toggle(self, transaction_id: str) -> bool:
        return self.selection.toggle(transaction_id)

    def select_all(self) -> FrozenSet[str]:
        return self.selection.select_all()

    def can_clear(self, transaction_id: str) -> bool:
        """Check if the clear action is available for a transaction right now."""
        txn = self.store.get(transaction_id)
        return (
            txn is not None
            and transaction_id not in self._in_flight
            and is_clearable(txn, self._super_admin)
        )

    async def clear_one(self, transaction_id: str) -> bool:
        """Clear a single transaction with the current privilege level."""
        return await clear_one(
            transaction_id,
            self.store,
            self.executor,
            self._super_admin,
            self._in_flight,
        )

    async def bulk_clear(self, transaction_ids: Optional[Iterable[str]] = None) -> BulkClearReport:
        """
        Clear the given transactions, or the current selection if none given.

        The selection is emptied afterwards regardless of individual outcomes.
        """
        ids = list(transaction_ids) if transaction_ids is not None else list(self.selection.selected_ids)
        if not ids:
            return BulkClearReport()

        # Ids already in flight are skipped and keep their own marker
        busy = frozenset(self._in_flight)
        marked = set(ids) - busy
        self._bulk_active += 1
        self._in_flight.update(marked)
        try:
            return await bulk_clear(
                ids,
                self.store,
                self.executor,
                self._super_admin,
                max_concurrency=self.max_concurrency,
                exclude=busy,
            )
        finally:
            self._in_flight.difference_update(marked)
            self.selection.clear()
            self._bulk_active -= 1

    def confirm_bulk_clear(self) -> Dict[str, Any]:
        """Summarize the current selection for the confirmation dialog."""
        selected = [self.store.get(txn_id) for txn_id in self.selection.selected_ids]
        selected = [txn for txn in selected if txn is not None]
        clearable = [txn for txn in selected if is_clearable(txn, self._super_admin)]

        return {
            "selected_count": len(self.selection.selected_ids),
            "clearable_count": len(clearable),
            "skipped_high_value_count": sum(
                1 for txn in selected if txn.is_high_value and not self._super_admin
            ),
            "clearable_amount": round(sum(txn.amount for txn in clearable), 2),
        }

    def get_system_status(self) -> Dict[str, Any]:
        """Get current dashboard status."""
        summary = self.store.get_summary()
        return {
            "transactions": summary["total"],
            "status_counts": summary["status_counts"],
            "selected": self.selection.count,
            "in_flight": len(self._in_flight),
            "bulk_in_progress": self.bulk_in_progress,
            "super_admin": self._super_admin,
        }

    def print_status(self) -> None:
        """Print current dashboard status."""
        status = self.get_system_status()
        print("\n=== DASHBOARD STATUS ===")
        print(f"Transactions: {status['transactions']}")
        for name, count in status["status_counts"].items():
            print(f"  {name}: {count}")
        print(f"Selected: {status['selected']}")
        print(f"In flight: {status['in_flight']}")
        print(f"Super admin: {'ON' if status['super_admin'] else 'OFF'}")
        print("========================\n")
