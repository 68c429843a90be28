"""Selection tracking for bulk clearing."""

import logging
from typing import FrozenSet, Set

from .transaction_store import TransactionStore

logger = logging.getLogger(__name__)


class SelectionManager:
    """Tracks which pending transactions are selected for a bulk action."""

    def __init__(self, store: TransactionStore):
        self.store = store
        self._selected: Set[str] = set()

    @property
    def selected_ids(self) -> FrozenSet[str]:
        return frozenset(self._selected)

    @property
    def count(self) -> int:
        return len(self._selected)

    def is_selected(self, transaction_id: str) -> bool:
        return transaction_id in self._selected

    def toggle(self, transaction_id: str) -> bool:
        """
        Add or remove a transaction from the selection.

        Only pending transactions can be toggled; anything else, including
        unknown IDs, leaves the selection untouched.

        Returns:
            bool: True if the transaction is selected after the call
        """
        txn = self.store.get(transaction_id)
        if txn is None or not txn.is_pending:
            logger.debug("Ignoring toggle of non-pending id %s", transaction_id)
            return transaction_id in self._selected

        if transaction_id in self._selected:
            self._selected.discard(transaction_id)
            return False

        self._selected.add(transaction_id)
        return True

    def is_all_selected(self) -> bool:
        """Check if every pending transaction is selected."""
        pending = self.store.pending_ids()
        return bool(pending) and pending <= self._selected

    def select_all(self) -> FrozenSet[str]:
        """Select every pending transaction, or clear if all are selected."""
        if self.is_all_selected():
            self._selected.clear()
        else:
            self._selected = self.store.pending_ids()
        return self.selected_ids

    def clear(self) -> None:
        self._selected.clear()
