"""In-memory transaction store for the operations dashboard."""

import logging
import threading
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Set

from .models.transaction import Transaction, TransactionStatus

logger = logging.getLogger(__name__)


class TransactionStore:
    """
    Ordered, in-memory collection of transactions.

    Records are only changed through insert_new, load, update_status and
    apply_statuses. All mutations are serialized on a re-entrant lock so a
    streaming producer thread can feed the store safely.
    """

    def __init__(self, transactions: Optional[Iterable[Transaction]] = None):
        self._order: List[str] = []
        self._records: Dict[str, Transaction] = {}
        self.lock = threading.RLock()

        if transactions is not None:
            self.load(transactions)

    def __len__(self) -> int:
        return len(self._order)

    def __contains__(self, transaction_id: str) -> bool:
        return transaction_id in self._records

    def load(self, transactions: Iterable[Transaction]) -> None:
        """Replace the store contents with a fresh batch of transactions."""
        with self.lock:
            order: List[str] = []
            records: Dict[str, Transaction] = {}
            for txn in transactions:
                if txn.id in records:
                    raise ValueError(f"Duplicate transaction id: {txn.id}")
                order.append(txn.id)
                records[txn.id] = txn

            self._order = order
            self._records = records
            logger.info("Loaded %d transactions", len(order))

    def insert_new(self, transaction: Transaction, at_top: bool = True) -> None:
        """Insert a new transaction, newest first by default."""
        with self.lock:
            if transaction.id in self._records:
                raise ValueError(f"Duplicate transaction id: {transaction.id}")

            self._records[transaction.id] = transaction
            if at_top:
                self._order.insert(0, transaction.id)
            else:
                self._order.append(transaction.id)

            logger.debug("Inserted transaction %s", transaction.id)

    def get(self, transaction_id: str) -> Optional[Transaction]:
        """Get transaction by ID."""
        with self.lock:
            return self._records.get(transaction_id)

    def update_status(self, transaction_id: str, status: TransactionStatus) -> bool:
        """Update the status of a single transaction; unknown ids are a no-op."""
        with self.lock:
            txn = self._records.get(transaction_id)
            if txn is None:
                logger.debug("Status update skipped, unknown id %s", transaction_id)
                return False

            self._records[transaction_id] = replace(txn, status=status)
            return True

    def apply_statuses(
        self, transaction_ids: Iterable[str], status: TransactionStatus
    ) -> int:
        """Apply one status to many transactions under a single lock hold."""
        with self.lock:
            changed = 0
            for txn_id in transaction_ids:
                txn = self._records.get(txn_id)
                if txn is None:
                    continue
                self._records[txn_id] = replace(txn, status=status)
                changed += 1
            return changed

    def snapshot(self) -> List[Transaction]:
        """Get an ordered copy of the current transactions."""
        with self.lock:
            return [self._records[txn_id] for txn_id in self._order]

    def pending_ids(self) -> Set[str]:
        """Get IDs of all transactions currently pending."""
        with self.lock:
            return {
                txn_id for txn_id, txn in self._records.items() if txn.is_pending
            }

    def get_status_counts(self) -> Dict[str, int]:
        """Count transactions per status."""
        with self.lock:
            counts = {status.value: 0 for status in TransactionStatus}
            for txn in self._records.values():
                counts[txn.status.value] += 1
            return counts

    def get_summary(self) -> Dict[str, object]:
        """Summarize store contents for status reporting."""
        with self.lock:
            pending = [txn for txn in self._records.values() if txn.is_pending]
            return {
                "total": len(self._order),
                "status_counts": self.get_status_counts(),
                "pending_amount": round(sum(txn.amount for txn in pending), 2),
                "high_value_pending": sum(1 for txn in pending if txn.is_high_value),
            }

    def print_status(self) -> None:
        """Print current store status."""
        summary = self.get_summary()
        print("\n=== TRANSACTION STORE ===")
        print(f"Transactions: {summary['total']}")
        for status, count in summary["status_counts"].items():
            print(f"  {status}: {count}")
        print(f"Pending amount: ${summary['pending_amount']:,.2f}")
        print(f"High-value pending: {summary['high_value_pending']}")
        print("=========================\n")
