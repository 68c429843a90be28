"""Permission checks for clearing transactions."""

from typing import Iterable, List, Mapping

from .models.transaction import Transaction


def is_clearable(transaction: Transaction, privileged: bool) -> bool:
    """Check if a transaction may be cleared under the given privilege level."""
    return transaction.is_pending and (not transaction.is_high_value or privileged)


def filter_clearable(
    transaction_ids: Iterable[str],
    transactions_by_id: Mapping[str, Transaction],
    privileged: bool,
) -> List[str]:
    """Keep only IDs that exist and are clearable; others are dropped silently."""
    allowed = []
    for txn_id in transaction_ids:
        txn = transactions_by_id.get(txn_id)
        if txn is not None and is_clearable(txn, privileged):
            allowed.append(txn_id)
    return allowed
