"""Single and bulk clearing workflows."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import AbstractSet, Iterable, List, MutableSet, Optional

from .clearing_executor import ClearingExecutor
from .models.outcome import ClearingOutcome
from .models.transaction import TransactionStatus
from .permission_policy import filter_clearable, is_clearable
from .transaction_store import TransactionStore

logger = logging.getLogger(__name__)


@dataclass
class BulkClearReport:
    """Summary of what a bulk clear did with each requested ID."""

    requested: List[str] = field(default_factory=list)
    attempted: List[str] = field(default_factory=list)
    cleared: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)


async def clear_one(
    transaction_id: str,
    store: TransactionStore,
    executor: ClearingExecutor,
    privileged: bool,
    in_flight: MutableSet[str],
) -> bool:
    """
    Clear a single transaction.

    Args:
        transaction_id: Transaction to clear
        store: Store holding the transaction
        executor: Executor performing the clearing attempt
        privileged: Whether super admin privilege is active
        in_flight: Shared set of IDs with a clearing attempt underway

    Returns:
        bool: True if the transaction was cleared
    """
    txn = store.get(transaction_id)
    if txn is None:
        logger.info("Clear skipped, transaction %s not found", transaction_id)
        return False

    if not is_clearable(txn, privileged):
        logger.info(
            "Clear skipped for %s (status=%s, high_value=%s, privileged=%s)",
            transaction_id,
            txn.status.value,
            txn.is_high_value,
            privileged,
        )
        return False

    if transaction_id in in_flight:
        logger.debug("Clear already in progress for %s", transaction_id)
        return False

    in_flight.add(transaction_id)
    try:
        outcome = await executor.attempt_clear(transaction_id)
        if outcome.success:
            store.update_status(transaction_id, TransactionStatus.CLEARED)
            logger.info("Transaction %s cleared", transaction_id)
            return True

        logger.warning("Transaction %s remains pending after failed clear", transaction_id)
        return False
    finally:
        in_flight.discard(transaction_id)


async def _attempt(
    executor: ClearingExecutor,
    transaction_id: str,
    semaphore: Optional[asyncio.Semaphore],
) -> ClearingOutcome:
    if semaphore is None:
        return await executor.attempt_clear(transaction_id)
    async with semaphore:
        return await executor.attempt_clear(transaction_id)


async def bulk_clear(
    selected_ids: Iterable[str],
    store: TransactionStore,
    executor: ClearingExecutor,
    privileged: bool,
    max_concurrency: Optional[int] = None,
    exclude: Optional[AbstractSet[str]] = None,
) -> BulkClearReport:
    """
    Clear a batch of selected transactions.

    Ineligible IDs are skipped without error. Attempts run concurrently and
    independently; a failed or erroring attempt does not affect the others.
    Successful IDs are marked cleared together once every attempt is done.

    Args:
        selected_ids: IDs chosen by the operator
        store: Store holding the transactions
        executor: Executor performing each clearing attempt
        privileged: Whether super admin privilege is active
        max_concurrency: Upper bound on attempts in flight, None for unbounded
        exclude: IDs with a clearing attempt already underway; skipped

    Returns:
        BulkClearReport: Per-ID breakdown of the operation
    """
    requested = list(dict.fromkeys(selected_ids))
    report = BulkClearReport(requested=requested)
    if not requested:
        return report

    if max_concurrency is not None and max_concurrency < 1:
        raise ValueError(f"max_concurrency must be at least 1: {max_concurrency}")

    snapshot = {txn.id: txn for txn in store.snapshot()}
    busy = exclude or frozenset()
    allowed_ids = [
        txn_id
        for txn_id in filter_clearable(requested, snapshot, privileged)
        if txn_id not in busy
    ]
    allowed = set(allowed_ids)
    report.skipped = [txn_id for txn_id in requested if txn_id not in allowed]
    report.attempted = allowed_ids

    if report.skipped:
        logger.info("Skipping %d ineligible or in-flight transactions: %s", len(report.skipped), report.skipped)
    if not allowed_ids:
        return report

    logger.info("Bulk clearing %d transactions", len(allowed_ids))
    semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency else None
    results = await asyncio.gather(
        *(_attempt(executor, txn_id, semaphore) for txn_id in allowed_ids),
        return_exceptions=True,
    )

    successful_ids = []
    for txn_id, result in zip(allowed_ids, results):
        if isinstance(result, BaseException):
            logger.error(
                "Clearing attempt for %s raised unexpectedly",
                txn_id,
                exc_info=(type(result), result, result.__traceback__),
            )
            report.failed.append(txn_id)
        elif result.success:
            successful_ids.append(txn_id)
        else:
            report.failed.append(txn_id)

    store.apply_statuses(successful_ids, TransactionStatus.CLEARED)
    report.cleared = successful_ids

    logger.info(
        "Bulk clear finished: %d cleared, %d failed, %d skipped",
        len(report.cleared),
        len(report.failed),
        len(report.skipped),
    )
    return report
