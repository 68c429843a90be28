import asyncio
import logging
import random
from typing import Optional

from ops_dashboard.transaction_store import TransactionStore
from .transaction_generator import generate_live_transaction

logger = logging.getLogger(__name__)


class StreamSettings:

    """
    Settings for the live transaction feed.
    Args:
        enabled (bool): Whether new transactions are streamed in. Defaults to True.
        interval (float): Seconds between new transactions. Defaults to 3.0.
        max_transactions (int): Stop after this many insertions, None to run until stopped.
    """
    def __init__(
            self,
            enabled: bool = True,
            interval: float = 3.0,
            max_transactions: Optional[int] = None
    ):
        if interval < 0:
            raise ValueError(f"Stream interval cannot be negative: {interval}")
        self.enabled = enabled
        self.interval = interval
        self.max_transactions = max_transactions


async def stream_transactions(
        store: TransactionStore,
        settings: StreamSettings,
        stop_event: Optional[asyncio.Event] = None,
        rng: Optional[random.Random] = None
) -> int:
    """
    Insert live transactions at the top of the store until stopped.
    Returns the number of transactions inserted.
    """
    rng = rng or random.Random()
    stop_event = stop_event or asyncio.Event()
    inserted = 0

    if not settings.enabled:
        logger.info("[STREAM] Live feed disabled")
        return inserted

    while not stop_event.is_set() and settings.enabled:
        if settings.max_transactions is not None and inserted >= settings.max_transactions:
            break

        try:
            await asyncio.wait_for(stop_event.wait(), timeout=settings.interval)
            break
        except asyncio.TimeoutError:
            pass

        # Settings may have been switched off during the wait
        if not settings.enabled:
            logger.info("[STREAM] Live feed disabled while running")
            break

        sequence = inserted + 1
        txn = generate_live_transaction(sequence, rng)
        while txn.id in store:
            sequence += 1
            txn = generate_live_transaction(sequence, rng)

        store.insert_new(txn)
        inserted += 1
        logger.info("[STREAM] New transaction %s for %s", txn.id, txn.client_name)

    logger.info("[STREAM] Live feed stopped after %d transactions", inserted)
    return inserted
