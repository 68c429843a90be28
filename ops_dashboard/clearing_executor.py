"""Clearing executors that report the outcome of a clearing attempt."""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from simulation.exceptions.clearing_exception import ClearingFailure
from simulation.simulation_config import SimulationConfig

from .models.outcome import ClearingOutcome

logger = logging.getLogger(__name__)


class ClearingExecutor(ABC):
    """
    Strategy for attempting to clear one transaction.

    Implementations never touch the transaction store and never raise for a
    rejected clearing; rejection is reported as ClearingOutcome(success=False).
    """

    @abstractmethod
    async def attempt_clear(self, transaction_id: str) -> ClearingOutcome:
        """Attempt to clear a transaction and report the outcome."""


class SimulatedClearingExecutor(ClearingExecutor):
    """Executor that waits a fixed latency and then succeeds at random."""

    def __init__(self, config: Optional[SimulationConfig] = None):
        self.config = config or SimulationConfig()

    async def attempt_clear(self, transaction_id: str) -> ClearingOutcome:
        logger.info("Attempting to clear %s", transaction_id)
        await self.config.simulate_latency(transaction_id)

        try:
            self.config.maybe_fail(transaction_id)
        except ClearingFailure as e:
            logger.info("Clearing failed for %s: %s", transaction_id, e.message)
            return ClearingOutcome(transaction_id=transaction_id, success=False)

        logger.info("Clearing succeeded for %s", transaction_id)
        return ClearingOutcome(transaction_id=transaction_id, success=True)
