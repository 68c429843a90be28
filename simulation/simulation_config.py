import asyncio
import logging
import random
from collections import defaultdict
from typing import Optional

from .exceptions.clearing_exception import ClearingFailure

logger = logging.getLogger(__name__)


class SimulationConfig:

    """
    Configuration for simulated clearing.
    Controls the fixed latency of every clearing attempt and the probability
    that an attempt succeeds. It also collects runtime metrics for the
    console reports.
    """

    """Initializes the SimulationConfig with default or specified parameters.
    Args:
        enabled (bool): Whether latency and random failures are simulated. Defaults to True.
        latency (float): Delay applied to every attempt, in seconds. Defaults to 1.5.
        success_rate (float): Probability that an attempt succeeds. Defaults to 0.9.
        rng (random.Random): Random source for outcomes. Defaults to a fresh Random.
    """
    def __init__(
            self,
            enabled: bool = True,
            latency: float = 1.5,
            success_rate: float = 0.9,
            rng: Optional[random.Random] = None
    ):
        if latency < 0:
            raise ValueError(f"Latency cannot be negative: {latency}")
        if not 0.0 <= success_rate <= 1.0:
            raise ValueError(f"Success rate must be between 0 and 1: {success_rate}")

        self.enabled = enabled
        self.latency = latency
        self.success_rate = success_rate
        self.rng = rng if rng is not None else random.Random()

        # Simulation metrics
        self.total_attempts = 0
        self.failures_injected = 0
        self.total_delay_time = 0.0
        self.failures_by_context = defaultdict(int)

    @property
    def failure_rate(self) -> float:
        return 1.0 - self.success_rate

    """
    Suspends for the configured latency if simulation is enabled.
    Args:
        context (str): The context of the delay, for logging purposes.
    """
    async def simulate_latency(self, context):
        if not self.enabled or self.latency <= 0:
            return
        self.total_delay_time += self.latency
        logger.debug("[SIMULATION] Waiting %.2f seconds in %s", self.latency, context)
        await asyncio.sleep(self.latency)

    """
    Randomly rejects a clearing attempt according to the failure rate.
    Args:
        context (str): The transaction being cleared, for logging purposes.
    Raises ClearingFailure: If a failure is injected.
    """
    def maybe_fail(self, context):
        self.total_attempts += 1
        if self.enabled and self.rng.random() >= self.success_rate:
            self.failures_injected += 1
            self.failures_by_context[context] += 1
            logger.warning("[SIMULATION] Injected clearing failure for %s", context)
            raise ClearingFailure(f"Clearing rejected for {context}.", context)

    """
    Returns collected metrics, such as total attempts, failures injected,
    total simulated delay, and per-context failure counts.
    """
    def get_metrics(self):
        return {
            "Summary": {
                "total_attempts": self.total_attempts,
                "failures_injected": self.failures_injected,
                "total_delay_time": round(self.total_delay_time, 2),
            },
            "Failures by Context": dict(self.failures_by_context),
        }

    def print_metrics(self):
        metrics = self.get_metrics()

        print("\n=== Clearing Simulation Metrics ===")
        for key, value in metrics["Summary"].items():
            print(f"{key.replace('_', ' ').capitalize()}: {value}")

        print("\n--- Failures by Transaction ---")
        if metrics["Failures by Context"]:
            for context, count in metrics["Failures by Context"].items():
                print(f"{context}: {count}")
        else:
            print("No failures recorded.")
        print("===================================\n")
