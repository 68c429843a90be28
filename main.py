"""Main entry point for the Portola Ops Dashboard clearing demo."""

import asyncio
import logging
import random

from ops_dashboard.dashboard import OpsDashboard
from ops_dashboard.logging_config import setup_logging
from simulation.simulation_config import SimulationConfig
from simulation.stream_runner import StreamSettings, stream_transactions
from simulation.transaction_generator import generate_mock_transactions


async def run_demo(seed: int = 7, latency: float = 0.2) -> OpsDashboard:
    """Walk through single, bulk and privileged clearing on mock data."""
    rng = random.Random(seed)
    config = SimulationConfig(latency=latency, rng=rng)
    dashboard = OpsDashboard(generate_mock_transactions(rng=rng), config=config)

    print("=== PORTOLA OPS DASHBOARD ===")
    print("Settlement monitoring and fund clearing operations\n")
    dashboard.print_status()

    # Live feed runs alongside clearing
    stop = asyncio.Event()
    feed = asyncio.create_task(
        stream_transactions(
            dashboard.store,
            StreamSettings(interval=latency, max_transactions=3),
            stop,
            rng,
        )
    )

    # 1. Single clear of the first clearable transaction
    print("1. Clearing a single low-value transaction...")
    candidate = next(
        (txn for txn in dashboard.transactions if dashboard.can_clear(txn.id)), None
    )
    if candidate:
        cleared = await dashboard.clear_one(candidate.id)
        print(f"   {candidate.id}: {'✓ cleared' if cleared else '✗ still pending'}")

    # 2. Bulk clear without privilege; high-value rows are skipped
    print("2. Bulk clearing all pending transactions without super admin...")
    dashboard.select_all()
    summary = dashboard.confirm_bulk_clear()
    print(
        f"   Confirm: {summary['clearable_count']} of {summary['selected_count']} "
        f"clearable, {summary['skipped_high_value_count']} high-value will be skipped "
        f"(${summary['clearable_amount']:,.2f})"
    )
    report = await dashboard.bulk_clear()
    print(
        f"   ✓ {len(report.cleared)} cleared, ✗ {len(report.failed)} failed, "
        f"{len(report.skipped)} skipped"
    )
    dashboard.print_status()

    # 3. Retry with super admin enabled
    print("3. Enabling super admin and clearing remaining pending transactions...")
    dashboard.toggle_super_admin()
    dashboard.select_all()
    report = await dashboard.bulk_clear()
    print(
        f"   ✓ {len(report.cleared)} cleared, ✗ {len(report.failed)} failed, "
        f"{len(report.skipped)} skipped"
    )

    stop.set()
    streamed = await feed
    print(f"   Live feed added {streamed} new transactions")

    print("\n=== FINAL DASHBOARD STATUS ===")
    dashboard.print_status()
    config.print_metrics()
    return dashboard


def main():
    setup_logging(level=logging.WARNING)
    asyncio.run(run_demo())


if __name__ == "__main__":
    main()
