"""Mock transaction generators for the dashboard."""

import random
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from ops_dashboard.models.transaction import Transaction, TransactionStatus

CLIENT_NAMES = [
    "John Smith", "Emily Johnson", "Michael Brown", "Sarah Davis", "David Wilson",
    "Lisa Anderson", "Robert Taylor", "Jennifer Moore", "William Jackson", "Mary White",
    "James Martin", "Patricia Garcia", "Richard Rodriguez", "Susan Lewis", "Joseph Lee",
    "Linda Walker", "Thomas Hall", "Barbara Allen", "Christopher Young", "Nancy King",
    "Daniel Wright", "Betty Lopez", "Matthew Hill", "Helen Scott", "Anthony Green",
    "Donna Adams", "Mark Baker", "Carol Gonzalez", "Donald Nelson", "Ruth Carter",
    "Steven Mitchell", "Sharon Perez", "Paul Roberts", "Michelle Turner", "Andrew Phillips",
    "Kimberly Campbell", "Joshua Parker", "Elizabeth Evans", "Kenneth Edwards", "Amy Collins",
    "Kevin Stewart", "Deborah Sanchez", "Brian Morris", "Angela Rogers", "George Reed",
    "Brenda Cook", "Edward Morgan", "Emma Bailey", "Ronald Cooper", "Olivia Richardson",
]

MIN_AMOUNT = 1000
MAX_AMOUNT = 51000  # exclusive
HISTORY_WINDOW = timedelta(days=7)


def _random_amount(rng: random.Random) -> float:
    return float(rng.randrange(MIN_AMOUNT, MAX_AMOUNT))


def generate_mock_transactions(
    count: int = 50,
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
) -> List[Transaction]:
    """
    Generate a batch of historical transactions with random statuses.

    IDs run TXN-001, TXN-002, ...; timestamps fall within the last week.
    """
    rng = rng or random.Random()
    now = now or datetime.now(timezone.utc)
    statuses = list(TransactionStatus)
    window_ms = int(HISTORY_WINDOW.total_seconds() * 1000)

    return [
        Transaction(
            id=f"TXN-{i + 1:03d}",
            client_name=CLIENT_NAMES[i % len(CLIENT_NAMES)],
            amount=_random_amount(rng),
            status=rng.choice(statuses),
            timestamp=now - timedelta(milliseconds=rng.randrange(window_ms)),
        )
        for i in range(count)
    ]


def generate_live_transaction(
    sequence: int,
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
) -> Transaction:
    """Generate a new pending transaction as it would arrive on the live feed."""
    rng = rng or random.Random()
    return Transaction(
        id=f"LIVE-{sequence:04d}",
        client_name=rng.choice(CLIENT_NAMES),
        amount=_random_amount(rng),
        status=TransactionStatus.PENDING,
        timestamp=now or datetime.now(timezone.utc),
    )
