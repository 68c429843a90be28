"""Transaction-related data models and enums."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

HIGH_VALUE_THRESHOLD = 10000


class TransactionStatus(Enum):
    """Enumeration of possible transaction statuses."""

    PENDING = "Pending"
    CLEARED = "Cleared"
    FAILED = "Failed"


@dataclass(frozen=True)
class Transaction:
    """Represents a simulated financial transaction awaiting settlement."""

    id: str
    client_name: str
    amount: float
    status: TransactionStatus
    timestamp: datetime

    def __post_init__(self):
        if self.amount <= 0:
            raise ValueError(f"Amount must be positive for {self.id}: {self.amount}")

    @property
    def is_high_value(self) -> bool:
        """Check if clearing this transaction requires super admin privilege."""
        return self.amount > HIGH_VALUE_THRESHOLD

    @property
    def is_pending(self) -> bool:
        return self.status == TransactionStatus.PENDING
