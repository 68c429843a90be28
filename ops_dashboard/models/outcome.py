"""Clearing outcome data model."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ClearingOutcome:
    """Result of one clearing attempt for a single transaction."""

    transaction_id: str
    success: bool
