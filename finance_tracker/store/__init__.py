"""Transaction store package."""

from finance_tracker.store.ids import IdAllocator
from finance_tracker.store.recurrence import (
    DEFAULT_HORIZON_MONTHS,
    add_months,
    generate_occurrences,
    occurrence_dates,
)
from finance_tracker.store.transaction_store import Listener, TransactionStore

__all__ = [
    "DEFAULT_HORIZON_MONTHS",
    "IdAllocator",
    "Listener",
    "TransactionStore",
    "add_months",
    "generate_occurrences",
    "occurrence_dates",
]
