"""
Data Models Package

This package contains all Pydantic models used in the Finance Tracker.
"""

from finance_tracker.models.catalog import (
    DEFAULT_ACCOUNTS,
    DEFAULT_CATEGORIES,
    LabelItem,
)
from finance_tracker.models.events import (
    EventSeverity,
    StoreEvent,
    StoreEventBuilder,
    StoreEventType,
)
from finance_tracker.models.summary import MonthlySummary, ProgressRatios
from finance_tracker.models.transaction import (
    DATE_FORMAT,
    Repeating,
    Transaction,
    TransactionType,
    format_transaction_date,
    parse_transaction_date,
)

__all__ = [
    # Transaction models
    "DATE_FORMAT",
    "Repeating",
    "Transaction",
    "TransactionType",
    "format_transaction_date",
    "parse_transaction_date",
    # Catalog models
    "DEFAULT_ACCOUNTS",
    "DEFAULT_CATEGORIES",
    "LabelItem",
    # Summary models
    "MonthlySummary",
    "ProgressRatios",
    # Event models
    "EventSeverity",
    "StoreEvent",
    "StoreEventBuilder",
    "StoreEventType",
]
