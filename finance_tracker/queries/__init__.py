"""Query package: monthly aggregation and list filtering."""

from finance_tracker.queries.aggregator import (
    aggregate,
    effective_currency,
    parse_amount,
    progress_ratios,
    transactions_in_month,
)
from finance_tracker.queries.filters import TransactionQuery, filter_transactions

__all__ = [
    "TransactionQuery",
    "aggregate",
    "effective_currency",
    "filter_transactions",
    "parse_amount",
    "progress_ratios",
    "transactions_in_month",
]
