"""
Transaction List Filtering

Backs the transaction overview: free-text search, type and category
filters, a month, an amount range and a sort order. Filtering is
deterministic and only ever narrows the list it is given.
"""

from datetime import date
from typing import Iterable, Optional

from pydantic import BaseModel, Field, model_validator

from finance_tracker.models.transaction import Transaction, TransactionType
from finance_tracker.queries.aggregator import parse_amount


class TransactionQuery(BaseModel):
    """Filter and sort options for the transaction overview."""

    search: str = Field(
        default="",
        description="Matched against category and notes, case-insensitive"
    )
    type: str = Field(
        default="all",
        pattern="^(all|income|expense)$",
    )
    categories: list[str] = Field(
        default_factory=list,
        description="Category labels to keep; empty keeps all"
    )

    year: Optional[int] = None
    month: Optional[int] = Field(default=None, ge=1, le=12)

    min_amount: Optional[float] = Field(default=None, ge=0)
    max_amount: Optional[float] = Field(default=None, ge=0)

    sort_by: str = Field(
        default="date",
        pattern="^(date|amount)$",
    )

    @model_validator(mode="after")
    def validate_ranges(self) -> "TransactionQuery":
        if self.month is not None and self.year is None:
            raise ValueError("A month filter needs a year")
        if (
            self.min_amount is not None
            and self.max_amount is not None
            and self.max_amount < self.min_amount
        ):
            raise ValueError("Maximum amount cannot be below minimum amount")
        return self


def _matches_search(transaction: Transaction, needle: str) -> bool:
    return needle in transaction.category.lower() or needle in transaction.notes.lower()


def _in_period(transaction: Transaction, year: Optional[int], month: Optional[int]) -> bool:
    d = transaction.parsed_date
    if d is None:
        return False
    if d.year != year:
        return False
    return month is None or d.month == month


def _in_amount_range(
    transaction: Transaction,
    min_amount: Optional[float],
    max_amount: Optional[float],
) -> bool:
    amount = parse_amount(transaction.amount)
    if amount is None:
        return False
    if min_amount is not None and amount < min_amount:
        return False
    if max_amount is not None and amount > max_amount:
        return False
    return True


def filter_transactions(
    transactions: Iterable[Transaction],
    query: TransactionQuery,
) -> list[Transaction]:
    """
    Apply a TransactionQuery.

    Records whose date or amount cannot be parsed are dropped by the
    period and amount filters, and sort after everything else.
    """
    result = list(transactions)

    needle = query.search.strip().lower()
    if needle:
        result = [t for t in result if _matches_search(t, needle)]

    if query.type != "all":
        wanted = TransactionType(query.type)
        result = [t for t in result if t.type == wanted]

    if query.categories:
        labels = set(query.categories)
        result = [t for t in result if t.category in labels]

    if query.year is not None:
        result = [t for t in result if _in_period(t, query.year, query.month)]

    if query.min_amount is not None or query.max_amount is not None:
        result = [
            t for t in result
            if _in_amount_range(t, query.min_amount, query.max_amount)
        ]

    if query.sort_by == "amount":
        def amount_key(t: Transaction) -> tuple[bool, float]:
            amount = parse_amount(t.amount)
            return (amount is None, amount or 0.0)

        result.sort(key=amount_key)
    else:
        def date_key(t: Transaction) -> tuple[bool, date]:
            d = t.parsed_date
            return (d is None, d or date.min)

        result.sort(key=date_key)

    return result
