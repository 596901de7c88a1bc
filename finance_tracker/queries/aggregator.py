"""
Monthly Aggregation

Computes the dashboard numbers for one calendar month: income total,
expense total and balance, all converted into a single target currency.

DESIGN DECISION: Aggregation is a pure function over the transaction
list. It is recomputed on every call; lists are small and there is
nothing to invalidate.

Malformed data never poisons the totals:
- a record whose date cannot be parsed is not in any month
- a record whose amount cannot be parsed contributes 0 and is counted
  in `skipped_count` (and logged)
"""

import math
from typing import Iterable, Optional

import structlog

from finance_tracker.models.summary import MonthlySummary, ProgressRatios
from finance_tracker.models.transaction import Transaction, TransactionType
from finance_tracker.services.currency import convert, resolve_code


logger = structlog.get_logger(__name__)


def parse_amount(text: Optional[str]) -> Optional[float]:
    """Parse a stored amount string; None if it is not a finite number."""
    if text is None:
        return None
    try:
        value = float(text)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


def transactions_in_month(
    transactions: Iterable[Transaction],
    year: int,
    month: int,
) -> list[Transaction]:
    """Transactions dated in (year, month); month is 1-12."""
    result = []
    for transaction in transactions:
        d = transaction.parsed_date
        if d is not None and d.year == year and d.month == month:
            result.append(transaction)
    return result


def effective_currency(
    transaction: Transaction,
    default_currency: str,
) -> str:
    """The code a transaction's amount is expressed in."""
    return resolve_code(transaction.currency) or default_currency


def aggregate(
    transactions: Iterable[Transaction],
    year: int,
    month: int,
    target_currency: str,
    default_currency: Optional[str] = None,
) -> MonthlySummary:
    """
    Sum income and expenses for one month in `target_currency`.

    Args:
        transactions: Full transaction list (filtered here)
        year: Calendar year
        month: Calendar month, 1-12
        target_currency: Code the totals are expressed in
        default_currency: Code assumed for transactions without their own
            currency; defaults to the target currency

    Returns:
        MonthlySummary with totals, balance and record counts
    """
    fallback = default_currency or target_currency

    income_total = 0.0
    expense_total = 0.0
    income_count = 0
    expense_count = 0
    skipped = 0

    for transaction in transactions_in_month(transactions, year, month):
        amount = parse_amount(transaction.amount)
        if amount is None:
            skipped += 1
            logger.warning(
                "transaction_amount_unparseable",
                transaction_id=transaction.id,
                amount=transaction.amount,
            )
            continue

        converted = convert(
            amount,
            effective_currency(transaction, fallback),
            target_currency,
        )

        if transaction.type == TransactionType.INCOME:
            income_total += converted
            income_count += 1
        else:
            expense_total += converted
            expense_count += 1

    return MonthlySummary(
        year=year,
        month=month,
        currency=target_currency,
        income_total=income_total,
        expense_total=expense_total,
        income_count=income_count,
        expense_count=expense_count,
        skipped_count=skipped,
    )


def progress_ratios(income_total: float, expense_total: float) -> ProgressRatios:
    """Income/expense split of the dashboard progress bar."""
    return ProgressRatios.from_totals(income_total, expense_total)
