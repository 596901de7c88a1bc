"""
Recurring Transaction Expansion

When a transaction with a repeating setting is added, its future
occurrences are generated once, up to a horizon of `now + 12 months`.

- The first occurrence is one step after the transaction's own date.
- Each next occurrence is one step after the previous one. Days are
  clamped to the month length (31 Jan -> 29 Feb -> 29 Mar ...).
- Stepping starts at the transaction's own date, so a back-dated
  transaction also produces the occurrences between its date and now.
  One dated beyond the horizon produces none.
"""

import calendar
from datetime import date, datetime
from typing import Callable

import structlog

from finance_tracker.models.transaction import (
    Repeating,
    Transaction,
    format_transaction_date,
)


logger = structlog.get_logger(__name__)

DEFAULT_HORIZON_MONTHS = 12


def add_months(value: datetime, months: int) -> datetime:
    """Add calendar months, clamping the day to the target month's end."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def occurrence_dates(
    start: date,
    repeating: Repeating,
    now: datetime,
    horizon_months: int = DEFAULT_HORIZON_MONTHS,
) -> list[date]:
    """Dates of the occurrences following `start`, strictly before the horizon."""
    step = repeating.step_months
    if step == 0:
        return []

    if now.tzinfo is not None:
        # Stored dates are local calendar dates
        now = now.astimezone().replace(tzinfo=None)

    horizon = add_months(now, horizon_months)
    cursor = add_months(datetime(start.year, start.month, start.day), step)

    dates = []
    while cursor < horizon:
        dates.append(cursor.date())
        cursor = add_months(cursor, step)
    return dates


def generate_occurrences(
    candidate: Transaction,
    now: datetime,
    next_id: Callable[[], int],
    horizon_months: int = DEFAULT_HORIZON_MONTHS,
) -> list[Transaction]:
    """
    Build the generated occurrences of a newly entered transaction.

    Each occurrence is a copy of the candidate with a fresh id, its own
    date and `original_id` pointing back at the candidate.
    """
    if candidate.repeating == Repeating.NO:
        return []

    start = candidate.parsed_date
    if start is None:
        logger.warning(
            "recurrence_date_unparseable",
            transaction_id=candidate.id,
            date=candidate.date,
        )
        return []

    occurrences = [
        candidate.model_copy(update={
            "id": next_id(),
            "date": format_transaction_date(d),
            "original_id": candidate.id,
        })
        for d in occurrence_dates(start, candidate.repeating, now, horizon_months)
    ]

    logger.debug(
        "occurrences_generated",
        transaction_id=candidate.id,
        repeating=candidate.repeating.value,
        count=len(occurrences),
    )
    return occurrences
