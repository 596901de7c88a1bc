"""
Transaction Model for Finance Tracker

The transaction is the only persisted business entity. Its JSON field
names (camelCase) are the storage layout, so records written by earlier
versions of the app load unchanged.

DESIGN DECISION: The model does NOT validate the amount.
Amounts are validated once, when the user enters them. Stored data is
loaded as-is, and the aggregator decides how to treat malformed values.
"""

from datetime import date as Date, datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# Dates are stored as e.g. "15 January 2024"
DATE_FORMAT = "%d %B %Y"


class TransactionType(str, Enum):
    """Direction of money flow."""
    INCOME = "income"
    EXPENSE = "expense"


class Repeating(str, Enum):
    """
    Recurrence setting chosen when the transaction is entered.

    Only consulted once, at creation time, to generate occurrences.
    """
    NO = "No"
    MONTHLY = "Monthly"
    QUARTERLY = "Quarterly"
    ANNUALLY = "Annually"

    @property
    def step_months(self) -> int:
        """Months between two occurrences (0 for non-repeating)."""
        return _STEP_MONTHS[self]


_STEP_MONTHS = {
    Repeating.NO: 0,
    Repeating.MONTHLY: 1,
    Repeating.QUARTERLY: 3,
    Repeating.ANNUALLY: 12,
}


def parse_transaction_date(value: Optional[str]) -> Optional[Date]:
    """Parse a stored "DD Month YYYY" string, returning None on failure."""
    if not value:
        return None
    try:
        return datetime.strptime(value.strip(), DATE_FORMAT).date()
    except ValueError:
        return None


def format_transaction_date(value: Date) -> str:
    return value.strftime(DATE_FORMAT)


class Transaction(BaseModel):
    """
    A single income or expense record.

    Generated occurrences of a recurring transaction carry the id of their
    origin in `original_id` (stored as `originalId`). User-entered records
    never have it.
    """
    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=False,
    )

    id: int = Field(..., description="Unique transaction id")
    type: TransactionType
    amount: str = Field(..., description="Decimal amount as entered, e.g. '12.50'")
    category: str = ""
    date: str = Field(..., description="Calendar date as 'DD Month YYYY'")
    account: str = ""
    repeating: Repeating = Repeating.NO
    notes: str = ""
    currency: Optional[str] = Field(
        default=None,
        description="Currency code or display symbol; None means the app default"
    )
    original_id: Optional[int] = Field(
        default=None,
        alias="originalId",
        description="Id of the origin this occurrence was generated from"
    )

    # Stable references into the category/account catalogs. Older records
    # only carry the labels above.
    category_id: Optional[int] = Field(default=None, alias="categoryId")
    account_id: Optional[int] = Field(default=None, alias="accountId")

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, v: Any) -> str:
        """Older records may hold the amount as a JSON number."""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @property
    def is_occurrence(self) -> bool:
        """True for records generated from a recurring origin."""
        return self.original_id is not None

    @property
    def parsed_date(self) -> Optional[Date]:
        return parse_transaction_date(self.date)

    def to_record(self) -> dict:
        """Convert to the JSON-ready dict stored in the key-value store."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def field_name(cls, key: str) -> str:
        """Map a stored (camelCase) key to the Python field name."""
        for name, info in cls.model_fields.items():
            if key == name or key == info.alias:
                return name
        raise KeyError(f"Unknown transaction field: {key}")
