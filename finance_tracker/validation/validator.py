"""
Input Validation

User input is validated at the edge, before it reaches the store or the
catalogs:
- transaction amounts (present, numeric, positive)
- the app lock password (confirmation matches, long enough)
- category/account labels (not blank, not a duplicate)

IMPORTANT: Validation NEVER silently fixes input beyond trimming
whitespace. It reports what is wrong and the operation is aborted
without any state change.
"""

from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional

from pydantic import BaseModel, Field

from finance_tracker.models.catalog import LabelItem


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(..., description="Field with the issue")
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'duplicate')"
    )
    message: str = Field(..., description="Human-readable description of the issue")


class ValidationError(Exception):
    """
    Raised when user input is rejected.

    Carries every issue found so the caller can show them all at once.
    """

    def __init__(self, issues: list[ValidationIssue]):
        self.issues = issues
        super().__init__("; ".join(issue.message for issue in issues))

    @classmethod
    def single(cls, field: str, issue_type: str, message: str) -> "ValidationError":
        return cls([ValidationIssue(field=field, issue_type=issue_type, message=message)])

    @property
    def fields(self) -> list[str]:
        return [issue.field for issue in self.issues]


def validate_amount(text: Optional[str]) -> Decimal:
    """
    Validate an amount typed by the user.

    Returns the parsed amount; raises ValidationError if it is empty,
    not a number, or not greater than zero.
    """
    if text is None or not text.strip():
        raise ValidationError.single(
            "amount", "missing", "Please enter an amount."
        )

    try:
        amount = Decimal(text.strip())
    except InvalidOperation:
        amount = None

    if amount is None or not amount.is_finite() or amount <= 0:
        raise ValidationError.single(
            "amount",
            "invalid_value",
            "Please enter a valid amount greater than zero.",
        )

    return amount


def validate_new_password(new: str, confirm: str, min_length: int) -> None:
    """Check a new app password against its confirmation and length rule."""
    issues = []

    if new != confirm:
        issues.append(ValidationIssue(
            field="confirm_password",
            issue_type="mismatch",
            message="Passwords do not match.",
        ))

    if len(new) < min_length:
        issues.append(ValidationIssue(
            field="password",
            issue_type="too_short",
            message=f"Password must be at least {min_length} characters long.",
        ))

    if issues:
        raise ValidationError(issues)


def validate_label(
    label: Optional[str],
    existing: Iterable[LabelItem],
    exclude_id: Optional[int] = None,
    kind: str = "category",
) -> str:
    """
    Validate a category/account label.

    Duplicates are detected case-insensitively; `exclude_id` skips the
    item being renamed. Returns the trimmed label.
    """
    cleaned = (label or "").strip()
    if not cleaned:
        raise ValidationError.single(
            "label", "missing", f"Please enter a valid {kind} title."
        )

    lowered = cleaned.lower()
    for item in existing:
        if item.id != exclude_id and item.label.lower() == lowered:
            raise ValidationError.single(
                "label", "duplicate", f"This {kind} already exists."
            )

    return cleaned
