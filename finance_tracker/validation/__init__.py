"""Validation package."""

from finance_tracker.validation.validator import (
    ValidationError,
    ValidationIssue,
    validate_amount,
    validate_label,
    validate_new_password,
)

__all__ = [
    "ValidationError",
    "ValidationIssue",
    "validate_amount",
    "validate_label",
    "validate_new_password",
]
