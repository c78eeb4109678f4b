"""
Input Validators - Checks applied before anything reaches the store.

Rejected input raises ValidationError and is never persisted.
"""
from typing import Optional

from simsimi.core.exceptions import ValidationError


def normalize(question: str) -> str:
    """Lookup key for a question: lower-cased with surrounding whitespace trimmed."""
    return question.strip().lower()


def require_text(value: Optional[str], field: str, max_length: Optional[int] = None) -> str:
    """
    Ensure a field is present, not blank and within its length limit.

    Args:
        value: Raw value from the caller
        field: Field name used in the error
        max_length: Maximum allowed length (raw, untrimmed)

    Returns:
        The value unchanged

    Raises:
        ValidationError: If the value is missing, blank or too long
    """
    if value is None or not value.strip():
        raise ValidationError(f"{field.capitalize()} is required", field=field)

    if max_length is not None and len(value) > max_length:
        raise ValidationError(
            f"{field.capitalize()} too long (max {max_length} characters)",
            field=field
        )

    return value


def validate_pagination(limit: int, offset: int) -> None:
    if limit < 1:
        raise ValidationError("Limit must be a positive integer", field="limit")
    if offset < 0:
        raise ValidationError("Offset cannot be negative", field="offset")
