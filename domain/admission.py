"""
Admission guards applied before any remote call.

Every rule here is client-side and recoverable: a ValidationError stops the
workflow before the admin service is contacted.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any

MIN_GENERATE_QUANTITY: int = 1
MAX_GENERATE_QUANTITY: int = 1000

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class ValidationReason(str, Enum):
    INVALID_EMAIL_SYNTAX = "INVALID_EMAIL_SYNTAX"
    DUPLICATE_RECIPIENT = "DUPLICATE_RECIPIENT"
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    EMPTY_SELECTION = "EMPTY_SELECTION"
    QUANTITY_OUT_OF_RANGE = "QUANTITY_OUT_OF_RANGE"
    PLAN_REQUIRED = "PLAN_REQUIRED"


class ValidationError(ValueError):
    """Raised when operator input fails an admission guard."""

    def __init__(self, reason: ValidationReason, message: str):
        self.reason = reason
        self.message = message
        super().__init__(message)


def is_valid_email(value: str) -> bool:
    return bool(_EMAIL_PATTERN.match(value.strip()))


def validate_email_syntax(raw: str) -> str:
    """Return the trimmed address or raise INVALID_EMAIL_SYNTAX."""

    email = (raw or "").strip()
    if not email:
        raise ValidationError(ValidationReason.INVALID_EMAIL_SYNTAX, "Please enter an email address")
    if not _EMAIL_PATTERN.match(email):
        raise ValidationError(ValidationReason.INVALID_EMAIL_SYNTAX, "Please enter a valid email address")
    return email


def validate_generate_quantity(value: Any) -> int:
    """
    Parse and bound-check a key generation quantity.

    Accepts ints and numeric strings as typed into the console. Booleans and
    fractional values are rejected.
    """

    quantity: int | None = None
    if isinstance(value, bool):
        quantity = None
    elif isinstance(value, int):
        quantity = value
    elif isinstance(value, str):
        try:
            quantity = int(value.strip())
        except ValueError:
            quantity = None

    if quantity is None or not MIN_GENERATE_QUANTITY <= quantity <= MAX_GENERATE_QUANTITY:
        raise ValidationError(
            ValidationReason.QUANTITY_OUT_OF_RANGE,
            f"Please enter a valid quantity between {MIN_GENERATE_QUANTITY} and {MAX_GENERATE_QUANTITY}",
        )
    return quantity


def require_plan(plan_id: str | None) -> str:
    if not plan_id or not str(plan_id).strip():
        raise ValidationError(ValidationReason.PLAN_REQUIRED, "Please select a plan")
    return str(plan_id).strip()


def check_submission(selected: int, capacity: int) -> None:
    """Guard run right before a batch is submitted."""

    if selected < 1:
        raise ValidationError(
            ValidationReason.EMPTY_SELECTION,
            "Please select at least one user or add at least one email",
        )
    if selected > capacity:
        raise ValidationError(ValidationReason.CAPACITY_EXCEEDED, "Selected recipients exceed available keys")


__all__ = [
    "MAX_GENERATE_QUANTITY",
    "MIN_GENERATE_QUANTITY",
    "ValidationError",
    "ValidationReason",
    "check_submission",
    "is_valid_email",
    "require_plan",
    "validate_email_syntax",
    "validate_generate_quantity",
]
