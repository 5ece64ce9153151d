"""Validation helpers shared across the profit tracker services."""

from __future__ import annotations

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional

from .exceptions import ValidationError
from .models import TransactionKind

BUSINESS_NAME_MAX_LENGTH = 100
NOTE_MAX_LENGTH = 200

ISO_DATE_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


def _quantize_two_decimals(amount: Decimal) -> Decimal:
    """Round the amount to two decimal places using HALF_UP rounding."""
    return amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def parse_amount(raw: object, field: str = "amount") -> Decimal:
    """Convert raw input to a positive Decimal with exactly two fraction digits."""
    if isinstance(raw, bool):
        raise ValidationError(f"{field} must be a numeric value")
    try:
        amount = Decimal(str(raw).strip())
    except (InvalidOperation, TypeError) as exc:
        raise ValidationError(f"{field} must be a numeric value") from exc

    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    if amount <= 0:
        raise ValidationError(f"{field} must be greater than zero")

    return _quantize_two_decimals(amount)


def validate_required_str(value: object, field: str, max_length: int) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    trimmed = value.strip()
    if not trimmed:
        raise ValidationError(f"{field} cannot be empty")
    if len(trimmed) > max_length:
        raise ValidationError(f"{field} must be at most {max_length} characters")
    return trimmed


def validate_business_name(value: object, field: str = "business") -> str:
    return validate_required_str(value, field, BUSINESS_NAME_MAX_LENGTH)


def validate_note(value: object, field: str = "note") -> str:
    """Notes are optional; absent or blank notes become the empty string."""
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    trimmed = value.strip()
    if len(trimmed) > NOTE_MAX_LENGTH:
        raise ValidationError(f"{field} must be at most {NOTE_MAX_LENGTH} characters")
    return trimmed


def parse_iso_date(value: str) -> Optional[date]:
    """Parse a strict ``YYYY-MM-DD`` string, returning None for anything else."""
    candidate = value.strip()
    if not ISO_DATE_PATTERN.fullmatch(candidate):
        return None
    try:
        return date.fromisoformat(candidate)
    except ValueError:
        return None


def validate_iso_date(value: object, field: str = "date") -> str:
    """Accept a ``date`` or a ``YYYY-MM-DD`` string and return the string form.

    Dates stay strings throughout the ledger because the ISO calendar form
    sorts lexically in chronological order, which filtering relies on.
    """
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be an ISO date string (YYYY-MM-DD)")
    candidate = value.strip()
    if not ISO_DATE_PATTERN.fullmatch(candidate):
        raise ValidationError(f"{field} must use the YYYY-MM-DD format")
    parsed = parse_iso_date(candidate)
    if parsed is None:
        raise ValidationError(f"{field} is not a valid calendar date")
    return parsed.isoformat()


def validate_optional_date(value: object, field: str) -> Optional[str]:
    if value is None or value == "":
        return None
    return validate_iso_date(value, field)


def validate_kind(value: object, field: str = "kind") -> TransactionKind:
    if isinstance(value, TransactionKind):
        return value
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    canonical = value.strip().lower()
    try:
        return TransactionKind(canonical)
    except ValueError as exc:
        allowed = ", ".join(kind.value for kind in TransactionKind)
        raise ValidationError(f"{field} must be one of: {allowed}") from exc
