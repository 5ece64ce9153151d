"""Tests covering input validation helpers."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from ledger.exceptions import ValidationError
from ledger.models import TransactionKind
from ledger.validators import (
    parse_amount,
    validate_business_name,
    validate_iso_date,
    validate_kind,
    validate_note,
)


def test_parse_amount_quantizes() -> None:
    assert parse_amount("10.005") == Decimal("10.01")
    assert parse_amount(3) == Decimal("3.00")


@pytest.mark.parametrize("raw", ["abc", None, 0, "-5", "NaN", "Infinity", True])
def test_parse_amount_rejects(raw: object) -> None:
    with pytest.raises(ValidationError):
        parse_amount(raw)


def test_business_name_is_trimmed() -> None:
    assert validate_business_name("  Corner Shop ") == "Corner Shop"
    with pytest.raises(ValidationError):
        validate_business_name("   ")
    with pytest.raises(ValidationError):
        validate_business_name(None)


def test_note_defaults_to_empty() -> None:
    assert validate_note(None) == ""
    assert validate_note("  rent ") == "rent"
    with pytest.raises(ValidationError):
        validate_note("x" * 201)


def test_iso_date() -> None:
    assert validate_iso_date("2024-02-29") == "2024-02-29"
    assert validate_iso_date(date(2024, 1, 2)) == "2024-01-02"
    assert validate_iso_date(datetime(2024, 1, 2, 15, 30)) == "2024-01-02"
    for bad in ("2023-02-29", "2024-1-2", "20240102", 20240102, "2025-W01-1", "2024-01-0\u0661"):
        with pytest.raises(ValidationError):
            validate_iso_date(bad)


def test_validate_kind() -> None:
    assert validate_kind(" Credit ") is TransactionKind.CREDIT
    assert validate_kind(TransactionKind.EXPENSE) is TransactionKind.EXPENSE
    with pytest.raises(ValidationError):
        validate_kind("income")
