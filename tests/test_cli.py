"""Tests for the console interface."""

from __future__ import annotations

import pytest

from profit_tracker.cli import main


@pytest.fixture
def run(tmp_path):
    data_dir = tmp_path / "data"

    def _run(*args: str) -> int:
        return main(["--data-dir", str(data_dir), *args])

    return _run


def test_add_list_and_summary(run, capsys) -> None:
    assert run("credit", "add", "Kiosk", "500", "2025-01-10", "--note", "opening") == 0
    assert run("expense", "add", "Kiosk", "200", "2025-01-15") == 0
    capsys.readouterr()

    assert run("credit", "list", "--business", "Kiosk") == 0
    listing = capsys.readouterr().out
    assert "Found 1 credits (total 500.00)" in listing
    assert "opening" in listing

    assert run("summary") == 0
    summary = capsys.readouterr().out
    assert "Kiosk: credit 500.00 | expense 200.00 | profit 300.00 | margin 60.00%" in summary
    assert "Jan 2025: credit 500.00 | expense 200.00" in summary
    assert "overall: credit 500.00" in summary

    assert run("business", "list") == 0
    assert capsys.readouterr().out.strip() == "Kiosk"


def test_ranking_and_report(run, capsys) -> None:
    run("credit", "add", "A", "100", "2024-01-01")
    run("expense", "add", "A", "50", "2024-01-02")
    run("credit", "add", "B", "100", "2024-01-01")
    capsys.readouterr()

    assert run("ranking") == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0].startswith("1. B margin 100.00%")
    assert lines[1].startswith("2. A margin 50.00%")

    assert run("report", "A") == 0
    report = capsys.readouterr().out
    assert "Credits:" in report and "Expenses:" in report


def test_missing_record_returns_error(run, capsys) -> None:
    assert run("expense", "delete", "nope") == 1
    assert "Expense nope not found" in capsys.readouterr().err


def test_invalid_date_rejected_by_parser(run) -> None:
    with pytest.raises(SystemExit):
        run("credit", "add", "A", "10", "01/02/2024")


def test_edit_updates_business(run, capsys, tmp_path) -> None:
    run("expense", "add", "Old", "10", "2024-01-01")
    out = capsys.readouterr().out
    record_id = out.split("[", 1)[1].split("]", 1)[0]

    assert run("expense", "edit", record_id, "--business", "New") == 0
    assert "Business: New" in capsys.readouterr().out
    run("business", "list")
    assert capsys.readouterr().out.split() == ["New", "Old"]


@pytest.mark.parametrize("amount", ["nan", "Infinity"])
def test_non_finite_amount_rejected_by_parser(run, amount) -> None:
    with pytest.raises(SystemExit) as excinfo:
        run("expense", "add", "A", amount, "2024-01-01")

    assert excinfo.value.code == 2
