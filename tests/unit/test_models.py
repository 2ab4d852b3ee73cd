from __future__ import annotations

import dataclasses

import pytest

from admin_console.models import (
    EXPECTED_COLUMNS,
    ImportResult,
    ImportRow,
    TransactionStatus,
    ValidationError,
    human_row_number,
)


def test_expected_columns_order():
    assert EXPECTED_COLUMNS == ("email", "date", "amount", "type", "status")


def test_status_values():
    assert TransactionStatus.values() == ("paid", "pending", "failed")


def test_first_data_row_is_row_two():
    assert human_row_number(0) == 2
    assert str(ValidationError(human_row_number(1), "Type is required.")) == "Row 3: Type is required."


def test_import_result_failed_and_ok():
    failed = ImportResult.failed("File is empty.")
    assert failed == ImportResult(success_count=0, errors=("File is empty.",))
    assert not failed.ok
    assert ImportResult(success_count=3).ok
    assert not ImportResult(success_count=0).ok


def test_import_row_is_immutable():
    row = ImportRow(email="a@example.com", date="01/01/2025", amount=1, type="t", status="paid")
    with pytest.raises(dataclasses.FrozenInstanceError):
        row.amount = 2  # type: ignore[misc]
