"""Tests for the workbook-backed key/value storage."""

import pytest
from openpyxl import Workbook, load_workbook

from gst_invoice.data_store import WorkbookStorage


@pytest.fixture
def storage_path(tmp_path):
    return tmp_path / "nested" / "storage.xlsx"


def test_creates_workbook_with_header(storage_path):
    storage = WorkbookStorage(storage_path, "Storage")

    assert storage_path.exists()
    assert storage.keys() == []
    sheet = load_workbook(storage_path)["Storage"]
    assert [cell.value for cell in sheet[1]] == ["Key", "Value"]


def test_set_and_get_item_persist_across_instances(storage_path):
    storage = WorkbookStorage(storage_path)
    storage.set_item("sbjr_last_invoice", "4")
    storage.set_item("draft", '{"a": 1}')
    storage.set_item("sbjr_last_invoice", "5")

    reopened = WorkbookStorage(storage_path)

    assert reopened.get_item("sbjr_last_invoice") == "5"
    assert reopened.get_item("draft") == '{"a": 1}'
    assert reopened.keys() == ["sbjr_last_invoice", "draft"]


def test_missing_key_returns_none(storage_path):
    assert WorkbookStorage(storage_path).get_item("nope") is None


def test_remove_item(storage_path):
    storage = WorkbookStorage(storage_path)
    storage.set_item("one", "1")
    storage.set_item("two", "2")

    storage.remove_item("one")
    storage.remove_item("never-set")

    reopened = WorkbookStorage(storage_path)
    assert reopened.get_item("one") is None
    assert reopened.get_item("two") == "2"


def test_adds_sheet_to_existing_workbook(tmp_path):
    path = tmp_path / "book.xlsx"
    workbook = Workbook()
    workbook.active.title = "Other"
    workbook.save(path)

    storage = WorkbookStorage(path, "Storage")
    storage.set_item("k", "v")

    assert set(load_workbook(path).sheetnames) == {"Other", "Storage"}


def test_missing_header_columns_raise(tmp_path):
    path = tmp_path / "bad.xlsx"
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Storage"
    sheet.append(["Name", "Data"])
    workbook.save(path)

    with pytest.raises(ValueError, match="Missing required columns"):
        WorkbookStorage(path, "Storage")
