"""Pytest configuration and fixtures."""

import os

# Widgets are created without a display.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from gst_invoice.data_store import WorkbookStorage


@pytest.fixture
def storage(tmp_path):
    """Fresh workbook storage in a temporary directory."""
    return WorkbookStorage(tmp_path / "storage.xlsx")
