"""Excel-backed key/value storage for invoice drafts."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional

from openpyxl import Workbook, load_workbook
from openpyxl.worksheet.worksheet import Worksheet

from gst_invoice import config


logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ["Key", "Value"]


class WorkbookStorage:
    """Stores string values by key on a single workbook sheet.

    Every write is saved to disk straight away, so the file always holds the
    latest state.
    """

    def __init__(self, path: Path | str = None, sheet_name: str | None = None) -> None:
        self.path: Path = Path(path) if path else config.STORAGE_PATH
        self.sheet_name = sheet_name or config.STORAGE_SHEET_NAME
        self._workbook: Optional[Workbook] = None
        self._sheet: Optional[Worksheet] = None
        self._col_map: Dict[str, int] = {}
        self._rows: Dict[str, int] = {}
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            self._create()
            return

        self._workbook = load_workbook(self.path)
        if self.sheet_name not in self._workbook.sheetnames:
            self._sheet = self._workbook.create_sheet(self.sheet_name)
            self._sheet.append(REQUIRED_COLUMNS)
        else:
            self._sheet = self._workbook[self.sheet_name]
        self._col_map = self._detect_columns()
        self._read_rows()

    def _create(self) -> None:
        logger.info("Creating storage workbook at %s", self.path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._workbook = Workbook()
        self._sheet = self._workbook.active
        self._sheet.title = self.sheet_name
        self._sheet.append(REQUIRED_COLUMNS)
        self._col_map = self._detect_columns()
        self._workbook.save(self.path)

    def _detect_columns(self) -> Dict[str, int]:
        headers: Dict[str, int] = {}
        for idx, cell in enumerate(self._sheet[1], start=1):
            if cell.value is not None:
                headers[str(cell.value).strip()] = idx

        missing = [col for col in REQUIRED_COLUMNS if col not in headers]
        if missing:
            raise ValueError(f"Missing required columns: {', '.join(missing)}")
        return headers

    def _read_rows(self) -> None:
        self._rows.clear()
        key_col = self._col_map["Key"]
        for row_idx, row in enumerate(self._sheet.iter_rows(min_row=2), start=2):
            key_val = row[key_col - 1].value
            if key_val in (None, ""):
                continue
            self._rows[str(key_val)] = row_idx

    def keys(self) -> List[str]:
        """Return stored keys in sheet order."""
        return list(self._rows)

    def get_item(self, key: str) -> Optional[str]:
        """Return the stored value or None if the key is absent."""
        row_idx = self._rows.get(key)
        if row_idx is None:
            return None
        value = self._sheet.cell(row=row_idx, column=self._col_map["Value"]).value
        return None if value is None else str(value)

    def set_item(self, key: str, value: str) -> None:
        """Store value under key and persist the workbook."""
        row_idx = self._rows.get(key)
        if row_idx is None:
            row_idx = self._sheet.max_row + 1
            self._sheet.cell(row=row_idx, column=self._col_map["Key"], value=key)
            self._rows[key] = row_idx
        self._sheet.cell(row=row_idx, column=self._col_map["Value"], value=str(value))
        self.save()
        logger.debug("Stored %s (%d chars)", key, len(str(value)))

    def remove_item(self, key: str) -> None:
        row_idx = self._rows.get(key)
        if row_idx is None:
            return
        self._sheet.delete_rows(row_idx)
        self._read_rows()
        self.save()

    def save(self) -> None:
        """Persist changes to disk."""
        self._workbook.save(self.path)
