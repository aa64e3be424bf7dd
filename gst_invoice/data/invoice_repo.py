"""Repository for the saved invoice draft and invoice numbering."""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Optional

from gst_invoice import config
from gst_invoice.data_store import WorkbookStorage
from gst_invoice.models import Invoice, parse_int


logger = logging.getLogger(__name__)


class InvoiceNumberCounter:
    """Hands out sequential invoice numbers persisted in storage."""

    def __init__(
        self,
        storage: WorkbookStorage,
        key: str | None = None,
        prefix: str | None = None,
        digits: int | None = None,
    ) -> None:
        self.storage = storage
        self.key = key or config.LAST_INVOICE_KEY
        self.prefix = prefix or config.INVOICE_PREFIX
        self.digits = digits or config.INVOICE_NUMBER_DIGITS

    def _last(self) -> int:
        return parse_int(self.storage.get_item(self.key), default=0)

    def format(self, sequence: int) -> str:
        return f"{self.prefix}-{sequence:0{self.digits}d}"

    def current(self) -> Optional[str]:
        """Return the last issued number, or None before the first one."""
        last = self._last()
        return self.format(last) if last > 0 else None

    def next(self) -> str:
        """Increment the stored sequence and return the new invoice number."""
        sequence = self._last() + 1
        self.storage.set_item(self.key, str(sequence))
        number = self.format(sequence)
        logger.info("Issued invoice number %s", number)
        return number


class InvoiceRepository:
    """Saves and restores the whole invoice as one JSON snapshot."""

    def __init__(self, storage: WorkbookStorage, key: str | None = None) -> None:
        self.storage = storage
        self.key = key or config.CURRENT_INVOICE_KEY

    def has_saved_invoice(self) -> bool:
        return bool(self.storage.get_item(self.key))

    def save(self, invoice: Invoice) -> Invoice:
        """Stamp the save time and store the snapshot; returns the stamped copy."""
        stamped = replace(
            invoice,
            saved_at=datetime.now(timezone.utc).isoformat(),
            schema_version=config.SNAPSHOT_SCHEMA_VERSION,
        )
        self.storage.set_item(self.key, json.dumps(stamped.to_dict(), ensure_ascii=False))
        logger.info("Saved invoice %s with %d item(s)", stamped.invoice_number, len(stamped.items))
        return stamped

    def load(self) -> Optional[Invoice]:
        """Return the saved invoice, or None when nothing has been saved.

        Raises ValueError when the stored snapshot cannot be read.
        """
        raw = self.storage.get_item(self.key)
        if not raw:
            return None
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Saved invoice is corrupted: {exc}") from exc

        invoice = Invoice.from_dict(data)
        logger.info("Loaded invoice %s with %d item(s)", invoice.invoice_number, len(invoice.items))
        return invoice
