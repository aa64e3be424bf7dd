"""Invoice data models."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from gst_invoice import config


logger = logging.getLogger(__name__)


def parse_number(value: Any, default: float = 0.0) -> float:
    """Return value as a float, or default when it is empty or not a number."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    return number


def parse_int(value: Any, default: int = 0) -> int:
    if value in (None, ""):
        return default
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return default


class TaxRegime(str, Enum):
    INTRA = "intra"
    INTER = "inter"
    NONE = "none"

    @property
    def label(self) -> str:
        return _REGIME_LABELS[self]

    @classmethod
    def parse(cls, value: Any) -> "TaxRegime":
        """Map a stored or typed value to a regime.

        Missing values mean intra-state; anything unrecognised carries no tax.
        """
        if isinstance(value, cls):
            return value
        if value in (None, ""):
            return cls.INTRA
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            logger.warning("Unknown tax regime %r, treating as untaxed", value)
            return cls.NONE


_REGIME_LABELS = {
    TaxRegime.INTRA: "CGST+SGST",
    TaxRegime.INTER: "IGST",
    TaxRegime.NONE: "No Tax",
}


@dataclass(frozen=True)
class LineItem:
    """One invoice row, with fields kept as entered."""

    name: str = ""
    quantity: Any = 1
    unit_price: Any = 0
    discount_percent: Any = 0
    tax_regime: Any = TaxRegime.INTRA

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "quantity": self.quantity,
            "unitPrice": self.unit_price,
            "discountPercent": self.discount_percent,
            "taxRegime": TaxRegime.parse(self.tax_regime).value,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LineItem":
        return cls(
            name=str(data.get("name") or ""),
            quantity=data.get("quantity"),
            unit_price=data.get("unitPrice"),
            discount_percent=data.get("discountPercent"),
            tax_regime=data.get("taxRegime"),
        )


@dataclass(frozen=True)
class LineAmounts:
    taxable_amount: float
    tax_amount: float
    line_total: float
    cgst: float = 0.0
    sgst: float = 0.0
    igst: float = 0.0


@dataclass(frozen=True)
class InvoiceTotals:
    subtotal: float = 0.0
    total_cgst: float = 0.0
    total_sgst: float = 0.0
    total_igst: float = 0.0
    rounding: float = 0.0
    grand_total: float = 0.0

    @property
    def total_tax(self) -> float:
        return self.total_cgst + self.total_sgst + self.total_igst

    @property
    def pre_round_total(self) -> float:
        return self.subtotal + self.total_tax


# Version 0 snapshots were written before the schema carried a version field.
_LEGACY_ITEM_KEYS = {
    "qty": "quantity",
    "price": "unitPrice",
    "discount": "discountPercent",
    "taxType": "taxRegime",
}


def _item_list(data: Mapping[str, Any]) -> List[Mapping[str, Any]]:
    items = data.get("items")
    if items is None:
        return []
    if not isinstance(items, list) or not all(isinstance(item, Mapping) for item in items):
        raise ValueError("Saved invoice items must be a list of objects.")
    return items


def _migrate_legacy(data: Mapping[str, Any]) -> Dict[str, Any]:
    items = []
    for raw in _item_list(data):
        items.append({_LEGACY_ITEM_KEYS.get(key, key): value for key, value in raw.items()})
    return {
        "schemaVersion": 1,
        "invoiceNumber": data.get("invoiceNo", ""),
        "date": data.get("date", ""),
        "clientDetails": data.get("client", ""),
        "items": items,
        "savedAt": data.get("savedAt"),
    }


@dataclass
class Invoice:
    invoice_number: str
    date: str
    client_details: str = ""
    items: List[LineItem] = field(default_factory=list)
    saved_at: Optional[str] = None
    schema_version: int = config.SNAPSHOT_SCHEMA_VERSION

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schemaVersion": self.schema_version,
            "invoiceNumber": self.invoice_number,
            "date": self.date,
            "clientDetails": self.client_details,
            "items": [item.to_dict() for item in self.items],
            "savedAt": self.saved_at,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Invoice":
        """Build an invoice from a snapshot, upgrading old layouts."""
        if not isinstance(data, Mapping):
            raise ValueError("Saved invoice must be a JSON object.")

        version = data.get("schemaVersion")
        if isinstance(version, bool) or not isinstance(version, (int, type(None))):
            raise ValueError(f"Unsupported saved invoice version: {version!r}")
        if not version:
            data = _migrate_legacy(data)
            version = 1
        if version < 0 or version > config.SNAPSHOT_SCHEMA_VERSION:
            raise ValueError(f"Unsupported saved invoice version: {version!r}")

        return cls(
            invoice_number=str(data.get("invoiceNumber") or ""),
            date=str(data.get("date") or ""),
            client_details=str(data.get("clientDetails") or ""),
            items=[LineItem.from_dict(item) for item in _item_list(data)],
            saved_at=data.get("savedAt"),
            schema_version=config.SNAPSHOT_SCHEMA_VERSION,
        )


def format_amount(amount: float) -> str:
    """Return amount formatted to two decimals."""
    return f"{amount:.2f}"


def format_currency(amount: float) -> str:
    return f"{config.CURRENCY_SYMBOL}{format_amount(amount)}"
