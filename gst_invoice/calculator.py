"""GST calculation for invoice lines and totals."""

from __future__ import annotations

import logging
import math
from typing import Iterable, List, Tuple

from gst_invoice import config
from gst_invoice.models import InvoiceTotals, LineAmounts, LineItem, TaxRegime, parse_number


logger = logging.getLogger(__name__)


def compute_line(item: LineItem) -> LineAmounts:
    """Return taxable amount, tax and line total for one row.

    Unparseable numbers count as zero. Nothing is rounded here; amounts are
    rounded only for display.
    """
    quantity = parse_number(item.quantity)
    unit_price = parse_number(item.unit_price)
    discount = parse_number(item.discount_percent)

    taxable = quantity * unit_price * (1 - discount / 100)
    regime = TaxRegime.parse(item.tax_regime)

    if regime is TaxRegime.INTRA:
        # The same 9% goes to both the central and the state component.
        tax = taxable * config.CGST_RATE
        return LineAmounts(taxable, tax, taxable + tax, cgst=tax, sgst=tax)
    if regime is TaxRegime.INTER:
        tax = taxable * config.IGST_RATE
        return LineAmounts(taxable, tax, taxable + tax, igst=tax)
    return LineAmounts(taxable, 0.0, taxable)


def _aggregate(lines: Iterable[LineAmounts]) -> InvoiceTotals:
    subtotal = cgst = sgst = igst = 0.0
    for line in lines:
        subtotal += line.taxable_amount
        cgst += line.cgst
        sgst += line.sgst
        igst += line.igst

    pre_round = subtotal + cgst + sgst + igst
    if math.isfinite(pre_round):
        grand_total = float(round(pre_round))
        rounding = grand_total - pre_round
    else:
        # Overflowed totals cannot be rounded; show them as they are.
        grand_total, rounding = pre_round, 0.0
    return InvoiceTotals(
        subtotal=subtotal,
        total_cgst=cgst,
        total_sgst=sgst,
        total_igst=igst,
        rounding=rounding,
        grand_total=grand_total,
    )


def compute_totals(items: Iterable[LineItem]) -> InvoiceTotals:
    """Aggregate subtotal, tax components and the rounded grand total."""
    return _aggregate(compute_line(item) for item in items)


def compute_invoice(items: Iterable[LineItem]) -> Tuple[List[LineAmounts], InvoiceTotals]:
    """Return per-line amounts in input order together with the totals."""
    lines = [compute_line(item) for item in items]
    totals = _aggregate(lines)
    logger.debug(
        "Recalculated %d line(s): subtotal=%.2f tax=%.2f grand_total=%.2f",
        len(lines),
        totals.subtotal,
        totals.total_tax,
        totals.grand_total,
    )
    return lines, totals
