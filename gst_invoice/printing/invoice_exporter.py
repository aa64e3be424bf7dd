"""Invoice printing and image-based PDF export."""

from __future__ import annotations

import logging
from html import escape
from pathlib import Path
from typing import List

from PyQt5.QtCore import QRectF, Qt
from PyQt5.QtGui import QImage, QPageLayout, QPageSize, QPainter, QTextDocument
from PyQt5.QtPrintSupport import QPrintDialog, QPrinter
from PyQt5.QtWidgets import QDialog, QWidget

from gst_invoice import config
from gst_invoice.calculator import compute_invoice
from gst_invoice.models import Invoice, TaxRegime, format_amount, format_currency


logger = logging.getLogger(__name__)


def default_pdf_name(invoice_number: str) -> str:
    return f"{invoice_number or 'invoice'}.pdf"


def plan_pdf_pages(
    image_width_px: int,
    image_height_px: int,
    image_width_mm: float = config.PDF_IMAGE_WIDTH_MM,
    page_height_mm: float = config.PDF_PAGE_HEIGHT_MM,
    margin_mm: float = config.PDF_MARGIN_MM,
) -> List[float]:
    """Return the top offset (mm) of the full image on each PDF page.

    The image is scaled to image_width_mm and drawn once per page, shifted up
    by one page height each time, so every page shows the next band of it.
    """
    if image_width_px <= 0 or image_height_px <= 0:
        return []

    image_height_mm = image_height_px * image_width_mm / image_width_px
    offsets = [margin_mm]
    height_left = image_height_mm - page_height_mm
    while height_left > 0:
        offsets.append(height_left - image_height_mm + margin_mm)
        height_left -= page_height_mm
    return offsets


class InvoiceExporter:
    """Send invoices to a printer or render them into a paginated PDF."""

    def __init__(self, render_scale: int | None = None) -> None:
        self.render_scale = render_scale or config.PDF_RENDER_SCALE

    def build_html(self, invoice: Invoice) -> str:
        lines, totals = compute_invoice(invoice.items)
        rows: List[str] = []
        for item, amounts in zip(invoice.items, lines):
            rows.append(
                f"<tr><td>{escape(item.name)}</td>"
                f"<td align='right'>{escape(str(item.quantity))}</td>"
                f"<td align='right'>{escape(str(item.unit_price))}</td>"
                f"<td align='right'>{escape(str(item.discount_percent))}%</td>"
                f"<td align='right'>{format_amount(amounts.taxable_amount)}</td>"
                f"<td>{TaxRegime.parse(item.tax_regime).label}</td>"
                f"<td align='right'>{format_amount(amounts.tax_amount)}</td>"
                f"<td align='right'>{format_amount(amounts.line_total)}</td></tr>"
            )

        client = escape(invoice.client_details).replace("\n", "<br />")

        return f"""
        <html>
        <head>
            <style>
                body {{ font-family: 'Arial'; font-size: 10pt; }}
                h2 {{ text-align: center; margin: 0 0 6px 0; }}
                table {{ width: 100%; border-collapse: collapse; }}
                th, td {{ padding: 2px 4px; }}
                .totals td {{ padding-top: 4px; }}
            </style>
        </head>
        <body>
            <h2>{config.STORE_HEADER}</h2>
            <p>Invoice No: <b>{escape(invoice.invoice_number)}</b><br />Date: {escape(invoice.date)}</p>
            <p>{client}</p>
            <table>
                <tr><th align='left'>Item</th><th align='right'>Qty</th><th align='right'>Price</th>
                <th align='right'>Disc</th><th align='right'>Taxable</th><th align='left'>Tax Type</th>
                <th align='right'>Tax</th><th align='right'>Total</th></tr>
                {''.join(rows)}
            </table>
            <hr />
            <table class='totals'>
                <tr><td>Subtotal</td><td align='right'>{format_currency(totals.subtotal)}</td></tr>
                <tr><td>CGST</td><td align='right'>{format_currency(totals.total_cgst)}</td></tr>
                <tr><td>SGST</td><td align='right'>{format_currency(totals.total_sgst)}</td></tr>
                <tr><td>IGST</td><td align='right'>{format_currency(totals.total_igst)}</td></tr>
                <tr><td>Round Off</td><td align='right'>{format_currency(totals.rounding)}</td></tr>
                <tr><td><b>Grand Total</b></td><td align='right'><b>{format_currency(totals.grand_total)}</b></td></tr>
            </table>
        </body>
        </html>
        """

    def print_invoice(self, invoice: Invoice, parent: QWidget | None = None) -> bool:
        """Open the print dialog and print; returns False if cancelled."""
        printer = QPrinter(QPrinter.HighResolution)
        dialog = QPrintDialog(printer, parent)
        if dialog.exec_() != QDialog.Accepted:
            return False

        doc = QTextDocument()
        doc.setHtml(self.build_html(invoice))
        doc.print_(printer)
        logger.info("Printed invoice %s", invoice.invoice_number)
        return True

    def render_image(self, widget: QWidget) -> QImage:
        scale = self.render_scale
        image = QImage(widget.width() * scale, widget.height() * scale, QImage.Format_ARGB32)
        image.fill(Qt.white)
        painter = QPainter(image)
        painter.scale(scale, scale)
        widget.render(painter)
        painter.end()
        return image

    def export_pdf(self, widget: QWidget, path: Path | str) -> Path:
        """Capture the widget and write it as an A4 PDF, one band per page."""
        path = Path(path)
        image = self.render_image(widget)
        offsets = plan_pdf_pages(image.width(), image.height())
        if not offsets:
            raise ValueError("Nothing to export: the invoice has no visible area.")

        printer = QPrinter(QPrinter.HighResolution)
        printer.setOutputFormat(QPrinter.PdfFormat)
        printer.setOutputFileName(str(path))
        printer.setPageSize(QPageSize(QPageSize.A4))
        printer.setPageOrientation(QPageLayout.Portrait)
        printer.setFullPage(True)

        dots_per_mm = printer.resolution() / 25.4
        width_mm = config.PDF_IMAGE_WIDTH_MM
        height_mm = image.height() * width_mm / image.width()

        painter = QPainter()
        if not painter.begin(printer):
            raise OSError(f"Could not write PDF to {path}")
        try:
            for page, offset in enumerate(offsets):
                if page:
                    printer.newPage()
                target = QRectF(
                    config.PDF_MARGIN_MM * dots_per_mm,
                    offset * dots_per_mm,
                    width_mm * dots_per_mm,
                    height_mm * dots_per_mm,
                )
                painter.drawImage(target, image)
        finally:
            painter.end()

        logger.info("Exported %d page(s) to %s", len(offsets), path)
        return path
