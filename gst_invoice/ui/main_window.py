"""Main PyQt window for the GST Invoice Form."""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional

from PyQt5.QtCore import QDate, QLocale, Qt
from PyQt5.QtGui import QDoubleValidator, QFont
from PyQt5.QtWidgets import (
    QAbstractItemView,
    QComboBox,
    QDateEdit,
    QFileDialog,
    QFormLayout,
    QGridLayout,
    QGroupBox,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QLineEdit,
    QMainWindow,
    QMessageBox,
    QPlainTextEdit,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from gst_invoice import config
from gst_invoice.calculator import compute_invoice
from gst_invoice.data.invoice_repo import InvoiceNumberCounter, InvoiceRepository
from gst_invoice.data_store import WorkbookStorage
from gst_invoice.models import Invoice, InvoiceTotals, LineItem, TaxRegime, format_amount, format_currency
from gst_invoice.printing.invoice_exporter import InvoiceExporter, default_pdf_name


logger = logging.getLogger(__name__)

HEADERS = ["Item", "Qty", "Price", "Discount %", "Taxable", "Tax Type", "Tax", "Line Total", ""]
COL_NAME, COL_QTY, COL_PRICE, COL_DISCOUNT, COL_TAXABLE, COL_TAX_TYPE, COL_TAX, COL_TOTAL, COL_REMOVE = range(
    len(HEADERS)
)
MAX_AMOUNT = 1e12


class MainWindow(QMainWindow):
    """UI controller that ties together line items, totals, storage and export."""

    def __init__(
        self,
        storage: Optional[WorkbookStorage] = None,
        exporter: Optional[InvoiceExporter] = None,
    ) -> None:
        super().__init__()
        self.setWindowTitle("GST Invoice")
        self.resize(1100, 700)

        self.storage: Optional[WorkbookStorage] = None
        self.counter: Optional[InvoiceNumberCounter] = None
        self.repository: Optional[InvoiceRepository] = None
        self.exporter = exporter or InvoiceExporter()

        self._build_ui()
        self._open_storage(storage)
        self._start_invoice(self._issue_number() or "")

    def _build_ui(self) -> None:
        """Construct all widgets and layouts."""
        root = QWidget()
        main_layout = QVBoxLayout()

        # Everything inside the sheet is what gets printed or exported.
        self.invoice_sheet = QWidget()
        sheet_layout = QVBoxLayout()
        sheet_layout.addLayout(self._build_header())
        sheet_layout.addWidget(self._build_table(), 1)
        sheet_layout.addWidget(self._build_totals())
        self.invoice_sheet.setLayout(sheet_layout)

        main_layout.addWidget(self.invoice_sheet, 1)
        main_layout.addLayout(self._build_buttons())
        root.setLayout(main_layout)
        self.setCentralWidget(root)

    def _build_header(self) -> QHBoxLayout:
        header = QHBoxLayout()

        details = QFormLayout()
        self.invoice_no_input = QLineEdit()
        self.invoice_no_input.setReadOnly(True)
        self.date_input = QDateEdit()
        self.date_input.setCalendarPopup(True)
        self.date_input.setDisplayFormat("yyyy-MM-dd")
        details.addRow("Invoice No:", self.invoice_no_input)
        details.addRow("Date:", self.date_input)

        client_group = QGroupBox("Bill To")
        client_layout = QVBoxLayout()
        self.client_input = QPlainTextEdit()
        self.client_input.setPlaceholderText("Client name, address, GSTIN...")
        self.client_input.setMaximumHeight(80)
        client_layout.addWidget(self.client_input)
        client_group.setLayout(client_layout)

        title = QLabel(config.STORE_HEADER)
        title_font = QFont()
        title_font.setPointSize(18)
        title_font.setBold(True)
        title.setFont(title_font)

        header.addWidget(title)
        header.addLayout(details)
        header.addWidget(client_group, 1)
        return header

    def _build_table(self) -> QTableWidget:
        self.table = QTableWidget(0, len(HEADERS))
        self.table.setHorizontalHeaderLabels(HEADERS)
        self.table.setSelectionMode(QAbstractItemView.NoSelection)
        self.table.horizontalHeader().setSectionResizeMode(COL_NAME, QHeaderView.Stretch)
        self.table.verticalHeader().setVisible(False)
        return self.table

    def _build_totals(self) -> QGroupBox:
        totals_group = QGroupBox("Totals")
        totals_layout = QGridLayout()

        self.subtotal_value = QLabel()
        self.cgst_value = QLabel()
        self.sgst_value = QLabel()
        self.igst_value = QLabel()
        self.rounding_value = QLabel()
        self.grand_total_value = QLabel()
        total_font = QFont()
        total_font.setPointSize(16)
        total_font.setBold(True)
        self.grand_total_value.setFont(total_font)

        rows = [
            ("Subtotal", self.subtotal_value),
            ("CGST", self.cgst_value),
            ("SGST", self.sgst_value),
            ("IGST", self.igst_value),
            ("Round Off", self.rounding_value),
            ("Grand Total", self.grand_total_value),
        ]
        for idx, (caption, label) in enumerate(rows):
            label.setAlignment(Qt.AlignRight | Qt.AlignVCenter)
            totals_layout.addWidget(QLabel(caption), idx, 0)
            totals_layout.addWidget(label, idx, 1)
        totals_group.setLayout(totals_layout)
        self._show_totals(InvoiceTotals())
        return totals_group

    def _build_buttons(self) -> QHBoxLayout:
        buttons = QHBoxLayout()
        self.add_row_button = QPushButton("Add Item")
        self.add_row_button.clicked.connect(lambda: self.add_row())
        self.new_button = QPushButton("New Invoice")
        self.new_button.clicked.connect(self._on_new_invoice)
        self.save_button = QPushButton("Save")
        self.save_button.clicked.connect(self._on_save)
        self.load_button = QPushButton("Load")
        self.load_button.clicked.connect(self._on_load)
        self.print_button = QPushButton("Print")
        self.print_button.clicked.connect(self._on_print)
        self.pdf_button = QPushButton("Export PDF")
        self.pdf_button.clicked.connect(self._on_export_pdf)

        buttons.addWidget(self.add_row_button)
        buttons.addStretch()
        for button in (self.new_button, self.save_button, self.load_button, self.print_button, self.pdf_button):
            buttons.addWidget(button)
        return buttons

    def _open_storage(self, storage: Optional[WorkbookStorage]) -> None:
        try:
            self.storage = storage or WorkbookStorage()
        except Exception as exc:  # noqa: BLE001 - surface workbook issues to user
            logger.exception("Could not open invoice storage")
            QMessageBox.critical(self, "Storage Error", f"Failed to open invoice storage:\n{exc}")
            for button in (self.new_button, self.save_button, self.load_button):
                button.setEnabled(False)
            return

        self.counter = InvoiceNumberCounter(self.storage)
        self.repository = InvoiceRepository(self.storage)

    def _issue_number(self) -> Optional[str]:
        """Return the next invoice number, "" without storage, or None if it failed."""
        if not self.counter:
            return ""
        try:
            return self.counter.next()
        except Exception as exc:  # noqa: BLE001
            logger.exception("Could not issue an invoice number")
            QMessageBox.critical(self, "Storage Error", f"Could not issue a new invoice number:\n{exc}")
            return None

    def _start_invoice(self, invoice_number: str) -> None:
        self.invoice_no_input.setText(invoice_number)
        self.date_input.setDate(QDate.currentDate())
        self.client_input.clear()
        self.table.setRowCount(0)
        self.add_row()

    # Rows

    def add_row(self, data: Optional[Mapping[str, Any]] = None) -> None:
        """Append an editable row; missing fields get the new-row defaults."""
        data = data or {}
        row = self.table.rowCount()
        self.table.insertRow(row)

        name_edit = QLineEdit(str(data.get("name") or ""))
        name_edit.setPlaceholderText("Item name")
        self.table.setCellWidget(row, COL_NAME, name_edit)

        for col, key, default, top in (
            (COL_QTY, "quantity", 1, MAX_AMOUNT),
            (COL_PRICE, "unitPrice", 0, MAX_AMOUNT),
            (COL_DISCOUNT, "discountPercent", 0, 100.0),
        ):
            edit = QLineEdit(str(data.get(key) or default))
            edit.setAlignment(Qt.AlignRight)
            edit.setValidator(self._number_validator(top, edit))
            edit.textChanged.connect(self.calculate_totals)
            self.table.setCellWidget(row, col, edit)

        tax_type = QComboBox()
        for regime in TaxRegime:
            tax_type.addItem(regime.label, regime.value)
        index = tax_type.findData(data.get("taxRegime"))
        tax_type.setCurrentIndex(index if index >= 0 else 0)
        tax_type.currentIndexChanged.connect(self.calculate_totals)
        self.table.setCellWidget(row, COL_TAX_TYPE, tax_type)

        for col in (COL_TAXABLE, COL_TAX, COL_TOTAL):
            cell = QTableWidgetItem(format_amount(0))
            cell.setFlags(Qt.ItemIsEnabled)
            cell.setTextAlignment(Qt.AlignRight | Qt.AlignVCenter)
            self.table.setItem(row, col, cell)

        remove_button = QPushButton("Remove")
        remove_button.clicked.connect(lambda _checked=False, button=remove_button: self._remove_row(button))
        self.table.setCellWidget(row, COL_REMOVE, remove_button)

        self.calculate_totals()

    @staticmethod
    def _number_validator(top: float, parent: QLineEdit) -> QDoubleValidator:
        # Plain decimals in the C locale, the same text parse_number reads.
        validator = QDoubleValidator(0.0, top, 4, parent)
        validator.setNotation(QDoubleValidator.StandardNotation)
        validator.setLocale(QLocale.c())
        return validator

    def _remove_row(self, button: QPushButton) -> None:
        for row in range(self.table.rowCount()):
            if self.table.cellWidget(row, COL_REMOVE) is button:
                self.table.removeRow(row)
                break
        self.calculate_totals()

    def line_items(self) -> List[LineItem]:
        """Snapshot the rows as entered."""
        items: List[LineItem] = []
        for row in range(self.table.rowCount()):
            items.append(
                LineItem(
                    name=self.table.cellWidget(row, COL_NAME).text(),
                    quantity=self.table.cellWidget(row, COL_QTY).text(),
                    unit_price=self.table.cellWidget(row, COL_PRICE).text(),
                    discount_percent=self.table.cellWidget(row, COL_DISCOUNT).text(),
                    tax_regime=self.table.cellWidget(row, COL_TAX_TYPE).currentData(),
                )
            )
        return items

    def calculate_totals(self, *_args) -> InvoiceTotals:
        lines, totals = compute_invoice(self.line_items())
        for row, amounts in enumerate(lines):
            self.table.item(row, COL_TAXABLE).setText(format_amount(amounts.taxable_amount))
            self.table.item(row, COL_TAX).setText(format_amount(amounts.tax_amount))
            self.table.item(row, COL_TOTAL).setText(format_amount(amounts.line_total))
        self._show_totals(totals)
        return totals

    def _show_totals(self, totals: InvoiceTotals) -> None:
        self.subtotal_value.setText(format_currency(totals.subtotal))
        self.cgst_value.setText(format_currency(totals.total_cgst))
        self.sgst_value.setText(format_currency(totals.total_sgst))
        self.igst_value.setText(format_currency(totals.total_igst))
        self.rounding_value.setText(format_currency(totals.rounding))
        self.grand_total_value.setText(format_currency(totals.grand_total))

    # Whole invoice

    def current_invoice(self) -> Invoice:
        return Invoice(
            invoice_number=self.invoice_no_input.text(),
            date=self.date_input.date().toString(Qt.ISODate),
            client_details=self.client_input.toPlainText(),
            items=self.line_items(),
        )

    def apply_invoice(self, invoice: Invoice) -> None:
        """Replace all form state with the given invoice."""
        self.invoice_no_input.setText(invoice.invoice_number)
        date = QDate.fromString(invoice.date, Qt.ISODate)
        self.date_input.setDate(date if date.isValid() else QDate.currentDate())
        self.client_input.setPlainText(invoice.client_details)
        self.table.setRowCount(0)
        for item in invoice.items:
            self.add_row(item.to_dict())
        self.calculate_totals()

    def _confirm(self, title: str, text: str) -> bool:
        answer = QMessageBox.question(self, title, text, QMessageBox.Yes | QMessageBox.No, QMessageBox.No)
        return answer == QMessageBox.Yes

    def _on_new_invoice(self) -> None:
        if not self._confirm("New Invoice", "Start a new invoice? Current data will be lost."):
            return
        number = self._issue_number()
        if number is None:
            return
        self._start_invoice(number)

    def _on_save(self) -> None:
        if not self.repository:
            return
        try:
            saved = self.repository.save(self.current_invoice())
        except Exception as exc:  # noqa: BLE001
            logger.exception("Saving invoice failed")
            QMessageBox.critical(self, "Save Failed", f"Could not save the invoice:\n{exc}")
            return
        QMessageBox.information(self, "Saved", f"Invoice {saved.invoice_number} saved.")

    def _on_load(self) -> None:
        if not self.repository:
            return
        if not self.repository.has_saved_invoice():
            QMessageBox.information(self, "Nothing to load", "No saved invoice found.")
            return
        if not self._confirm("Load Invoice", "Load last saved invoice? This will replace current data."):
            return

        try:
            invoice = self.repository.load()
        except ValueError as exc:
            logger.exception("Saved invoice could not be read")
            QMessageBox.critical(self, "Load Failed", str(exc))
            return
        if invoice is None:
            QMessageBox.information(self, "Nothing to load", "No saved invoice found.")
            return
        self.apply_invoice(invoice)

    def _on_print(self) -> None:
        self.exporter.print_invoice(self.current_invoice(), self)

    def _on_export_pdf(self) -> None:
        suggested = default_pdf_name(self.invoice_no_input.text())
        path, _ = QFileDialog.getSaveFileName(self, "Export PDF", suggested, "PDF Files (*.pdf)")
        if not path:
            return
        try:
            written = self.exporter.export_pdf(self.invoice_sheet, path)
        except (OSError, ValueError) as exc:
            logger.exception("PDF export failed")
            QMessageBox.critical(self, "Export Failed", f"Could not export PDF:\n{exc}")
            return
        QMessageBox.information(self, "Exported", f"Invoice exported to {written}.")
