"""Configuration constants for the GST Invoice Form."""

from pathlib import Path

# Workbook that stands in for browser local storage.
STORAGE_PATH: Path = Path("data/invoice_storage.xlsx")

# Sheet name inside the storage workbook.
STORAGE_SHEET_NAME: str = "Storage"

# Storage keys for the saved draft and the invoice number counter.
CURRENT_INVOICE_KEY: str = "sbjr_current_invoice"
LAST_INVOICE_KEY: str = "sbjr_last_invoice"

# Invoice numbers look like SBJR-0001.
INVOICE_PREFIX: str = "SBJR"
INVOICE_NUMBER_DIGITS: int = 4

# Intra-state sales book this rate once as CGST and once as SGST.
CGST_RATE: float = 0.09
IGST_RATE: float = 0.18

CURRENCY_SYMBOL: str = "₹"

# Bumped whenever the saved invoice layout changes.
SNAPSHOT_SCHEMA_VERSION: int = 1

# Raster PDF export geometry, in millimeters on A4 portrait.
PDF_IMAGE_WIDTH_MM: float = 190.0
PDF_PAGE_HEIGHT_MM: float = 295.0
PDF_MARGIN_MM: float = 10.0
PDF_RENDER_SCALE: int = 2

# Header text that prints on top of the invoice.
STORE_HEADER: str = "Tax Invoice"

LOG_LEVEL: str = "INFO"
LOG_FORMAT: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"
