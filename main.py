"""Entry point for the GST Invoice desktop app."""

import logging
import sys

from PyQt5.QtWidgets import QApplication

from gst_invoice import config
from gst_invoice.ui.main_window import MainWindow


def main() -> None:
    logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)
    app = QApplication(sys.argv)
    window = MainWindow()
    window.show()
    sys.exit(app.exec_())


if __name__ == "__main__":
    main()
