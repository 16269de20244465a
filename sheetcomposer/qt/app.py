# Qt Application Entry Point
#
# Launches the SheetComposer editor.
#
# Usage:
#     sheetcomposer [image ...]
#   or
#     python -m sheetcomposer.qt.app [image ...]
#
# Image files given on the command line are added to the new sheet.

import logging
import os
import sys

from PySide6.QtWidgets import QApplication

from sheetcomposer import utils_core as Utils
from sheetcomposer.Document import Document
from sheetcomposer.errors import SheetError

from .main_window import MainWindow


def main():
    """Create the QApplication, Document, and MainWindow, then run."""
    Utils.loadConfiguration()
    Utils.setupLogging()

    app = QApplication(sys.argv)
    app.setApplicationName("SheetComposer")
    app.setApplicationVersion(Utils.__version__)

    document = Document()
    window = MainWindow(document)
    window.show()

    for path in [a for a in sys.argv[1:] if not a.startswith("-")]:
        if not os.path.isfile(path):
            logging.warning("Not a file: %s", path)
            continue
        try:
            document.add_image_from_file(path)
        except SheetError as e:
            logging.error("%s: %s", path, e)

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
