"""Allow running Pomodo as a module: python -m pomodo."""

import logging
import sys

from PyQt6.QtWidgets import QApplication

from .log import configure_logging
from .database.db import init_db
from .app import PomodoApp, make_icon


def main() -> None:
    configure_logging()
    init_db()
    logging.getLogger(__name__).info("Pomodo starting")

    app = QApplication(sys.argv)
    app.setApplicationName("Pomodo")
    app.setOrganizationName("Pomodo")
    app.setWindowIcon(make_icon())

    window = PomodoApp()
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
