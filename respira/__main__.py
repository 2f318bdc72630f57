"""Allow running Respira as a module: python -m respira."""

import logging
import sys

from PyQt6.QtWidgets import QApplication

from .database.db import init_db
from .logging_config import configure_logging
from .app import RespiraApp


def main() -> None:
    configure_logging()
    init_db()
    logging.getLogger(__name__).info("Respira ready")

    app = QApplication(sys.argv)
    app.setApplicationName("Respira")
    app.setOrganizationName("Respira")

    window = RespiraApp()
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
