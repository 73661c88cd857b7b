"""Entry point for the night-canteen Textual app."""

from __future__ import annotations

import logging
from pathlib import Path

from canteen.canteen_app import CanteenApp
from canteen.config import DEBUG_LOG_PATH

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(path: str = DEBUG_LOG_PATH, level: int = logging.INFO) -> None:
    """Route log records to a file; the terminal belongs to the UI."""
    log_file = Path(path)
    log_file.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(filename=log_file, level=level, format=_LOG_FORMAT)
    # Request lines from httpx would drown out attempt logging.
    logging.getLogger("httpx").setLevel(logging.WARNING)


def main() -> None:
    configure_logging()
    app = CanteenApp()
    try:
        app.run()
    finally:
        app.storage.close()


if __name__ == "__main__":
    main()
