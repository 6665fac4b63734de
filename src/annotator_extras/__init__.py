"""annotator-extras - highlight colour and tag fields for an annotation widget.

Two field plugins (``ColorPlugin``, ``TagsPlugin``) for an annotator host
with editor and viewer surfaces, a headless host for tests and scripts,
and a NiceGUI demo.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

__version__ = "0.1.0"


def _setup_logging(log_dir: Path = Path("logs")) -> None:
    """Configure logging to both console and rotating file."""
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"annotator_extras.{os.getpid()}.log"

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # File handler - detailed logging with rotation (10MB, keep 5 backups)
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    # Console handler - less verbose
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    logging.info("Logging configured. Log file: %s", log_file.absolute())


def main() -> None:
    """Entry point for the annotator-extras demo application."""
    from nicegui import ui

    from annotator_extras.config import get_settings

    settings = get_settings()
    _setup_logging(settings.app.log_dir)

    import annotator_extras.ui  # noqa: F401 - registers routes

    port = settings.app.port
    print(f"annotator-extras v{__version__}")
    print(f"Starting demo on http://127.0.0.1:{port}")

    reload = os.environ.get("ANNOTATOR_EXTRAS_RELOAD", "0") != "0"
    ui.run(host="127.0.0.1", port=port, reload=reload, title="annotator-extras")


if __name__ in {"__main__", "__mp_main__"}:
    main()
