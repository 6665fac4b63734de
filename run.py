#!/usr/bin/env python
"""Development server for the annotator-extras demo."""

import logging
import os

from annotator_extras import main

if __name__ in {"__main__", "__mp_main__"}:
    # Enable DEBUG logging to console for development
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(name)s: %(message)s",
    )
    # Silence noisy loggers
    logging.getLogger("watchfiles").setLevel(logging.WARNING)
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    os.environ.setdefault("ANNOTATOR_EXTRAS_RELOAD", "1")
    main()
