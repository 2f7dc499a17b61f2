#!/usr/bin/env python
"""Development server: hot reload, DEBUG-level console logging."""

import logging
import os

os.environ.setdefault("DEV__RELOAD", "true")
os.environ.setdefault("DEV__LOG_LEVEL", "DEBUG")

from docmargin import main

if __name__ in {"__main__", "__mp_main__"}:
    # Third-party chatter drowns out our own DEBUG records
    for name in ("watchfiles", "httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)
    main()
