from __future__ import annotations

import logging
import os

LOGGER_NAME = "creator_invoices"


def get_logger(name: str = "") -> logging.Logger:
    root = logging.getLogger(LOGGER_NAME)
    if not root.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter("[%(levelname)s] %(name)s: %(message)s")
        handler.setFormatter(formatter)
        root.addHandler(handler)
        level = os.environ.get("LOG_LEVEL", "INFO").upper()
        root.setLevel(getattr(logging, level, logging.INFO))
    if not name:
        return root
    return root.getChild(name.rsplit(".", 1)[-1])
