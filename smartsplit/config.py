from __future__ import annotations

import os


class Config:
    DEFAULT_CURRENCY = os.getenv("SMARTSPLIT_CURRENCY", "GBP").strip().upper() or "GBP"
    MAX_DINERS = int(os.getenv("SMARTSPLIT_MAX_DINERS", "20"))
    MAX_ITEMS = int(os.getenv("SMARTSPLIT_MAX_ITEMS", "50"))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO"
