"""Runtime configuration defaults for submission, storage and printing."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

SUBMIT_URL = (
    "https://script.google.com/macros/s/"
    "AKfycbxDzYxMyyXyxgFBZ8fNGUBWD0RItaJvG7tSNxQ8UzqW29hkmRRuxrEpJyo7T6oKpPii/exec"
)

MAX_RETRIES = 3
RETRY_DELAY_MS = 1000
TIMEOUT_MS = 10000
# Backup endpoints, tried once each after the primary gives up.
FALLBACK_ENDPOINTS: tuple[str, ...] = ()
SOURCE_TAG = "night_canteen_app"

SUCCESS_LEDGER_CAPACITY = 10
FAILED_LEDGER_CAPACITY = 5
RETRY_SWEEP_DELAY_SECONDS = 2.0

# One in-memory database per app run stands in for browser sessionStorage.
SESSION_DB_PATH = ":memory:"
MENU_PATH = "data/items.json"
INVOICE_PATH = "data/invoice.html"
DEBUG_LOG_PATH = os.environ.get("CANTEEN_DEBUG_LOG", "/tmp/canteen-debug.log")

CANTEEN_NAME = "Night Canteen"
CANTEEN_CONTACT = "9341320141"
OPEN_HOUR = 22
CLOSE_HOUR = 1
CANTEEN_TIMEZONE = "Asia/Kolkata"

PRINTER_USB_VENDOR_ID = 0x28E9
PRINTER_USB_PRODUCT_ID = 0x0289
PRINTER_WIDTH_PX = 384
PRINTER_FONT_SIZE = 28
PRINTER_HEADER_FONT_SIZE = 44
PRINTER_FONT_PATH = "/System/Library/Fonts/SFNS.ttf"
PRINTER_LEFT_INDENT_PX = 12
PRINTER_RIGHT_GUTTER_PX = 8
PRINTER_TAIL_SPACER_PX = 70


@dataclass(frozen=True)
class SubmissionConfig:
    """Delivery knobs for one submission client."""

    url: str = SUBMIT_URL
    max_retries: int = MAX_RETRIES
    retry_delay_ms: int = RETRY_DELAY_MS
    timeout_ms: int = TIMEOUT_MS
    fallback_endpoints: tuple[str, ...] = field(default=FALLBACK_ENDPOINTS)
    source: str = SOURCE_TAG
    success_capacity: int = SUCCESS_LEDGER_CAPACITY
    failed_capacity: int = FAILED_LEDGER_CAPACITY
