"""Menu loading with a built-in fallback."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import httpx

from canteen.config import MENU_PATH, TIMEOUT_MS
from canteen.constant import FALLBACK_MENU
from canteen.models import MenuItem

logger = logging.getLogger(__name__)


def _is_valid_item(raw: Any) -> bool:
    return (
        isinstance(raw, dict)
        and raw.get("id") is not None
        and bool(raw.get("name"))
        and isinstance(raw.get("price"), (int, float))
        and not isinstance(raw.get("price"), bool)
    )


def _to_menu_item(raw: dict[str, Any]) -> MenuItem:
    return MenuItem(
        id=raw["id"],
        name=str(raw["name"]),
        price=raw["price"],
        description=str(raw.get("description") or ""),
    )


def fallback_menu_items() -> list[MenuItem]:
    return [_to_menu_item(raw) for raw in FALLBACK_MENU]


def _read_menu_document(source: str) -> Any:
    if source.startswith(("http://", "https://")):
        response = httpx.get(source, timeout=TIMEOUT_MS / 1000, follow_redirects=True)
        response.raise_for_status()
        return response.json()
    return json.loads(Path(source).read_text(encoding="utf-8"))


def load_menu_items(source: str = MENU_PATH) -> list[MenuItem]:
    """Load the menu from a JSON file or URL, falling back to the built-in list."""
    try:
        logger.info("Loading menu items from %s", source)
        raw_items = _read_menu_document(source)
        if not isinstance(raw_items, list) or not raw_items:
            raise ValueError("Invalid items data received")

        valid = [raw for raw in raw_items if _is_valid_item(raw)]
        if len(valid) != len(raw_items):
            logger.warning("%d invalid items filtered out", len(raw_items) - len(valid))
        if not valid:
            raise ValueError("No usable items in menu document")
        return [_to_menu_item(raw) for raw in valid]
    except (OSError, ValueError, httpx.HTTPError) as exc:
        logger.warning("Failed to load menu from %s, using fallback items: %s", source, exc)
        return fallback_menu_items()


def find_menu_item(items: list[MenuItem], item_id: int | str) -> MenuItem | None:
    """Look up an item by id, tolerating ids that arrive as strings."""
    for item in items:
        if item.id == item_id or str(item.id) == str(item_id):
            return item
    return None
