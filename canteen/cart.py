"""Cart arithmetic and the session keys that hold orders."""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, time
from typing import Any
from zoneinfo import ZoneInfo

from canteen.config import CANTEEN_TIMEZONE, CLOSE_HOUR, OPEN_HOUR
from canteen.data import find_menu_item
from canteen.models import Cart, CartLine, MenuItem
from canteen.persistence import LAST_ORDER_KEY, ORDER_KEY, SessionStorage

logger = logging.getLogger(__name__)


def add_item(cart: Cart, item: MenuItem) -> CartLine:
    """Add one unit of ``item`` and return the affected line."""
    for line in cart.items:
        if str(line.id) == str(item.id):
            line.quantity += 1
            break
    else:
        line = CartLine(id=item.id, name=item.name, price=item.price, description=item.description)
        cart.items.append(line)
    cart.total += item.price
    return line


def change_quantity(cart: Cart, item_id: int | str, delta: int, menu: list[MenuItem]) -> None:
    """Adjust one line by ``delta``; lines that reach zero are removed."""
    line = next((line for line in cart.items if str(line.id) == str(item_id)), None)
    if line is None:
        return
    menu_item = find_menu_item(menu, item_id)
    if menu_item is None:
        return

    line.quantity += delta
    if line.quantity <= 0:
        cart.items.remove(line)
        cart.total -= menu_item.price
    else:
        cart.total += delta * menu_item.price
    cart.total = max(0, cart.total)


def order_description(cart: Cart) -> str:
    return ", ".join(f"{line.name} (x{line.quantity})" for line in cart.items)


def _local_timestamp(now: datetime | None) -> str:
    return (now or datetime.now()).strftime("%d/%m/%Y, %I:%M:%S %p")


def build_order_payload(cart: Cart, name: str, room: str, mobile: str, now: datetime | None = None) -> dict[str, Any]:
    return {
        "name": name.strip(),
        "room": room.strip(),
        "mobile": mobile.strip(),
        "order": order_description(cart),
        "total": cart.total,
        "items": [line.to_dict() for line in cart.items],
        "timestamp": _local_timestamp(now),
    }


def build_feedback_payload(text: str, now: datetime | None = None) -> dict[str, Any]:
    return {"feedback": text.strip(), "timestamp": _local_timestamp(now)}


def load_cart(storage: SessionStorage) -> Cart:
    try:
        raw = storage.get_json(ORDER_KEY)
        return Cart.from_dict(raw) if isinstance(raw, dict) else Cart()
    except (sqlite3.Error, ValueError, KeyError, TypeError) as exc:
        logger.warning("Discarding unreadable cart: %s", exc)
        return Cart()


def save_cart(storage: SessionStorage, cart: Cart) -> None:
    storage.set_json(ORDER_KEY, cart.to_dict())


def clear_cart(storage: SessionStorage) -> None:
    storage.remove_item(ORDER_KEY)


def save_last_order(storage: SessionStorage, payload: dict[str, Any]) -> None:
    storage.set_json(LAST_ORDER_KEY, payload)


def load_last_order(storage: SessionStorage) -> dict[str, Any] | None:
    try:
        raw = storage.get_json(LAST_ORDER_KEY)
    except (sqlite3.Error, ValueError) as exc:
        logger.warning("Discarding unreadable last order: %s", exc)
        return None
    return raw if isinstance(raw, dict) else None


def is_open(now: datetime | None = None) -> bool:
    """Whether the canteen is taking orders; the window wraps past midnight."""
    tz = ZoneInfo(CANTEEN_TIMEZONE)
    local = now.astimezone(tz) if now is not None and now.tzinfo else (now or datetime.now(tz))
    current = local.time()
    opens, closes = time(OPEN_HOUR), time(CLOSE_HOUR)
    if opens <= closes:
        return opens <= current < closes
    return current >= opens or current < closes
