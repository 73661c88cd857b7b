"""Printable invoice for the last submitted order."""

from __future__ import annotations

from html import escape
from pathlib import Path
from typing import Any

from canteen.config import CANTEEN_CONTACT, CANTEEN_NAME, INVOICE_PATH

FOOTER_LINES = (
    f"Thank you for ordering with {CANTEEN_NAME}!",
    f"Open: 10 PM - 1 AM | Contact: {CANTEEN_CONTACT}",
)

_INVOICE_CSS = """
    body { font-family: Arial, sans-serif; padding: 20px; }
    .header { text-align: center; border-bottom: 2px solid #333; padding-bottom: 10px; }
    .order-details { margin: 20px 0; }
    .items { margin: 20px 0; }
    .item { display: flex; justify-content: space-between; margin: 5px 0; }
    .total { font-weight: bold; border-top: 1px solid #333; padding-top: 10px; }
    .footer { text-align: center; margin-top: 30px; }
    @media print { body { margin: 0; } }
"""


def format_amount(amount: float) -> str:
    if isinstance(amount, float) and amount.is_integer():
        amount = int(amount)
    return f"₹{amount}"


def _require_items(order: dict[str, Any] | None) -> list[dict[str, Any]]:
    if not order or not order.get("items"):
        raise ValueError("No bill available")
    return list(order["items"])


def _item_rows(items: list[dict[str, Any]]) -> list[tuple[str, str]]:
    return [
        (f"{item['name']} x {item['quantity']}", format_amount(item["price"] * item["quantity"]))
        for item in items
    ]


def invoice_lines(order: dict[str, Any]) -> list[tuple[str, str]]:
    """Flatten an order into (left, right) rows; headings use an empty right column."""
    items = _require_items(order)
    rows: list[tuple[str, str]] = [
        (CANTEEN_NAME, ""),
        (f"Invoice - {order.get('timestamp', '')}", ""),
        (f"Customer: {order.get('name', '')}", ""),
        (f"Room: {order.get('room', '')}", ""),
        (f"Mobile: {order.get('mobile', '')}", ""),
    ]
    rows.extend(_item_rows(items))
    rows.append(("Total Amount:", format_amount(order.get("total", 0))))
    rows.extend((line, "") for line in FOOTER_LINES)
    return rows


def build_invoice_html(order: dict[str, Any]) -> str:
    """Render a standalone HTML invoice with all user text escaped."""
    items = _require_items(order)
    item_html = "\n".join(
        f'      <div class="item"><span>{escape(left)}</span><span>{escape(right)}</span></div>'
        for left, right in _item_rows(items)
    )
    footer_html = "\n".join(f"      <p>{escape(line)}</p>" for line in FOOTER_LINES)
    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>{escape(CANTEEN_NAME)} - Invoice</title>
  <style>{_INVOICE_CSS}</style>
</head>
<body>
  <div class="header">
    <h1>{escape(CANTEEN_NAME)}</h1>
    <p>Invoice - {escape(str(order.get("timestamp", "")))}</p>
  </div>
  <div class="order-details">
    <p><strong>Customer:</strong> {escape(str(order.get("name", "")))}</p>
    <p><strong>Room:</strong> {escape(str(order.get("room", "")))}</p>
    <p><strong>Mobile:</strong> {escape(str(order.get("mobile", "")))}</p>
  </div>
  <div class="items">
    <h3>Order Items:</h3>
{item_html}
  </div>
  <div class="total">
    <div class="item"><span>Total Amount:</span><span>{escape(format_amount(order.get("total", 0)))}</span></div>
  </div>
  <div class="footer">
{footer_html}
  </div>
</body>
</html>
"""


def write_invoice(order: dict[str, Any] | None, path: str = INVOICE_PATH) -> Path:
    """Write the invoice HTML for ``order`` and return where it went."""
    document = build_invoice_html(order or {})
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(document, encoding="utf-8")
    return target
