"""Rich text helpers for the menu, cart and status panes."""

from __future__ import annotations

from rich.text import Text

from canteen.invoice import format_amount
from canteen.models import Cart, MenuItem, SubmissionStats


def status_style(severity: str) -> str:
    """Return a consistent style for status messages."""
    if severity == "error":
        return "bold #ffffff on #b23a48"
    if severity == "success":
        return "bold #0b1f0f on #5fbf72"
    return "bold #ffffff on #2f6db5"


def format_menu_item(item: MenuItem, selected: bool) -> Text:
    text = Text()
    text.append("➤ " if selected else "  ")
    text.append(item.name, style="bold" if selected else "")
    text.append(f"  {format_amount(item.price)}", style="#5fbf72")
    if item.description:
        text.append(f"\n    {item.description}", style="dim")
    return text


def format_cart(cart: Cart, selected_index: int | None) -> Text:
    """Render cart lines with quantities, subtotals and the total."""
    text = Text()
    if cart.is_empty:
        text.append("No items selected yet.\nBrowse the menu to add items!", style="dim")
        return text

    for idx, line in enumerate(cart.items):
        if idx > 0:
            text.append("\n")
        text.append("➤ " if idx == selected_index else "  ")
        text.append(f"{line.name} x{line.quantity}")
        text.append(f"  {format_amount(line.subtotal)}", style="#5fbf72")
    text.append("\n\n")
    text.append("Total Amount: ", style="bold")
    text.append(format_amount(cart.total), style="bold #5fbf72")
    return text


def format_status(message: str, severity: str = "info") -> Text:
    text = Text()
    if message:
        text.append(f" {severity.upper()} ", style=status_style(severity))
        text.append(f" {message}")
    return text


def format_stats(stats: SubmissionStats) -> str:
    return (
        f"Submissions: {stats.successful} ok, {stats.failed} queued, "
        f"{stats.total} total ({stats.success_rate:.0%} success)"
    )
