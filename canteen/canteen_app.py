"""Main Textual app class."""

from __future__ import annotations

import logging
from typing import Any

from rich.text import Text
from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.css.query import NoMatches
from textual.events import Key
from textual.reactive import reactive
from textual.widgets import Header, Static

from canteen.cart import (
    add_item,
    build_feedback_payload,
    build_order_payload,
    change_quantity,
    clear_cart,
    is_open,
    load_cart,
    load_last_order,
    save_cart,
    save_last_order,
)
from canteen.config import CANTEEN_NAME, INVOICE_PATH, MENU_PATH, RETRY_SWEEP_DELAY_SECONDS
from canteen.customer_modal import CustomerModal
from canteen.data import load_menu_items
from canteen.errors import SubmissionError
from canteen.feedback_modal import FeedbackModal
from canteen.invoice import write_invoice
from canteen.models import Cart, MenuItem
from canteen.persistence import LAST_ORDER_KEY, SessionStorage, SubmissionLedger
from canteen.printer import check_printer_dependencies, print_invoice
from canteen.rendering import format_cart, format_menu_item, format_stats, format_status
from canteen.submission import SubmissionClient

logger = logging.getLogger(__name__)


class CanteenApp(App):
    """A Textual app for browsing the menu, placing orders and sending feedback."""

    TITLE = CANTEEN_NAME
    SUB_TITLE = "Open 10 PM - 1 AM"

    CSS = """
    Screen {
        layout: vertical;
    }

    #main-layout {
        height: 1fr;
    }

    #menu-pane {
        width: 3fr;
        border: round $primary;
        padding: 1;
    }

    #order-pane {
        width: 2fr;
        border: round $secondary;
        padding: 1;
    }

    #menu-items {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    #selected-items {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    #status-bar {
        border: heavy $secondary;
        padding: 0 1;
        height: 4;
    }

    .pane-title {
        text-style: bold;
        margin-bottom: 1;
    }
    """

    selected_index = reactive(0)
    order_selected_index = reactive(None)
    submitting = reactive(False)

    BINDINGS = [
        ("up", "move_menu(-1)", "Previous item"),
        ("down", "move_menu(1)", "Next item"),
        ("enter", "add_selected", "Add to order"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(
        self,
        storage: SessionStorage | None = None,
        submitter: SubmissionClient | None = None,
        menu_source: str = MENU_PATH,
        invoice_path: str = INVOICE_PATH,
        retry_sweep_delay: float | None = RETRY_SWEEP_DELAY_SECONDS,
    ) -> None:
        super().__init__()
        self.storage = storage or SessionStorage()
        self.submitter = submitter or SubmissionClient(SubmissionLedger(self.storage))
        self.submission_debug = self.submitter.debug_surface()
        self.menu_source = menu_source
        self.invoice_path = invoice_path
        self.retry_sweep_delay = retry_sweep_delay
        self.menu_items: list[MenuItem] = []
        self.cart = Cart()
        self.printer_ready = False
        self.system_status = ""
        self.status_severity = "info"

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="main-layout"):
            with Vertical(id="menu-pane"):
                yield Static("Menu", classes="pane-title")
                yield Static("Loading...", id="menu-items")
            with Vertical(id="order-pane"):
                yield Static("Your Order", classes="pane-title")
                yield Static(id="selected-items")
        yield Static(id="status-bar")

    def on_mount(self) -> None:
        self.menu_items = load_menu_items(self.menu_source)
        self.cart = load_cart(self.storage)
        self.printer_ready, printer_msg = check_printer_dependencies()
        logger.info("on_mount menu_items=%d printer_status=%r", len(self.menu_items), printer_msg)
        if not is_open():
            self._set_status("We are closed right now. Orders are served 10 PM - 1 AM.", "info")
        if self.retry_sweep_delay is not None:
            self.set_timer(self.retry_sweep_delay, self._start_retry_sweep)
        self._refresh_all()

    async def on_unmount(self) -> None:
        await self.submitter.aclose()

    def _modal_open(self) -> bool:
        return isinstance(self.screen, (CustomerModal, FeedbackModal))

    def on_key(self, event: Key) -> None:
        if self._modal_open() or not event.is_printable or not event.character:
            return

        handlers = {
            "j": lambda: self.action_move_menu(1),
            "k": lambda: self.action_move_menu(-1),
            "a": self.action_add_selected,
            "]": lambda: self._move_order_selection(1),
            "[": lambda: self._move_order_selection(-1),
            "+": lambda: self._change_selected_quantity(1),
            "-": lambda: self._change_selected_quantity(-1),
            "o": self.action_proceed_to_order,
            "f": self.action_feedback,
            "b": self.action_download_bill,
            "n": self.action_new_order,
            "s": self.action_show_stats,
        }
        handler = handlers.get(event.character.lower())
        if handler is None:
            return
        handler()
        event.stop()

    def action_move_menu(self, delta: int) -> None:
        if self._modal_open() or not self.menu_items:
            return
        self.selected_index = (self.selected_index + delta) % len(self.menu_items)
        self._refresh_menu()

    def action_add_selected(self) -> None:
        if self._modal_open() or not self.menu_items:
            return
        item = self.menu_items[self.selected_index]
        add_item(self.cart, item)
        save_cart(self.storage, self.cart)
        self.order_selected_index = next(
            idx for idx, line in enumerate(self.cart.items) if str(line.id) == str(item.id)
        )
        self._set_status(f"{item.name} added to order!", "success")
        self._refresh_all()

    def action_proceed_to_order(self) -> None:
        if self.submitting:
            return
        if self.cart.is_empty:
            self._show_error("Please add items to your order first!")
            return
        self.push_screen(CustomerModal(self.cart), self._on_customer_details)

    def action_feedback(self) -> None:
        self.push_screen(FeedbackModal(), self._on_feedback)

    def action_download_bill(self) -> None:
        order = load_last_order(self.storage)
        if not order or not order.get("items"):
            self._show_error("No bill available to download!")
            return

        path = write_invoice(order, self.invoice_path)
        if not self.printer_ready:
            self._set_status(f"Invoice saved to {path}", "success")
            return
        try:
            print_invoice(order)
        except Exception as exc:
            logger.warning("Invoice print failed: %s", exc)
            self._show_error(f"Invoice saved to {path} but print failed: {exc}")
            return
        self._set_status(f"Invoice saved to {path} and printed", "success")

    def action_new_order(self) -> None:
        clear_cart(self.storage)
        self.storage.remove_item(LAST_ORDER_KEY)
        self.cart = Cart()
        self.order_selected_index = None
        self._set_status("Ready for a new order!", "success")
        self._refresh_all()

    def action_show_stats(self) -> None:
        self._set_status(format_stats(self.submission_debug.get_stats()), "info")

    def _on_customer_details(self, details: dict[str, str] | None) -> None:
        if details is None:
            return
        payload = build_order_payload(self.cart, details["name"], details["room"], details["mobile"])
        # Kept for invoice regeneration even if delivery fails.
        save_last_order(self.storage, payload)
        self.submitting = True
        self._set_status("Placing your order...", "info")
        self.run_worker(self._deliver_order(payload), group="submit", exclusive=True)

    def _on_feedback(self, text: str | None) -> None:
        if text is None:
            return
        self.run_worker(self._deliver_feedback(build_feedback_payload(text)), group="feedback")

    async def _deliver_order(self, payload: dict[str, Any]) -> None:
        try:
            await self.submitter.submit(payload)
        except SubmissionError as exc:
            logger.error("Error submitting order: %s", exc)
            self._show_error("Failed to place order. Please try again!")
            return
        finally:
            self.submitting = False

        clear_cart(self.storage)
        self.cart = Cart()
        self.order_selected_index = None
        self._set_status("Order placed successfully! Press B for your bill, N for a new order.", "success")
        self.notify("Order placed successfully!")
        self._refresh_all()

    async def _deliver_feedback(self, payload: dict[str, Any]) -> None:
        try:
            await self.submitter.submit(payload)
        except SubmissionError as exc:
            logger.error("Error submitting feedback: %s", exc)
            self._show_error("Failed to submit feedback. Please try again!")
            return
        self._set_status("Thank you for your feedback!", "success")
        self.notify("Thank you for your feedback!")

    def _start_retry_sweep(self) -> None:
        self.run_worker(self._retry_sweep(), group="retry-sweep", exclusive=True)

    async def _retry_sweep(self) -> None:
        replayed = await self.submitter.retry_failed_submissions()
        if replayed:
            self._set_status(f"Delivered {replayed} queued submission(s)", "success")

    def _move_order_selection(self, delta: int) -> None:
        if not self.cart.items:
            return

        if self.order_selected_index is None:
            self.order_selected_index = 0 if delta > 0 else len(self.cart.items) - 1
        else:
            self.order_selected_index = (self.order_selected_index + delta) % len(self.cart.items)
        self._refresh_order()

    def _change_selected_quantity(self, delta: int) -> None:
        if self.order_selected_index is None or not (0 <= self.order_selected_index < len(self.cart.items)):
            return
        line = self.cart.items[self.order_selected_index]
        change_quantity(self.cart, line.id, delta, self.menu_items)
        save_cart(self.storage, self.cart)
        if not self.cart.items:
            self.order_selected_index = None
        else:
            self.order_selected_index = min(self.order_selected_index, len(self.cart.items) - 1)
        self._refresh_order()

    def _set_status(self, message: str, severity: str) -> None:
        self.system_status = message
        self.status_severity = severity
        self._refresh_status()

    def _show_error(self, message: str) -> None:
        self._set_status(message, "error")
        self.notify(message, severity="error")

    def _visible_rows(self, widget: Static) -> int:
        height = widget.size.height
        if height <= 0:
            return 8
        # Menu entries take two lines each (name + description).
        return max(1, height // 2)

    def _window_bounds(self, total: int, rows: int, selected: int | None) -> tuple[int, int]:
        if total <= 0:
            return (0, 0)

        rows = max(1, rows)
        if total <= rows:
            return (0, total)

        if selected is None:
            start = 0
        else:
            start = max(0, selected - rows // 2)
            start = min(start, total - rows)

        return (start, start + rows)

    def _refresh_all(self) -> None:
        self._refresh_menu()
        self._refresh_order()
        self._refresh_status()

    def _refresh_menu(self) -> None:
        try:
            menu_widget = self.query_one("#menu-items", Static)
        except NoMatches:
            return
        if not self.menu_items:
            menu_widget.update("(menu unavailable)")
            return

        start, end = self._window_bounds(
            len(self.menu_items), self._visible_rows(menu_widget), self.selected_index
        )
        lines = Text()
        if start > 0:
            lines.append("⋮\n", style="dim")
        for idx in range(start, end):
            if idx > start:
                lines.append("\n")
            lines.append_text(format_menu_item(self.menu_items[idx], idx == self.selected_index))
        if end < len(self.menu_items):
            lines.append("\n⋮", style="dim")
        menu_widget.update(lines)

    def _refresh_order(self) -> None:
        try:
            order_widget = self.query_one("#selected-items", Static)
        except NoMatches:
            return
        order_widget.update(format_cart(self.cart, self.order_selected_index))

    def _refresh_status(self) -> None:
        try:
            bar = self.query_one("#status-bar", Static)
        except NoMatches:
            return
        text = Text("j/k move  a add  [ ] pick line  + - qty  o order  f feedback  b bill  n new  s stats\n")
        text.append_text(format_status(self.system_status or "Ready", self.status_severity))
        bar.update(text)
