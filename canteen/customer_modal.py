"""Customer details modal screen."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static

from canteen.models import Cart
from canteen.rendering import format_cart
from canteen.validation import validate_payload

FIELDS = (("name", "Name"), ("room", "Room"), ("mobile", "Mobile"))
_MAX_FIELD_LENGTH = 40


class CustomerModal(ModalScreen[dict[str, str] | None]):
    """Collect name, room and mobile before an order is placed."""

    BINDINGS = [
        Binding("escape", "cancel", "Cancel", priority=True),
        Binding("tab", "cycle_field(1)", "Next field", priority=True),
        Binding("shift+tab", "cycle_field(-1)", "Previous field", priority=True),
        Binding("enter", "confirm", "Place order", priority=True),
        Binding("backspace", "backspace", "Delete char", priority=True),
    ]

    CSS = """
    CustomerModal {
        align: center middle;
        background: $background 60%;
    }

    #customer-dialog {
        width: 64;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #customer-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #customer-summary {
        margin-bottom: 1;
        color: white;
    }

    #customer-fields {
        border: heavy $secondary;
        padding: 0 1;
        color: white;
        margin-bottom: 1;
    }

    #customer-error {
        color: #ffb3b3;
        margin-bottom: 1;
    }

    #customer-help {
        color: #dddddd;
    }
    """

    def __init__(self, cart: Cart) -> None:
        super().__init__()
        self.cart = cart
        self.values = {key: "" for key, _ in FIELDS}
        self.active_field = 0
        self.error = ""

    def compose(self) -> ComposeResult:
        with Container(id="customer-dialog"):
            yield Static("Place Order", id="customer-title")
            yield Static(id="customer-summary")
            yield Static(id="customer-fields")
            yield Static(id="customer-error")
            yield Static("Tab next field. Enter place order. Backspace delete. Esc cancel.", id="customer-help")

    def on_mount(self) -> None:
        self.query_one("#customer-summary", Static).update(format_cart(self.cart, None))
        self._refresh_content()

    def on_key(self, event: Key) -> None:
        if event.is_printable and event.character:
            key = FIELDS[self.active_field][0]
            if len(self.values[key]) < _MAX_FIELD_LENGTH:
                self.values[key] += event.character
            self.error = ""
            self._refresh_content()
        event.stop()

    def action_cancel(self) -> None:
        self.dismiss(None)

    def action_cycle_field(self, delta: int) -> None:
        self.active_field = (self.active_field + delta) % len(FIELDS)
        self._refresh_content()

    def action_backspace(self) -> None:
        key = FIELDS[self.active_field][0]
        if self.values[key]:
            self.values[key] = self.values[key][:-1]
            self.error = ""
            self._refresh_content()

    def action_confirm(self) -> None:
        details = {key: value.strip() for key, value in self.values.items()}
        result = validate_payload(details)
        if not result:
            if any(reason.startswith("Missing") for reason in result.reasons):
                self.error = "Please fill in all required fields!"
            else:
                self.error = "Please enter a valid 10-digit mobile number!"
            self._refresh_content()
            return
        self.dismiss(details)

    def _refresh_content(self) -> None:
        fields = Text()
        for idx, (key, label) in enumerate(FIELDS):
            if idx > 0:
                fields.append("\n")
            active = idx == self.active_field
            fields.append("➤ " if active else "  ")
            fields.append(f"{label}: ", style="bold" if active else "")
            fields.append(self.values[key])
            if active:
                fields.append("|", style="bold")
        self.query_one("#customer-fields", Static).update(fields)
        self.query_one("#customer-error", Static).update(self.error or "")
