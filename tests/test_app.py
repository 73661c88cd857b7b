"""Pilot tests for the Textual ordering flow."""

from __future__ import annotations

import httpx
import pytest

from canteen.canteen_app import CanteenApp
from canteen.cart import load_cart, load_last_order
from canteen.config import SubmissionConfig
from canteen.customer_modal import CustomerModal
from canteen.feedback_modal import FeedbackModal
from canteen.models import SubmissionRecord
from canteen.persistence import FAILED_LEDGER_KEY, SUCCESS_LEDGER_KEY, SessionStorage, SubmissionLedger
from canteen.submission import SubmissionClient


async def _no_sleep(seconds: float) -> None:
    return None


def _build_app(tmp_path, handler, retry_sweep_delay: float | None = None) -> CanteenApp:
    storage = SessionStorage()
    submitter = SubmissionClient(
        SubmissionLedger(storage),
        config=SubmissionConfig(url="https://sheets.example/exec"),
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        sleep=_no_sleep,
    )
    return CanteenApp(
        storage=storage,
        submitter=submitter,
        menu_source=str(tmp_path / "missing.json"),
        invoice_path=str(tmp_path / "invoice.html"),
        retry_sweep_delay=retry_sweep_delay,
    )


@pytest.mark.asyncio
async def test_add_items_and_place_order(tmp_path):
    bodies = []

    def handler(request: httpx.Request) -> httpx.Response:
        request.read()
        bodies.append(request.content)
        return httpx.Response(200, json={"success": True})

    app = _build_app(tmp_path, handler)
    async with app.run_test() as pilot:
        await pilot.press("a", "a", "j", "a")
        assert [(line.name, line.quantity) for line in app.cart.items] == [
            ("Maggie Noodles", 2),
            ("Maggie Noodles", 1),
        ]
        assert app.cart.total == 12 * 2 + 17
        assert load_cart(app.storage) == app.cart

        await pilot.press("o")
        assert isinstance(app.screen, CustomerModal)
        await pilot.press("a", "s", "h", "a", "tab", "b", "1", "2", "tab")
        await pilot.press(*"9876543210")
        await pilot.press("enter")
        await pilot.pause()
        await app.workers.wait_for_complete()
        await pilot.pause()

        assert not isinstance(app.screen, CustomerModal)
        assert app.cart.is_empty
        assert app.system_status.startswith("Order placed successfully!")

    assert len(bodies) == 1
    assert b"asha" in bodies[0]
    last_order = load_last_order(app.storage)
    assert last_order["room"] == "b12"
    assert last_order["total"] == 41
    assert len(SubmissionLedger(app.storage).read_all(SUCCESS_LEDGER_KEY)) == 1
    assert app.submission_debug.get_stats().successful == 1


@pytest.mark.asyncio
async def test_customer_modal_rejects_bad_mobile(tmp_path):
    app = _build_app(tmp_path, lambda request: httpx.Response(200))
    async with app.run_test() as pilot:
        await pilot.press("a", "o")
        await pilot.press("a", "tab", "b", "tab", "1", "2", "3", "enter")
        assert isinstance(app.screen, CustomerModal)
        assert app.screen.error == "Please enter a valid 10-digit mobile number!"
        await pilot.press("escape")
        assert not isinstance(app.screen, CustomerModal)
        assert len(app.cart.items) == 1


@pytest.mark.asyncio
async def test_proceed_with_empty_cart_is_refused(tmp_path):
    app = _build_app(tmp_path, lambda request: httpx.Response(200))
    async with app.run_test() as pilot:
        await pilot.press("o")
        assert not isinstance(app.screen, CustomerModal)
        assert app.system_status == "Please add items to your order first!"


@pytest.mark.asyncio
async def test_send_feedback(tmp_path):
    bodies = []

    def handler(request: httpx.Request) -> httpx.Response:
        request.read()
        bodies.append(request.content)
        return httpx.Response(200, text="ok")

    app = _build_app(tmp_path, handler)
    async with app.run_test() as pilot:
        await pilot.press("f")
        assert isinstance(app.screen, FeedbackModal)
        await pilot.press(*"tasty")
        await pilot.press("enter")
        await pilot.pause()
        await app.workers.wait_for_complete()
        await pilot.pause()
        assert app.system_status == "Thank you for your feedback!"

    assert len(bodies) == 1
    assert b"tasty" in bodies[0]


@pytest.mark.asyncio
async def test_bill_requires_a_placed_order(tmp_path):
    app = _build_app(tmp_path, lambda request: httpx.Response(200))
    async with app.run_test() as pilot:
        await pilot.press("b")
        assert app.system_status == "No bill available to download!"
        assert not (tmp_path / "invoice.html").exists()


@pytest.mark.asyncio
async def test_failed_order_keeps_cart_and_queues_payload(tmp_path):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(500)

    app = _build_app(tmp_path, handler)
    async with app.run_test() as pilot:
        await pilot.press("a", "o")
        await pilot.press("a", "tab", "b", "1", "tab")
        await pilot.press(*"9876543210")
        await pilot.press("enter")
        await pilot.pause()
        await app.workers.wait_for_complete()
        await pilot.pause()

        assert app.system_status == "Failed to place order. Please try again!"
        assert app.status_severity == "error"
        assert [(line.name, line.quantity) for line in app.cart.items] == [("Maggie Noodles", 1)]
        assert not app.submitting

    assert len(calls) == 3
    failed = SubmissionLedger(app.storage).read_all(FAILED_LEDGER_KEY)
    assert len(failed) == 1
    assert failed[0].type == "order"
    assert failed[0].data["mobile"] == "9876543210"


@pytest.mark.asyncio
async def test_queued_submissions_are_replayed_after_startup(tmp_path):
    bodies = []

    def handler(request: httpx.Request) -> httpx.Response:
        request.read()
        bodies.append(request.content)
        return httpx.Response(200, json={"success": True})

    app = _build_app(tmp_path, handler, retry_sweep_delay=0.05)
    ledger = SubmissionLedger(app.storage)
    ledger.replace_all(
        FAILED_LEDGER_KEY,
        [
            SubmissionRecord(
                timestamp="2026-10-19T17:00:00+00:00",
                type="feedback",
                success=False,
                data={"feedback": "late night maggie", "source": "night_canteen_app"},
                attempts=3,
            )
        ],
    )

    async with app.run_test() as pilot:
        await pilot.pause(0.2)
        await app.workers.wait_for_complete()
        await pilot.pause()

        assert app.system_status == "Delivered 1 queued submission(s)"

    assert len(bodies) == 1
    assert b"late night maggie" in bodies[0]
    assert ledger.read_all(FAILED_LEDGER_KEY) == []
    assert len(ledger.read_all(SUCCESS_LEDGER_KEY)) == 1
