"""Tests for payload validation."""

from __future__ import annotations

import pytest

from canteen.validation import is_valid_mobile, validate_payload

VALID_ORDER = {"name": "Asha", "room": "B-204", "mobile": "9876543210"}


@pytest.mark.parametrize(
    "payload",
    [
        VALID_ORDER,
        {**VALID_ORDER, "mobile": "98765 43210"},
        {**VALID_ORDER, "mobile": " 98 76 54 32 10 "},
        {**VALID_ORDER, "items": [{"id": 1}], "total": 12},
        {**VALID_ORDER, "total": 0.5},
    ],
)
def test_valid_orders_pass(payload):
    result = validate_payload(payload)
    assert result
    assert result.reasons == ()


@pytest.mark.parametrize(
    ("payload", "reason"),
    [
        ({"room": "B-204", "mobile": "9876543210"}, "Missing or invalid required field: name"),
        ({**VALID_ORDER, "room": "   "}, "Missing or invalid required field: room"),
        ({**VALID_ORDER, "mobile": 9876543210}, "Missing or invalid required field: mobile"),
        ({**VALID_ORDER, "mobile": "987654321"}, "Invalid mobile number format"),
        ({**VALID_ORDER, "mobile": "98765432100"}, "Invalid mobile number format"),
        ({**VALID_ORDER, "mobile": "98765-43210"}, "Invalid mobile number format"),
        ({**VALID_ORDER, "items": []}, "Order must contain at least one item"),
        ({**VALID_ORDER, "items": "Maggie"}, "Order must contain at least one item"),
        ({**VALID_ORDER, "total": 0}, "Invalid total amount"),
        ({**VALID_ORDER, "total": -5}, "Invalid total amount"),
        ({**VALID_ORDER, "total": "12"}, "Invalid total amount"),
        ({**VALID_ORDER, "total": True}, "Invalid total amount"),
    ],
)
def test_invalid_orders_fail(payload, reason):
    result = validate_payload(payload)
    assert not result
    assert reason in result.reasons


def test_collects_every_reason():
    result = validate_payload({"mobile": "12"})
    assert result.reasons == (
        "Missing or invalid required field: name",
        "Missing or invalid required field: room",
        "Invalid mobile number format",
    )


def test_feedback_skips_order_checks():
    assert validate_payload({"feedback": "More coffee please", "mobile": "nope", "total": -1})


@pytest.mark.parametrize("feedback", ["   ", 42])
def test_blank_or_non_text_feedback_fails(feedback):
    assert not validate_payload({"feedback": feedback})


def test_empty_feedback_is_treated_as_order():
    result = validate_payload({"feedback": "", **VALID_ORDER})
    assert result


def test_non_mapping_fails():
    assert not validate_payload(["name", "room"])
    assert not validate_payload(None)


def test_mobile_requires_ascii_digits():
    assert is_valid_mobile("98765 43210")
    assert not is_valid_mobile("٩٨٧٦٥٤٣٢١٠")
