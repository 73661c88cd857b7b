"""Structural checks applied to every payload before it is sent."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from canteen.models import ValidationResult

REQUIRED_ORDER_FIELDS = ("name", "room", "mobile")

_MOBILE_RE = re.compile(r"[0-9]{10}")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_mobile(mobile: str) -> str:
    """Strip all whitespace from a mobile number."""
    return _WHITESPACE_RE.sub("", mobile)


def is_valid_mobile(mobile: str) -> bool:
    return _MOBILE_RE.fullmatch(normalize_mobile(mobile)) is not None


def validate_payload(payload: Any) -> ValidationResult:
    """Check an order or feedback payload and collect every failing reason."""
    if not isinstance(payload, Mapping):
        return ValidationResult(False, ("Form data must be an object",))

    feedback = payload.get("feedback")
    if feedback:
        if isinstance(feedback, str) and feedback.strip():
            return ValidationResult(True)
        return ValidationResult(False, ("Feedback must be non-empty text",))

    reasons: list[str] = []
    for field_name in REQUIRED_ORDER_FIELDS:
        value = payload.get(field_name)
        if not isinstance(value, str) or not value.strip():
            reasons.append(f"Missing or invalid required field: {field_name}")

    mobile = payload.get("mobile")
    if isinstance(mobile, str) and mobile.strip() and not is_valid_mobile(mobile):
        reasons.append("Invalid mobile number format")

    items = payload.get("items")
    if items is not None and (not isinstance(items, (list, tuple)) or len(items) == 0):
        reasons.append("Order must contain at least one item")

    total = payload.get("total")
    if total is not None and (isinstance(total, bool) or not isinstance(total, (int, float)) or total <= 0):
        reasons.append("Invalid total amount")

    return ValidationResult(not reasons, tuple(reasons))
